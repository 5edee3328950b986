"""File storage helpers."""

from __future__ import annotations

import logging
from pathlib import Path

from modules.services.history_service import GeneratedCover
from modules.utils.image_utils import cover_filename, decode_data_uri

logger = logging.getLogger(__name__)


class StorageService:
    """Write covers to disk so the browser can download them."""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = Path(output_dir)

    def save_cover(self, cover: GeneratedCover) -> Path:
        """Persist a cover under a filename derived from its title."""
        target_dir = self.output_dir / cover.id
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / cover_filename(cover.params.title)
        path.write_bytes(decode_data_uri(cover.url))
        logger.info("Saved cover %s to %s", cover.id, path)
        return path
