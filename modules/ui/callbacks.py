"""Callback implementations for the Gradio interface."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from config.settings import AppConfig
from modules.pipelines.cover_generator import GenerationParams, ModelTier, parse_tier
from modules.services.key_selection import EnvironmentKeySelector, KeySelector
from modules.services.session import CoverGenerator, CoverSession
from modules.services.storage_service import StorageService
from modules.utils.image_utils import generate_thumbnail, load_image

logger = logging.getLogger(__name__)

GalleryItem = Tuple[Any, str]


def build_callbacks(
    config: AppConfig,
    generator: Optional[CoverGenerator] = None,
    key_selector: Optional[KeySelector] = None,
    storage: Optional[StorageService] = None,
) -> dict[str, Any]:
    """Return a dictionary of Gradio callback functions."""

    selector = key_selector or EnvironmentKeySelector(config)
    store = storage or StorageService(config.download_dir)

    model_entries = config.metadata.get("available_models", [])
    tier_labels: Dict[str, str] = {}
    if isinstance(model_entries, list):
        for item in model_entries:
            if not isinstance(item, dict):
                continue
            value = str(item.get("value") or "")
            label = str(item.get("label") or value)
            if value:
                tier_labels[label] = value

    def _ensure_generator() -> CoverGenerator:
        if generator is None:
            raise RuntimeError("Cover generation service is not configured")
        return generator

    def _tier_value(selection: Any) -> Any:
        """Map a radio label to its tier value."""
        return tier_labels.get(str(selection or ""), selection)

    def new_session() -> CoverSession:
        return CoverSession(
            _ensure_generator(),
            selector,
            history_limit=config.history_limit,
            loading_interval=config.loading_interval,
        )

    def _gallery(session: CoverSession) -> List[GalleryItem]:
        items: List[GalleryItem] = []
        for cover in session.covers():
            try:
                items.append((generate_thumbnail(load_image(cover.url)), cover.params.title))
            except (OSError, ValueError) as exc:
                logger.warning("Skipping unreadable cover %s: %s", cover.id, exc)
        return items

    def _render(session: CoverSession) -> tuple[CoverSession, Optional[Any], str, List[GalleryItem]]:
        image = None
        if session.current is not None:
            try:
                image = load_image(session.current.url)
            except (OSError, ValueError) as exc:
                logger.error("Cannot display cover %s: %s", session.current.id, exc)
        return session, image, session.error or "", _gallery(session)

    async def on_generate(
        session: Optional[CoverSession],
        title: str,
        author: str,
        genre: str,
        style: str,
        description: str,
        model: str,
        image_size: Optional[str],
    ) -> tuple[CoverSession, Optional[Any], str, List[GalleryItem]]:
        session = session or new_session()
        params = GenerationParams.from_form(
            title=title,
            author=author,
            genre=genre,
            style=style,
            description=description,
            model=_tier_value(model),
            image_size=image_size,
        )
        await session.generate(params)
        return _render(session)

    def on_select_history(
        session: Optional[CoverSession], index: int
    ) -> tuple[CoverSession, Optional[Any], str, List[GalleryItem]]:
        session = session or new_session()
        covers = session.covers()
        if 0 <= index < len(covers):
            session.select(covers[index].id)
        return _render(session)

    def on_tick(session: Optional[CoverSession]) -> str:
        if session is None:
            return ""
        return session.loading_message or ""

    def on_change_model(selection: str) -> bool:
        """Return whether the output size selector applies to the tier."""
        return parse_tier(_tier_value(selection)) is ModelTier.PRO

    def on_download(session: Optional[CoverSession]) -> Optional[str]:
        if session is None or session.current is None:
            return None
        try:
            return str(store.save_cover(session.current))
        except (OSError, ValueError) as exc:
            logger.error("Download failed for cover %s: %s", session.current.id, exc)
            return None

    return {
        "new_session": new_session,
        "on_generate": on_generate,
        "on_select_history": on_select_history,
        "on_tick": on_tick,
        "on_change_model": on_change_model,
        "on_download": on_download,
    }
