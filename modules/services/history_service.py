"""Generation history tracking."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from modules.pipelines.cover_generator import GenerationParams


def _new_cover_id() -> str:
    return uuid.uuid4().hex[:9]


@dataclass(frozen=True, slots=True)
class GeneratedCover:
    """A successfully generated cover and the params that produced it."""

    url: str
    params: GenerationParams
    id: str = field(default_factory=_new_cover_id)
    timestamp: float = field(default_factory=time.time)


class CoverHistory:
    """In-memory, most-recent-first list of generated covers."""

    def __init__(self, limit: int = 5) -> None:
        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self.limit = limit
        self._covers: List[GeneratedCover] = []

    def record(self, cover: GeneratedCover) -> None:
        """Prepend a cover, evicting the oldest entries beyond the limit."""
        self._covers = [cover, *self._covers][: self.limit]

    def list(self) -> List[GeneratedCover]:
        """Return the covers, most recent first."""
        return list(self._covers)

    def get(self, cover_id: str) -> Optional[GeneratedCover]:
        for cover in self._covers:
            if cover.id == cover_id:
                return cover
        return None

    def __len__(self) -> int:
        return len(self._covers)

