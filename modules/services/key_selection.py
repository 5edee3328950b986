"""API key selection collaborators."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from config.settings import AppConfig, resolve_api_key

logger = logging.getLogger(__name__)


@runtime_checkable
class KeySelector(Protocol):
    """Host capability that knows whether an API key was selected."""

    async def has_selected_api_key(self) -> bool:
        ...

    async def open_select_key(self) -> None:
        ...


class EnvironmentKeySelector:
    """Key selection backed by the process environment and the .env file.

    A key counts as selected when ``config.api_key`` is set. Opening the
    selection re-reads the .env file so a key added while the app runs is
    picked up on the next request.
    """

    def __init__(self, config: AppConfig) -> None:
        self.config = config

    async def has_selected_api_key(self) -> bool:
        return bool(self.config.api_key)

    async def open_select_key(self) -> None:
        api_key = resolve_api_key(self.config.env_path)
        if not api_key:
            logger.warning(
                "No Gemini API key configured; set GEMINI_API_KEY in %s. "
                "Pro models require a paid project, see %s",
                self.config.env_path,
                self.config.billing_docs_url,
            )
            return
        if api_key != self.config.api_key:
            logger.info("Picked up a new API key from the environment")
            self.config.api_key = api_key
