"""Per-session state for the cover generation page."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import List, Optional, Protocol, Sequence

from modules.pipelines.cover_generator import GenerationParams
from modules.pipelines.errors import KeyRequiredError, ValidationError
from modules.services.history_service import CoverHistory, GeneratedCover
from modules.services.key_selection import KeySelector

logger = logging.getLogger(__name__)

LOADING_MESSAGES = (
    "Mixing the perfect colors...",
    "Sketching the layout...",
    "Applying typography...",
    "Polishing the final design...",
    "Almost ready for print...",
)
KEY_REQUIRED_MESSAGE = "To use the Pro model, please select a valid API key with billing enabled."
GENERIC_FAILURE_MESSAGE = "Failed to generate cover. Please try again."


class CoverGenerator(Protocol):
    async def generate(self, params: GenerationParams) -> str:
        ...


class SessionState(str, Enum):
    """Lifecycle of the generation page."""

    IDLE = "idle"
    GENERATING = "generating"
    READY = "ready"
    FAILED = "failed"


class LoadingTicker:
    """Cancellable timer rotating through loading messages."""

    def __init__(self, messages: Sequence[str] = LOADING_MESSAGES, interval: float = 2.5) -> None:
        if not messages:
            raise ValueError("LoadingTicker needs at least one message")
        self.messages = tuple(messages)
        self.interval = interval
        self.index = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def message(self) -> str:
        return self.messages[self.index]

    def advance(self) -> None:
        self.index = (self.index + 1) % len(self.messages)

    def start(self) -> None:
        """Start ticking on the running event loop."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        """Cancel the timer task; safe to call when not running."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.advance()


class CoverSession:
    """State controller for one user session.

    Holds the current cover, a bounded history, and the error shown next to
    the form. Only one generation can be in flight at a time.
    """

    def __init__(
        self,
        generator: CoverGenerator,
        key_selector: KeySelector,
        history_limit: int = 5,
        loading_interval: float = 2.5,
    ) -> None:
        self.generator = generator
        self.key_selector = key_selector
        self.history = CoverHistory(limit=history_limit)
        self.ticker = LoadingTicker(interval=loading_interval)
        self.state = SessionState.IDLE
        self.current: Optional[GeneratedCover] = None
        self.error: Optional[str] = None

    @property
    def is_generating(self) -> bool:
        return self.state is SessionState.GENERATING

    @property
    def loading_message(self) -> Optional[str]:
        if not self.is_generating:
            return None
        return self.ticker.message

    def covers(self) -> List[GeneratedCover]:
        return self.history.list()

    async def generate(self, params: GenerationParams) -> Optional[GeneratedCover]:
        """Run one generation attempt and return the new cover on success."""
        if self.is_generating:
            logger.warning("Generation already in progress, ignoring trigger")
            return None

        try:
            params.validate()
        except ValidationError as exc:
            self.error = str(exc)
            return None

        self.error = None
        if params.is_pro:
            await self._preflight_key()

        self._enter_generating()
        try:
            url = await self.generator.generate(params)
        except KeyRequiredError:
            self._leave_generating(SessionState.FAILED, KEY_REQUIRED_MESSAGE)
            await self._reopen_key_selection()
            return None
        except Exception:  # noqa: BLE001
            logger.exception("Cover generation failed for %r", params.title)
            self._leave_generating(SessionState.FAILED, GENERIC_FAILURE_MESSAGE)
            return None
        else:
            cover = GeneratedCover(url=url, params=params)
            self.history.record(cover)
            self.current = cover
            self._leave_generating(SessionState.READY)
        finally:
            # Cancellation is the only way to get here still generating.
            if self.is_generating:
                self._leave_generating(SessionState.FAILED, GENERIC_FAILURE_MESSAGE)

        logger.info("Cover %s generated for %r", cover.id, params.title)
        return cover

    def select(self, cover_id: str) -> Optional[GeneratedCover]:
        """Show a history entry again without touching the history."""
        cover = self.history.get(cover_id)
        if cover is None:
            logger.debug("Ignoring selection of unknown cover %s", cover_id)
            return None
        self.current = cover
        if not self.is_generating:
            self.state = SessionState.READY
        return cover

    def _enter_generating(self) -> None:
        self.state = SessionState.GENERATING
        self.ticker.start()

    def _leave_generating(self, state: SessionState, error: Optional[str] = None) -> None:
        self.ticker.stop()
        self.state = state
        if error is not None:
            self.error = error

    async def _preflight_key(self) -> None:
        # Fail-open: a broken key query must not block generation.
        try:
            if not await self.key_selector.has_selected_api_key():
                await self.key_selector.open_select_key()
        except Exception as exc:  # noqa: BLE001
            logger.error("API key selection check failed: %s", exc)

    async def _reopen_key_selection(self) -> None:
        try:
            await self.key_selector.open_select_key()
        except Exception as exc:  # noqa: BLE001
            logger.error("Could not open API key selection: %s", exc)
