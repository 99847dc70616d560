"""
Trailing debounce for free-text search input
"""
from typing import Any, Callable, Optional, Protocol
import asyncio
import logging

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything that can run a callback later, e.g. an asyncio event loop"""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


class SearchCoalescer:
    """
    Collapses bursts of keystrokes into one committed search value.

    Every ``push`` restarts the quiet period; ``on_commit`` fires once the
    input has been still for ``delay`` seconds.
    """

    def __init__(
        self,
        on_commit: Callable[[str], None],
        delay: float = 0.5,
        scheduler: Optional[Scheduler] = None,
    ):
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self.on_commit = on_commit
        self.delay = delay
        self._scheduler = scheduler
        self._handle: Optional[TimerHandle] = None
        self.raw = ""
        self.committed = ""

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def push(self, value: str) -> None:
        """Record a raw input value and restart the timer"""
        self.raw = value
        self.cancel()
        scheduler = self._scheduler or asyncio.get_running_loop()
        self._handle = scheduler.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        """Drop a pending commit"""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def reset(self, value: str = "") -> None:
        """Cancel and set both raw and committed values without notifying"""
        self.cancel()
        self.raw = value
        self.committed = value

    def _fire(self) -> None:
        self._handle = None
        self.committed = self.raw
        logger.debug(f"Search committed: {self.committed!r}")
        self.on_commit(self.committed)
