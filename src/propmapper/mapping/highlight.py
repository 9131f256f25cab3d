"""Scheduled clearing of the transient highlight on auto-assigned rows."""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class HighlightScheduler:
    """Runs one cancellable callback per row after a fixed delay."""

    def __init__(self, delay_seconds: float = 3.0):
        self.delay_seconds = delay_seconds
        self._handles: dict[str, asyncio.TimerHandle] = {}

    def schedule(
        self,
        key: str,
        callback: Callable[[str], None],
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        """Call ``callback(key)`` after the delay, replacing any pending call for ``key``."""
        self.cancel(key)
        loop = loop or asyncio.get_running_loop()

        def _fire():
            self._handles.pop(key, None)
            callback(key)

        self._handles[key] = loop.call_later(self.delay_seconds, _fire)

    def cancel(self, key: str) -> bool:
        handle = self._handles.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> int:
        """Discard every pending callback; returns how many were cancelled."""
        count = len(self._handles)
        for handle in self._handles.values():
            handle.cancel()
        self._handles.clear()
        if count:
            logger.debug(f"Cancelled {count} pending highlight timers")
        return count

    def pending(self) -> int:
        return len(self._handles)
