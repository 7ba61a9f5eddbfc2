"""Debounced delivery of search input."""
import asyncio
from typing import Any, Callable, Optional
import logging

logger = logging.getLogger(__name__)


class Debouncer:
    """Deliver only the last value of a burst, after ``delay`` seconds of quiet.

    Each call cancels the pending delivery before scheduling its own, so
    superseded values are dropped rather than queued. Must be used from a
    running event loop.
    """

    def __init__(self, callback: Callable[[Any], None], delay: float = 0.3):
        self.callback = callback
        self.delay = delay
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def call(self, value: Any):
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, value)

    def cancel(self):
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, value: Any):
        self._handle = None
        logger.debug(f"Debounced value delivered: {value!r}")
        self.callback(value)
