import asyncio
from typing import Callable, Optional


class DebounceTimer:
    """Run ``callback`` once, ``delay`` seconds after the last ``schedule()``."""

    def __init__(self, loop: asyncio.AbstractEventLoop, delay: float, callback: Callable[[], None]):
        self.loop = loop
        self.delay = delay
        self.callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self):
        self.cancel()
        self._handle = self.loop.call_later(self.delay, self._fire)

    def cancel(self) -> bool:
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        return True

    def fire_now(self) -> bool:
        """Run a pending callback immediately instead of waiting."""
        if not self.cancel():
            return False
        self.callback()
        return True

    def _fire(self):
        self._handle = None
        self.callback()
