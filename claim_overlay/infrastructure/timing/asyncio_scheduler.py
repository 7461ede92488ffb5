"""Scheduler adapter backed by the running asyncio event loop."""

import asyncio
from typing import Callable, Optional

from ...domain.ports.scheduler import TimerHandle


class AsyncioScheduler:
    """Runs delayed callbacks on an asyncio loop via call_later."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return self.loop.call_later(max(0.0, delay), callback)

    def time(self) -> float:
        return self.loop.time()
