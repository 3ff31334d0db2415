# page_scout/crawler/rate_limit.py
"""
Pacing between crawler requests.

The crawler awaits :meth:`Pacer.wait` after every processed page; tests pass
``Pacer(0)`` to run without real-time waits.
"""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

Sleep = Callable[[float], Awaitable[None]]

DEFAULT_DELAY = 1.0


class Pacer:
    """Sleeps a fixed ``interval`` each time the crawler finishes a page."""

    def __init__(self, interval: float = DEFAULT_DELAY, sleep: Optional[Sleep] = None) -> None:
        if interval < 0:
            raise ValueError("interval must be >= 0")
        self.interval = interval
        self._sleep: Sleep = sleep or asyncio.sleep
        self._lock = asyncio.Lock()
        self.waits = 0

    async def wait(self) -> None:
        """Pause before the next request."""
        async with self._lock:
            self.waits += 1
            if self.interval > 0:
                await self._sleep(self.interval)
