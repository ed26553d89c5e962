"""Event-loop scheduling used by workspace sessions."""

import asyncio
from typing import Any, Callable, Coroutine, Optional


class AsyncioScheduler:
    """Wraps an asyncio event loop: monotonic clock, wake-ups and tasks.

    Sessions only talk to this small surface so the countdown can be driven by
    virtual time in tests.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.loop = loop or asyncio.get_running_loop()

    def now(self) -> float:
        """Get the loop's monotonic time in seconds."""
        return self.loop.time()

    def call_later(self, delay: float, callback: Callable[[], Any]) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Run a coroutine as a background task."""
        return self.loop.create_task(coro)
