"""CallbackChannel: in-memory queue between content edits and the dispatch loop.

Producers (background sends scheduled by content edits) call ``send``; the
single consumer (``CallbackService.run``) calls ``receive``. Bounded: a full
channel makes ``send`` wait until the consumer catches up.
"""

from __future__ import annotations

import asyncio

from .types import ChangeNotification


class CallbackChannel:
    def __init__(self, capacity: int = 100) -> None:
        if capacity < 1:
            raise ValueError(f"Channel capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._queue: asyncio.Queue[ChangeNotification] = asyncio.Queue(maxsize=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def qsize(self) -> int:
        return self._queue.qsize()

    async def send(self, notification: ChangeNotification) -> None:
        """Enqueue, waiting while the channel is full."""
        await self._queue.put(notification)

    async def receive(self) -> ChangeNotification:
        """Wait for the next notification. Reserved for the dispatch loop."""
        return await self._queue.get()
