"""Bounded result channel between request tasks and the aggregator."""

import asyncio
from typing import AsyncIterator, Optional

from fuzzy.core.errors import ChannelClosedError
from fuzzy.core.models import FuzzingResult

_CLOSED = object()


class ResultChannel:
    """
    Many producers, one consumer. ``send`` suspends while the queue is full,
    which is what throttles the dispatcher when the aggregator falls behind.

    ``close`` must be called once every producer is done; it enqueues an
    end marker behind whatever is still buffered, so the consumer drains
    everything before it sees the channel as closed.
    """

    def __init__(self, size: int = 32):
        if size < 1:
            raise ValueError("channel size must be >= 1")
        self.size = size
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=size)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        return self._queue.qsize()

    async def send(self, result: FuzzingResult) -> None:
        if self._closed:
            raise ChannelClosedError("send on closed result channel")
        await self._queue.put(result)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._queue.put(_CLOSED)

    async def receive(self) -> Optional[FuzzingResult]:
        """Next result, or None once the channel is closed and drained."""
        item = await self._queue.get()
        if item is _CLOSED:
            # keep the marker for any later receive() call
            self._queue.put_nowait(_CLOSED)
            return None
        return item

    def __aiter__(self) -> AsyncIterator[FuzzingResult]:
        return self._iter()

    async def _iter(self):
        while True:
            item = await self.receive()
            if item is None:
                return
            yield item
