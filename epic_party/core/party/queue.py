"""
FIFO ordering primitive for coroutines.
"""

from __future__ import annotations

import asyncio
from collections import deque
from contextlib import asynccontextmanager
from typing import AsyncIterator

__all__ = ["AsyncQueue"]


class AsyncQueue:
    """
    Grants turns to coroutines strictly in the order they called
    {obj}`AsyncQueue.wait`. The head of the queue holds the turn until it
    calls {obj}`AsyncQueue.shift`.
    """

    _entries: deque[asyncio.Future[None]]
    """
    One future per waiting or active entry; each is resolved when that entry
    releases its turn, which hands the turn to the next entry.
    """

    def __init__(self):
        self._entries = deque()

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def remaining(self) -> int:
        """
        Number of entries, including the one holding the turn.
        """
        return len(self._entries)

    async def wait(self):
        """
        Wait until all previous entries have released their turn. If
        cancelled while waiting, the entry is removed without disturbing the
        entries before or after it.
        """
        previous = self._entries[-1] if self._entries else None

        entry = asyncio.get_running_loop().create_future()
        self._entries.append(entry)

        if previous is None:
            return

        try:
            await asyncio.shield(previous)
        except asyncio.CancelledError:
            # leave the queue; the next entry gets its turn once ours would have
            self._entries.remove(entry)
            previous.add_done_callback(lambda _: _release(entry))
            raise

    def shift(self):
        """
        Release the turn held by the head entry.
        """
        assert self._entries, "Attempt to release turn of empty queue"
        _release(self._entries.popleft())

    @asynccontextmanager
    async def turn(self) -> AsyncIterator[None]:
        """
        Hold a turn for the duration of the context; released on every exit
        path.
        """
        await self.wait()
        try:
            yield
        finally:
            self.shift()


def _release(entry: asyncio.Future[None]):
    if not entry.done():
        entry.set_result(None)
