"""
Test ordering of turns granted by {obj}`AsyncQueue`.
"""

import asyncio

from pytest import mark, raises

from epic_party import *


@mark.asyncio
async def test_fifo():
    queue = AsyncQueue()
    order: list[int] = []

    async def worker(index: int):
        async with queue.turn():
            order.append(index)
            # yield so other workers get a chance to cut in line
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            order.append(index)

    await asyncio.gather(*(worker(i) for i in range(5)))

    assert order == [0, 0, 1, 1, 2, 2, 3, 3, 4, 4]
    assert len(queue) == 0


@mark.asyncio
async def test_release_on_error():
    """
    Turn is released when the holder fails.
    """
    queue = AsyncQueue()

    with raises(RuntimeError):
        async with queue.turn():
            raise RuntimeError("failed")

    assert queue.remaining == 0

    async with queue.turn():
        assert queue.remaining == 1


@mark.asyncio
async def test_wait_shift():
    queue = AsyncQueue()

    await queue.wait()
    assert queue.remaining == 1

    second = asyncio.create_task(queue.wait())
    await asyncio.sleep(0)

    assert not second.done()
    assert queue.remaining == 2

    queue.shift()
    await second

    assert queue.remaining == 1
    queue.shift()
    assert queue.remaining == 0


@mark.asyncio
async def test_cancel_waiting():
    """
    Cancelling a waiting entry hands the turn to the entry behind it once
    the holder releases, without disturbing the holder.
    """
    queue = AsyncQueue()

    await queue.wait()

    cancelled = asyncio.create_task(queue.wait())
    third = asyncio.create_task(queue.wait())
    await asyncio.sleep(0)
    assert queue.remaining == 3

    cancelled.cancel()
    with raises(asyncio.CancelledError):
        await cancelled

    assert queue.remaining == 2
    assert not third.done()

    queue.shift()
    await third

    assert queue.remaining == 1
    queue.shift()
    assert queue.remaining == 0

    # queue is still usable
    async with queue.turn():
        assert queue.remaining == 1
