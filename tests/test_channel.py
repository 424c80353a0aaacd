"""Notification channel: FIFO, non-blocking writes, close semantics."""

from __future__ import annotations

import asyncio

from mint_announcer.models.events import Notification
from mint_announcer.notify.channel import NotificationChannel

from tests.mocks import drain


async def test_fifo_order(channel):
    for i in range(5):
        assert channel.try_write(f"user{i}", i)

    items = await drain(channel)

    assert [n.item_id for n in items] == [0, 1, 2, 3, 4]
    assert items[0] == Notification(recipient="user0", item_id=0)


async def test_write_never_blocks_on_slow_reader(channel):
    """Writes complete immediately while the reader is busy."""
    release = asyncio.Event()
    received: list[int] = []

    async def slow_reader():
        async for n in channel:
            received.append(n.item_id)
            await release.wait()

    reader = asyncio.create_task(slow_reader())
    channel.try_write("a", 1)
    await asyncio.sleep(0.01)  # reader now stuck on item 1

    loop = asyncio.get_running_loop()
    started = loop.time()
    for i in range(2, 1002):
        assert channel.try_write("a", i) is True
    assert loop.time() - started < 0.5
    assert channel.qsize() == 1000

    release.set()
    channel.close()
    await asyncio.wait_for(reader, 2)
    assert received == list(range(1, 1002))


async def test_write_after_close_is_dropped(channel):
    channel.close()
    assert channel.closed
    assert channel.try_write("late", 1) is False


async def test_close_drains_queued_items_then_ends():
    channel = NotificationChannel()
    channel.try_write("a", 1)
    channel.try_write("b", 2)
    channel.close()
    channel.close()  # idempotent

    items = [n async for n in channel]
    assert [n.item_id for n in items] == [1, 2]
