"""End-to-end daemon wiring with mocked collaborators."""

from __future__ import annotations

import asyncio

from mint_announcer.daemon import AnnouncerDaemon
from mint_announcer.models.records import ItemMetadata

from tests.conftest import DESTINATIONS, TEST_TOKEN, make_test_config
from tests.factories import ALICE, make_mint_log
from tests.mocks import MockChain, MockChat, MockLogStream, MockMetadata, wait_until


async def test_mint_is_announced_to_every_destination():
    stream = MockLogStream([make_mint_log(42, block_number=101, recipient=ALICE)])
    chain = MockChain(head=100, streams=[stream], names={ALICE: "alice.eth"})
    chat = MockChat(failing={222})
    metadata = MockMetadata({42: ItemMetadata(name="Plug #42")})
    daemon = AnnouncerDaemon(make_test_config(), chain=chain, chat=chat, metadata=metadata)

    task = asyncio.create_task(daemon.start())
    await wait_until(lambda: len(chat.attempts) == len(DESTINATIONS))
    await daemon.stop()
    await asyncio.wait_for(task, 3)

    assert chat.tokens == [TEST_TOKEN]
    assert [d for d, _ in chat.sent] == [111, 333]
    assert chat.sent[0][1].startswith("Plug #42 (#42) minted by alice.eth https://items.example/")
    assert daemon.channel.closed


async def test_duplicate_mints_across_reconnect_announced_once():
    mint = make_mint_log(7, block_number=99)
    streams = [
        MockLogStream([mint, ConnectionResetError("dropped")]),
        MockLogStream([mint]),
    ]
    chain = MockChain(head=100, logs=[mint], streams=streams)
    chat = MockChat()
    daemon = AnnouncerDaemon(make_test_config(), chain=chain, chat=chat, metadata=MockMetadata())

    task = asyncio.create_task(daemon.start())
    await wait_until(lambda: chain.open_calls >= 2 and not streams[1].items)
    await wait_until(lambda: len(chat.sent) == len(DESTINATIONS))
    await asyncio.sleep(0.05)
    await daemon.stop()
    await asyncio.wait_for(task, 3)

    assert len(chat.sent) == len(DESTINATIONS)


async def test_chat_login_is_retried():
    chat = MockChat(login_failures=2)
    daemon = AnnouncerDaemon(
        make_test_config(), chain=MockChain(head=10), chat=chat, metadata=MockMetadata(),
    )

    task = asyncio.create_task(daemon.start())
    await asyncio.wait_for(chat.wait_until_ready(), 2)
    await daemon.stop()
    await asyncio.wait_for(task, 3)

    assert len(chat.tokens) == 3


async def test_stop_before_chat_ready_still_shuts_down():
    chat = MockChat(login_failures=1000)
    daemon = AnnouncerDaemon(
        make_test_config(), chain=MockChain(head=10), chat=chat, metadata=MockMetadata(),
    )

    task = asyncio.create_task(daemon.start())
    await wait_until(lambda: len(chat.tokens) >= 1)
    await daemon.stop()
    await asyncio.wait_for(task, 5)

    assert daemon.stopping
