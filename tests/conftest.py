"""Shared fixtures for mint_announcer tests."""

from __future__ import annotations

import pytest

from mint_announcer.chain.listener import ChainListener
from mint_announcer.chain.naming import NameResolver
from mint_announcer.models.config import (
    AnnouncerConfig,
    ChainConfig,
    DiscordConfig,
    ListenerMode,
    MetadataConfig,
)
from mint_announcer.notify.channel import NotificationChannel
from mint_announcer.notify.dispatcher import NotificationDispatcher

from tests.factories import CONTRACT
from tests.mocks import MockChain, MockChat, MockMetadata

TEST_TOKEN = "mock-bot-token"
DESTINATIONS = [111, 222, 333]


def make_test_config(**overrides) -> AnnouncerConfig:
    """Build an AnnouncerConfig with fast timings suitable for testing."""
    chain = ChainConfig(
        rpc_url="http://127.0.0.1:8545",
        ws_url="ws://127.0.0.1:8546",
        contract_address=CONTRACT,
        listener_mode=ListenerMode.STREAM,
        lookback_blocks=100,
        reconnect_backoff=0.01,
        liveness_interval=0.05,
        fallback_after_failures=3,
        fallback_poll_cycles=2,
        poll_block_range=10_000,
        poll_interval=0.01,
        poll_error_backoff=0.01,
        resolve_timeout=0.5,
    )
    defaults = dict(
        log_level="debug",
        dedup_capacity=10,
        chain=chain,
        discord=DiscordConfig(
            token=TEST_TOKEN,
            channels=list(DESTINATIONS),
            message_format="{name} (#{item_id}) minted by {recipient} {url}",
            login_backoff=0.01,
            drain_timeout=1.0,
        ),
        metadata=MetadataConfig(
            base_url="",
            item_url_format="https://items.example/{contract}/{item_id}",
        ),
    )
    defaults.update(overrides)
    return AnnouncerConfig(**defaults)


def make_listener(chain, channel, resolver=None, **overrides) -> ChainListener:
    """ChainListener with test timings; keyword overrides win."""
    options = dict(
        lookback_blocks=100,
        reconnect_backoff=0.01,
        liveness_interval=0.05,
        fallback_after_failures=3,
        fallback_poll_cycles=2,
        poll_block_range=10_000,
        poll_interval=0.01,
        poll_error_backoff=0.01,
    )
    options.update(overrides)
    return ChainListener(
        chain,
        resolver or NameResolver(chain, timeout=0.5),
        channel,
        CONTRACT,
        **options,
    )


@pytest.fixture
def test_config():
    """Default AnnouncerConfig for tests."""
    return make_test_config()


@pytest.fixture
def channel():
    return NotificationChannel()


@pytest.fixture
def mock_chain():
    return MockChain(head=100)


@pytest.fixture
def mock_chat():
    chat = MockChat()
    chat.mark_ready()
    return chat


@pytest.fixture
def mock_metadata():
    return MockMetadata()


@pytest.fixture
def dispatcher(channel, mock_chat, mock_metadata):
    """Dispatcher over three destinations with mocked collaborators."""
    return NotificationDispatcher(
        channel=channel,
        chat=mock_chat,
        destinations=DESTINATIONS,
        metadata=mock_metadata,
        message_format="{name} (#{item_id}) minted by {recipient} {url}",
        item_url_format="https://items.example/{contract}/{item_id}",
        contract_address=CONTRACT,
        dedup_capacity=10,
    )
