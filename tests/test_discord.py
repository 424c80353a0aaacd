"""Discord chat client on top of discord.py, with the gateway stubbed out."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import discord
import pytest

from mint_announcer.notify.discord import DiscordChatClient


class FakeTextChannel(discord.abc.Messageable):
    """A messageable channel that records what was sent to it."""

    def __init__(self, channel_id: int) -> None:
        self.id = channel_id
        self.sent: list[str] = []

    async def _get_channel(self):
        return self

    async def send(self, content=None, **kwargs):
        self.sent.append(content)


def _http_error(cls, status: int, reason: str):
    return cls(SimpleNamespace(status=status, reason=reason), {"code": 0, "message": reason})


def _client(cached=None, remote=None) -> DiscordChatClient:
    """Client whose channel cache and REST lookups are dictionaries."""
    cached = dict(cached or {})
    remote = dict(remote or {})
    client = DiscordChatClient()
    client.fetch_calls = []

    async def fetch_channel(channel_id):
        client.fetch_calls.append(channel_id)
        found = remote.get(channel_id)
        if isinstance(found, Exception):
            raise found
        if found is None:
            raise _http_error(discord.NotFound, 404, "Unknown Channel")
        return found

    client.get_channel = cached.get
    client.fetch_channel = fetch_channel
    return client


async def test_default_intents_are_guilds_only():
    client = DiscordChatClient()
    assert client.intents.guilds
    assert not client.intents.message_content
    assert not client.intents.members


async def test_login_delegates_to_discord(monkeypatch):
    tokens = []

    async def fake_login(self, token):
        tokens.append(token)

    monkeypatch.setattr(discord.Client, "login", fake_login)
    client = DiscordChatClient()
    await client.login("good-token")
    assert tokens == ["good-token"]


async def test_login_failure_propagates(monkeypatch):
    async def rejected(self, token):
        raise discord.LoginFailure("Improper token has been passed.")

    monkeypatch.setattr(discord.Client, "login", rejected)
    client = DiscordChatClient()
    with pytest.raises(discord.LoginFailure):
        await client.login("bad-token")


async def test_ready_waits_for_gateway_ready_event():
    client = DiscordChatClient()
    waiter = asyncio.create_task(client.wait_until_ready())
    await asyncio.sleep(0.01)
    assert not waiter.done()

    await client.on_ready()
    await asyncio.wait_for(waiter, 1)


async def test_close_clears_ready():
    client = DiscordChatClient()
    await client.on_ready()
    await client.close()

    assert client.is_closed()
    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(client.wait_until_ready(), 0.05)


async def test_cached_channel_is_used_without_fetch():
    mints = FakeTextChannel(10)
    client = _client(cached={10: mints})

    assert await client.get_sendable(10) is mints
    assert client.fetch_calls == []


async def test_uncached_channel_is_fetched():
    mints = FakeTextChannel(10)
    client = _client(remote={10: mints})

    assert await client.get_sendable(10) is mints
    assert client.fetch_calls == [10]


async def test_missing_or_forbidden_channel_is_not_sendable():
    client = _client(remote={20: _http_error(discord.Forbidden, 403, "Missing Access")})

    assert await client.get_sendable(20) is None
    assert await client.get_sendable(30) is None


async def test_non_text_channel_is_not_sendable():
    category = SimpleNamespace(id=40, name="Announcements")
    client = _client(cached={40: category})
    assert await client.get_sendable(40) is None


async def test_other_fetch_errors_propagate():
    client = _client(remote={50: _http_error(discord.HTTPException, 500, "Internal Server Error")})
    with pytest.raises(discord.HTTPException):
        await client.get_sendable(50)


async def test_send_posts_text_to_channel():
    mints = FakeTextChannel(10)
    client = _client(cached={10: mints})

    sendable = await client.get_sendable(10)
    await client.send(sendable, "Plug #1 was just minted")

    assert mints.sent == ["Plug #1 was just minted"]
