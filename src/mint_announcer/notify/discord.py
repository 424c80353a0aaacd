"""Discord bot client built on discord.py."""

from __future__ import annotations

import asyncio
import logging

import discord

log = logging.getLogger(__name__)


class DiscordChatClient(discord.Client):
    """Gateway-connected bot that posts announcements.

    - login(): authenticate the bot token over REST
    - connect(): open the Gateway session and keep it (reconnecting) until
      close()
    - wait_until_ready(): resolves once the Gateway reports READY; safe to
      await before login()

    discord.py's own records go to the ``discord`` logger.
    """

    def __init__(self, intents: discord.Intents | None = None, **options) -> None:
        if intents is None:
            intents = discord.Intents.none()
            intents.guilds = True
        super().__init__(intents=intents, **options)
        self._session_ready = asyncio.Event()

    async def login(self, token: str) -> None:
        await super().login(token)
        log.info("Logged in to Discord as %s", self.user)

    async def on_ready(self) -> None:
        log.info("Discord gateway ready (%d guilds)", len(self.guilds))
        self._session_ready.set()

    async def on_resumed(self) -> None:
        log.info("Discord gateway session resumed")

    async def on_disconnect(self) -> None:
        log.warning("Discord gateway disconnected")

    async def wait_until_ready(self) -> None:
        await self._session_ready.wait()

    async def get_sendable(self, channel_id: int) -> discord.abc.Messageable | None:
        """Cached channel, else fetched over REST. None if unusable."""
        channel = self.get_channel(channel_id)
        if channel is None:
            try:
                channel = await self.fetch_channel(channel_id)
            except (discord.NotFound, discord.Forbidden) as exc:
                log.warning("Discord channel %d is not accessible: %s", channel_id, exc)
                return None
        if not isinstance(channel, discord.abc.Messageable):
            log.warning("Discord channel %d is not a text channel", channel_id)
            return None
        return channel

    async def send(self, sendable: discord.abc.Messageable, text: str) -> None:
        # rate limits are handled inside discord.py's HTTP client
        await sendable.send(text)

    async def close(self) -> None:
        self._session_ready.clear()
        await super().close()
