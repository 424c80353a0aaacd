"""Main daemon - wires all components together and runs the three tasks."""

from __future__ import annotations

import asyncio
import logging
import signal

import httpx

from mint_announcer.chain.listener import ChainListener
from mint_announcer.chain.naming import NameResolver
from mint_announcer.chain.rpc import Web3ChainClient
from mint_announcer.interfaces.chain import ChainClient
from mint_announcer.interfaces.chat import ChatClient
from mint_announcer.interfaces.metadata import MetadataLookup
from mint_announcer.models.config import AnnouncerConfig
from mint_announcer.notify.channel import NotificationChannel
from mint_announcer.notify.discord import DiscordChatClient
from mint_announcer.notify.dispatcher import NotificationDispatcher
from mint_announcer.notify.metadata import HttpMetadataLookup

log = logging.getLogger(__name__)


class AnnouncerDaemon:
    """Mint announcement daemon.

    Runs three tasks for the lifetime of the process:
    - listener: chain subscription -> notification channel
    - dispatcher: notification channel -> chat destinations
    - chat: login (retried) and hold the chat connection
    The tasks share nothing but the channel.
    """

    def __init__(
        self,
        cfg: AnnouncerConfig,
        chain: ChainClient | None = None,
        chat: ChatClient | None = None,
        metadata: MetadataLookup | None = None,
    ) -> None:
        self._cfg = cfg
        self._shutdown = asyncio.Event()
        self._tasks: list[asyncio.Task] = []
        self._http: httpx.AsyncClient | None = None

        self.chain = chain or Web3ChainClient(
            cfg.chain.rpc_url, cfg.chain.ws_url, cfg.chain.ens_rpc_url,
        )
        self.chat = chat or DiscordChatClient()
        if metadata is None and cfg.metadata.base_url:
            self._http = httpx.AsyncClient(timeout=cfg.metadata.timeout, follow_redirects=True)
            metadata = HttpMetadataLookup(cfg.metadata.base_url, cfg.metadata.timeout, self._http)

        self.channel = NotificationChannel()
        self.resolver = NameResolver(self.chain, cfg.chain.resolve_timeout)
        self.listener = ChainListener.from_config(
            cfg.chain, self.chain, self.resolver, self.channel, shutdown=self._shutdown,
        )
        self.dispatcher = NotificationDispatcher(
            channel=self.channel,
            chat=self.chat,
            destinations=cfg.discord.channels,
            metadata=metadata,
            message_format=cfg.discord.message_format,
            item_url_format=cfg.metadata.item_url_format,
            contract_address=cfg.chain.contract_address,
            dedup_capacity=cfg.dedup_capacity,
        )

    @property
    def stopping(self) -> bool:
        return self._shutdown.is_set()

    async def start(self) -> None:
        """Start all tasks and block until stop() is called."""
        log.info("Starting mint_announcer daemon")
        log.info("  Contract: %s", self._cfg.chain.contract_address)
        log.info("  RPC: %s", self._cfg.chain.rpc_url)
        log.info("  Mode: %s", self._cfg.chain.listener_mode.value)
        log.info("  Destinations: %s", ", ".join(str(c) for c in self._cfg.discord.channels))

        self._tasks = [
            self._spawn(self._run_chat(), "chat"),
            self._spawn(self.dispatcher.run(), "dispatcher"),
            self._spawn(self.listener.run(), "listener"),
        ]
        try:
            await self._shutdown.wait()
        finally:
            await self._teardown()
            log.info("Daemon shut down cleanly")

    async def stop(self) -> None:
        """Signal the daemon to stop gracefully."""
        log.info("Stop requested")
        self._shutdown.set()

    def _spawn(self, coro, name: str) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error("Task %s crashed: %s", task.get_name(), exc, exc_info=exc)
        elif not self._shutdown.is_set():
            log.warning("Task %s exited before shutdown", task.get_name())

    async def _run_chat(self) -> None:
        """Log in (retrying with a fixed backoff) and hold the connection."""
        while not self._shutdown.is_set():
            try:
                await self.chat.login(self._cfg.discord.token)
            except Exception as exc:
                log.error(
                    "Chat login failed: %s; retrying in %ss", exc, self._cfg.discord.login_backoff,
                )
                try:
                    await asyncio.wait_for(
                        self._shutdown.wait(), timeout=self._cfg.discord.login_backoff,
                    )
                except asyncio.TimeoutError:
                    pass
                continue
            await self.chat.connect()
            return

    async def _teardown(self) -> None:
        listener, dispatcher, chat = self._task("listener"), self._task("dispatcher"), self._task("chat")

        # Listener observes the shutdown event at its next boundary.
        await self._join(listener, self._cfg.chain.liveness_interval + 1)

        # Closing the channel lets the dispatcher drain and exit.
        self.channel.close()
        await self._join(dispatcher, self._cfg.discord.drain_timeout)

        await self.chat.close()
        await self._join(chat, 5)

        if self._http is not None:
            await self._http.aclose()

    def _task(self, name: str) -> asyncio.Task | None:
        for task in self._tasks:
            if task.get_name() == name:
                return task
        return None

    @staticmethod
    async def _join(task: asyncio.Task | None, timeout: float) -> None:
        if task is None or task.done():
            return
        try:
            await asyncio.wait_for(asyncio.shield(task), timeout=timeout)
        except asyncio.TimeoutError:
            log.warning("Task %s did not stop in %ss, cancelling", task.get_name(), timeout)
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        except Exception:
            # already reported by the done-callback
            pass


async def run_daemon(cfg: AnnouncerConfig) -> None:
    """Entry point for running the daemon."""
    daemon = AnnouncerDaemon(cfg)

    loop = asyncio.get_running_loop()

    def _signal_handler():
        asyncio.ensure_future(daemon.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass

    await daemon.start()
