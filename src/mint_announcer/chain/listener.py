"""Chain listener - subscription lifecycle, look-back and polling fallback."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

from mint_announcer.chain.decoder import TRANSFER_TOPIC, decode_transfer_log, log_position
from mint_announcer.chain.naming import NameResolver
from mint_announcer.errors import StreamClosedError
from mint_announcer.interfaces.chain import ChainClient, LogStream, RawLog
from mint_announcer.models.config import ChainConfig, ListenerMode
from mint_announcer.models.events import LogFilter, MintEvent
from mint_announcer.models.records import SubscriptionHandle
from mint_announcer.notify.channel import NotificationChannel

log = logging.getLogger(__name__)


class ListenerState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    SUBSCRIBED = "subscribed"
    DRAINING = "draining"
    POLLING_FALLBACK = "polling_fallback"


class ChainListener:
    """Watches the contract for mints and feeds the notification channel.

    Stream pass:
    1. CONNECTING: open the log stream, read the head, replay
       ``[head - lookback, head]`` with eth_getLogs
    2. SUBSCRIBED: forward streamed logs, checking liveness every
       ``liveness_interval`` seconds
    3. DRAINING: the stream died; release it and start over

    Every pass, failed or dropped, is followed by a ``reconnect_backoff``
    sleep. A pass counts as failed unless the stream stayed up for one
    ``liveness_interval`` or delivered a log. After
    ``fallback_after_failures`` consecutive failures (or always in poll
    mode) the listener polls block ranges instead.

    Decoded mints wait in an internal FIFO while a separate task resolves
    the recipient name and writes to the channel, so slow name lookups
    never hold up reading the stream.

    Logs at or before the last processed (block, log index) are skipped, so
    replayed ranges never forward an event twice.
    """

    def __init__(
        self,
        chain: ChainClient,
        resolver: NameResolver,
        channel: NotificationChannel,
        contract_address: str,
        *,
        mode: ListenerMode = ListenerMode.STREAM,
        lookback_blocks: int = 100,
        reconnect_backoff: float = 5.0,
        liveness_interval: float = 5.0,
        fallback_after_failures: int = 3,
        fallback_poll_cycles: int = 20,
        poll_block_range: int = 10_000,
        poll_interval: float = 15.0,
        poll_error_backoff: float = 15.0,
        shutdown: asyncio.Event | None = None,
    ) -> None:
        self._chain = chain
        self._resolver = resolver
        self._channel = channel
        self._mode = mode
        self._lookback_blocks = lookback_blocks
        self._reconnect_backoff = reconnect_backoff
        self._liveness_interval = liveness_interval
        self._fallback_after_failures = fallback_after_failures
        self._fallback_poll_cycles = fallback_poll_cycles
        self._poll_block_range = max(1, poll_block_range)
        self._poll_interval = poll_interval
        self._poll_error_backoff = poll_error_backoff
        self._shutdown = shutdown or asyncio.Event()

        self.log_filter = LogFilter(address=contract_address, topics=(TRANSFER_TOPIC,))
        self.state = ListenerState.DISCONNECTED
        self.forwarded = 0
        self._subscription: SubscriptionHandle | None = None
        self._last_position: tuple[int, int] | None = None
        self._next_block: int | None = None  # polling high-water mark
        self._consecutive_failures = 0
        self._pending: asyncio.Queue[MintEvent | None] = asyncio.Queue()

    @classmethod
    def from_config(
        cls,
        cfg: ChainConfig,
        chain: ChainClient,
        resolver: NameResolver,
        channel: NotificationChannel,
        shutdown: asyncio.Event | None = None,
    ) -> ChainListener:
        return cls(
            chain,
            resolver,
            channel,
            cfg.contract_address,
            mode=cfg.listener_mode,
            lookback_blocks=cfg.lookback_blocks,
            reconnect_backoff=cfg.reconnect_backoff,
            liveness_interval=cfg.liveness_interval,
            fallback_after_failures=cfg.fallback_after_failures,
            fallback_poll_cycles=cfg.fallback_poll_cycles,
            poll_block_range=cfg.poll_block_range,
            poll_interval=cfg.poll_interval,
            poll_error_backoff=cfg.poll_error_backoff,
            shutdown=shutdown,
        )

    @property
    def last_position(self) -> tuple[int, int] | None:
        return self._last_position

    @property
    def next_block(self) -> int | None:
        return self._next_block

    def stop(self) -> None:
        self._shutdown.set()

    # ── Main loop ─────────────────────────────────────────

    async def run(self) -> None:
        """Run until the shutdown event is set."""
        log.info(
            "Listener starting (mode=%s, contract=%s, lookback=%d)",
            self._mode.value, self.log_filter.address, self._lookback_blocks,
        )
        forwarder = asyncio.create_task(self._forward_pending(), name="listener-forward")
        try:
            await self._loop()
        except asyncio.CancelledError:
            forwarder.cancel()
            raise

        await self._release()
        self._pending.put_nowait(None)
        await forwarder
        log.info("Listener stopped")

    async def _loop(self) -> None:
        while not self._shutdown.is_set():
            if self._should_poll():
                cycles = None if self._mode is ListenerMode.POLL else self._fallback_poll_cycles
                await self._run_polling(cycles)
                self._consecutive_failures = 0
                continue

            try:
                stable = await self._stream_pass()
            except Exception as exc:
                self._consecutive_failures += 1
                log.error(
                    "Log stream failed (%d in a row): %s; retrying in %ss",
                    self._consecutive_failures, exc, self._reconnect_backoff,
                )
                await self._release()
                await self._sleep(self._reconnect_backoff)
                continue

            await self._release()
            if self._shutdown.is_set():
                break
            if stable:
                self._consecutive_failures = 0
            else:
                self._consecutive_failures += 1
            log.warning(
                "Log stream ended (%d unstable in a row); reconnecting in %ss",
                self._consecutive_failures, self._reconnect_backoff,
            )
            await self._sleep(self._reconnect_backoff)

    def _should_poll(self) -> bool:
        if self._mode is ListenerMode.POLL:
            return True
        return (
            self._fallback_after_failures > 0
            and self._consecutive_failures >= self._fallback_after_failures
        )

    def _set_state(self, state: ListenerState) -> None:
        if state is not self.state:
            log.debug("Listener %s -> %s", self.state.value, state.value)
            self.state = state

    async def _sleep(self, seconds: float) -> bool:
        """Sleep, waking early on shutdown. Returns True if shutting down."""
        try:
            await asyncio.wait_for(self._shutdown.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True

    # ── Streaming ─────────────────────────────────────────

    async def _stream_pass(self) -> bool:
        """One connection lifetime. Returns True if the stream stayed up."""
        self._set_state(ListenerState.CONNECTING)
        stream = await self._chain.open_log_stream(self.log_filter)
        self._subscription = SubscriptionHandle(stream=stream, log_filter=self.log_filter, from_block=0)

        head = await self._chain.get_block_number()
        self._subscription.from_block = self._lookback_start(head)
        log.info(
            "Stream connected at head %d, replaying from block %d",
            head, self._subscription.from_block,
        )
        await self._scan(self._subscription.from_block, head)

        self._set_state(ListenerState.SUBSCRIBED)
        return await self._watch(stream)

    async def _watch(self, stream: LogStream) -> bool:
        loop = asyncio.get_running_loop()
        started = loop.time()
        received = False
        while not self._shutdown.is_set():
            if not stream.is_alive:
                log.warning("Log stream is no longer alive")
                break
            try:
                raw = await stream.next_log(timeout=self._liveness_interval)
            except StreamClosedError as exc:
                log.warning("Log stream dropped: %s", exc)
                break
            if raw is not None:
                received = True
                await self._handle_log(raw)
        self._set_state(ListenerState.DRAINING)
        return received or loop.time() - started >= self._liveness_interval

    async def _release(self) -> None:
        """Drop the current subscription; a fresh one is made next pass."""
        if self._subscription is not None:
            subscription, self._subscription = self._subscription, None
            await subscription.stream.close()
        self._set_state(ListenerState.DISCONNECTED)

    def _lookback_start(self, head: int) -> int:
        start = max(head - self._lookback_blocks, 0)
        if self._last_position is not None:
            start = max(start, self._last_position[0])
        return start

    # ── Polling ───────────────────────────────────────────

    async def _run_polling(self, cycles: int | None) -> None:
        """Poll block ranges; ``cycles=None`` polls until shutdown."""
        self._set_state(ListenerState.POLLING_FALLBACK)
        if cycles is None:
            log.info("Polling for logs every %ss", self._poll_interval)
        else:
            log.warning("Streaming unavailable, polling for %d cycles", cycles)

        entering = True
        done = 0
        while not self._shutdown.is_set() and (cycles is None or done < cycles):
            done += 1
            try:
                head = await self._chain.get_block_number()
                if entering:
                    self._next_block = max(self._next_block or 0, self._lookback_start(head))
                    entering = False
                await self._scan(self._next_block, head)
            except Exception as exc:
                log.error(
                    "Log poll from block %s failed: %s; retrying in %ss",
                    self._next_block, exc, self._poll_error_backoff,
                )
                await self._sleep(self._poll_error_backoff)
                continue
            await self._sleep(self._poll_interval)

        self._set_state(ListenerState.DISCONNECTED)

    async def _scan(self, from_block: int | None, to_block: int) -> None:
        """Fetch and handle logs in ``poll_block_range`` sized chunks."""
        block = from_block if from_block is not None else max(to_block - self._lookback_blocks, 0)
        while block <= to_block and not self._shutdown.is_set():
            end = min(block + self._poll_block_range - 1, to_block)
            logs = await self._chain.poll_logs(block, end, self.log_filter)
            for raw in logs:
                await self._handle_log(raw)
            block = end + 1
            self._next_block = block

    # ── Per-log handling ──────────────────────────────────

    async def _handle_log(self, raw: RawLog) -> None:
        if raw.get("removed"):
            log.debug("Skipping removed log")
            return

        try:
            position = log_position(raw)
        except Exception as exc:
            log.warning("Log without a usable position: %s", exc)
            return
        if self._last_position is not None and position <= self._last_position:
            return
        self._last_position = position

        event = decode_transfer_log(raw)
        if event is None:
            return

        self._pending.put_nowait(event)

    async def _forward_pending(self) -> None:
        """Resolve names in arrival order and hand mints to the channel."""
        while True:
            event = await self._pending.get()
            if event is None:
                return
            recipient = await self._resolver.resolve(event.recipient)
            log.info(
                "Mint of item %d to %s at block %d", event.item_id, recipient, event.block_number,
            )
            if self._channel.try_write(recipient, event.item_id):
                self.forwarded += 1
