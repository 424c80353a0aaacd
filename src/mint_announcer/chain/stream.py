"""eth_subscribe("logs") over a websocket connection."""

from __future__ import annotations

import asyncio
import itertools
import json
import logging

import websockets
from websockets.exceptions import ConnectionClosed
from websockets.protocol import State

from mint_announcer.errors import StreamClosedError, SubscriptionError
from mint_announcer.interfaces.chain import RawLog
from mint_announcer.models.events import LogFilter

log = logging.getLogger(__name__)

_request_ids = itertools.count(1)


class WebSocketLogStream:
    """A single eth_subscribe("logs") subscription.

    Created by ``WebSocketLogStream.open()``; one instance per connection.
    """

    def __init__(self, ws, subscription_id: str) -> None:
        self._ws = ws
        self._subscription_id = subscription_id
        self._subscribed = True

    @classmethod
    async def open(
        cls,
        ws_url: str,
        log_filter: LogFilter,
        subscribe_timeout: float = 15.0,
    ) -> WebSocketLogStream:
        """Connect to ``ws_url`` and register the log subscription."""
        ws = await websockets.connect(ws_url, max_size=None)
        try:
            request_id = next(_request_ids)
            await ws.send(json.dumps({
                "jsonrpc": "2.0",
                "id": request_id,
                "method": "eth_subscribe",
                "params": ["logs", log_filter.to_rpc()],
            }))

            async def _await_ack() -> str:
                while True:
                    message = json.loads(await ws.recv())
                    if message.get("id") != request_id:
                        continue
                    if "error" in message:
                        raise SubscriptionError(f"eth_subscribe rejected: {message['error']}")
                    return str(message["result"])

            try:
                subscription_id = await asyncio.wait_for(_await_ack(), timeout=subscribe_timeout)
            except asyncio.TimeoutError:
                raise SubscriptionError(
                    f"no eth_subscribe acknowledgement within {subscribe_timeout}s"
                ) from None
        except BaseException:
            await ws.close()
            raise

        log.info("Subscribed to logs of %s (subscription %s)", log_filter.address, subscription_id)
        return cls(ws, subscription_id)

    @property
    def subscription_id(self) -> str:
        return self._subscription_id

    @property
    def is_alive(self) -> bool:
        return self._subscribed and self._ws.state is State.OPEN

    async def next_log(self, timeout: float) -> RawLog | None:
        try:
            raw = await asyncio.wait_for(self._ws.recv(), timeout=timeout)
        except asyncio.TimeoutError:
            return None
        except ConnectionClosed as exc:
            self._subscribed = False
            raise StreamClosedError(f"websocket closed: {exc}") from exc

        try:
            message = json.loads(raw)
        except ValueError:
            log.warning("Ignoring non-JSON websocket frame")
            return None

        if message.get("method") != "eth_subscription":
            if "error" in message:
                log.warning("Node reported error on stream: %s", message["error"])
            return None

        params = message.get("params") or {}
        if params.get("subscription") != self._subscription_id:
            return None
        return params.get("result")

    async def close(self) -> None:
        self._subscribed = False
        try:
            await self._ws.close()
        except Exception as exc:
            log.debug("Error closing websocket: %s", exc)
