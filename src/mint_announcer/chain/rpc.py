"""web3.py-backed chain client."""

from __future__ import annotations

import asyncio
import logging

from web3 import Web3

from mint_announcer.chain.stream import WebSocketLogStream
from mint_announcer.interfaces.chain import RawLog
from mint_announcer.models.events import LogFilter

log = logging.getLogger(__name__)


class Web3ChainClient:
    """Chain access through a JSON-RPC HTTP endpoint plus a websocket feed.

    web3's HTTP provider is synchronous, so every call is pushed to a worker
    thread to keep the event loop free. Name lookups may use a separate
    endpoint (the naming service usually lives on mainnet).
    """

    def __init__(
        self,
        rpc_url: str,
        ws_url: str,
        ens_rpc_url: str = "",
        request_timeout: float = 30.0,
    ) -> None:
        self._ws_url = ws_url
        self._w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": request_timeout}))
        if not ens_rpc_url or ens_rpc_url == rpc_url:
            self._w3_ens = self._w3
        else:
            self._w3_ens = Web3(
                Web3.HTTPProvider(ens_rpc_url, request_kwargs={"timeout": request_timeout})
            )

    async def get_block_number(self) -> int:
        return await asyncio.to_thread(lambda: self._w3.eth.block_number)

    async def open_log_stream(self, log_filter: LogFilter) -> WebSocketLogStream:
        return await WebSocketLogStream.open(self._ws_url, log_filter)

    async def poll_logs(
        self, from_block: int, to_block: int, log_filter: LogFilter,
    ) -> list[RawLog]:
        params = {
            "address": Web3.to_checksum_address(log_filter.address),
            "fromBlock": from_block,
            "toBlock": to_block,
            "topics": list(log_filter.topics),
        }
        logs = await asyncio.to_thread(self._w3.eth.get_logs, params)
        log.debug("eth_getLogs %d..%d returned %d logs", from_block, to_block, len(logs))
        return list(logs)

    async def reverse_resolve(self, address: str) -> str | None:
        checksum = Web3.to_checksum_address(address)
        return await asyncio.to_thread(self._w3_ens.ens.name, checksum)
