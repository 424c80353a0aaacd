"""Chain-side components: decoding, naming, streaming and the listener."""

from mint_announcer.chain.decoder import TRANSFER_TOPIC, ZERO_ADDRESS, decode_transfer_log
from mint_announcer.chain.listener import ChainListener, ListenerState
from mint_announcer.chain.naming import NameResolver, truncate_address
from mint_announcer.chain.rpc import Web3ChainClient
from mint_announcer.chain.stream import WebSocketLogStream

__all__ = [
    "TRANSFER_TOPIC", "ZERO_ADDRESS", "decode_transfer_log",
    "ChainListener", "ListenerState",
    "NameResolver", "truncate_address",
    "Web3ChainClient", "WebSocketLogStream",
]
