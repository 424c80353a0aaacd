"""Transfer log decoder - raw chain logs to MintEvent."""

from __future__ import annotations

import logging
from typing import Any

from eth_abi import decode as abi_decode
from web3 import Web3

from mint_announcer.interfaces.chain import RawLog
from mint_announcer.models.events import MintEvent

log = logging.getLogger(__name__)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Transfer(address indexed from, address indexed to, uint256 indexed tokenId)
TRANSFER_SIGNATURE = "Transfer(address,address,uint256)"
TRANSFER_TOPIC = "0x" + bytes(Web3.keccak(text=TRANSFER_SIGNATURE)).hex()


def _to_bytes(value: Any) -> bytes:
    """Accept HexBytes/bytes from web3 or 0x-strings from raw JSON-RPC."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        text = value[2:] if value[:2].lower() == "0x" else value
        return bytes.fromhex(text)
    raise TypeError(f"cannot convert {type(value).__name__} to bytes")


def _to_int(value: Any) -> int:
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value, 16) if value[:2].lower() == "0x" else int(value)
    raise TypeError(f"cannot convert {type(value).__name__} to int")


def _to_hex(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value)


def log_position(raw: RawLog) -> tuple[int, int]:
    """(block number, log index) ordering key of a raw log."""
    return (_to_int(raw.get("blockNumber", 0)), _to_int(raw.get("logIndex", 0)))


def decode_transfer_log(raw: RawLog) -> MintEvent | None:
    """Decode a raw log into a MintEvent.

    Returns None for logs that are not ERC-721 Transfers (logged) and for
    Transfers that are not mints (silent).
    """
    try:
        topics = [_to_bytes(t) for t in raw.get("topics", [])]
        if len(topics) != 4:
            raise ValueError(f"expected 4 topics, got {len(topics)}")
        if "0x" + topics[0].hex() != TRANSFER_TOPIC:
            raise ValueError(f"unexpected event signature 0x{topics[0].hex()}")

        (sender,) = abi_decode(["address"], topics[1])
        (recipient,) = abi_decode(["address"], topics[2])
        (item_id,) = abi_decode(["uint256"], topics[3])
        block_number, log_index = log_position(raw)
    except Exception as exc:
        log.warning("Could not decode log %s: %s", _to_hex(raw.get("transactionHash")), exc)
        return None

    if str(sender).lower() != ZERO_ADDRESS:
        return None

    return MintEvent(
        recipient=Web3.to_checksum_address(recipient),
        item_id=int(item_id),
        block_number=block_number,
        log_index=log_index,
        tx_hash=_to_hex(raw.get("transactionHash")),
    )
