"""Synthetic raw log factories for testing."""

from __future__ import annotations

from eth_abi import encode
from hexbytes import HexBytes
from web3.datastructures import AttributeDict

from mint_announcer.chain.decoder import TRANSFER_TOPIC, ZERO_ADDRESS

CONTRACT = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
ALICE = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
BOB = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"


def _topic(abi_type: str, value) -> str:
    return "0x" + encode([abi_type], [value]).hex()


def make_transfer_log(
    item_id: int = 1,
    recipient: str = ALICE,
    sender: str = ZERO_ADDRESS,
    block_number: int = 100,
    log_index: int = 0,
    tx_hash: str | None = None,
    removed: bool = False,
) -> dict:
    """A raw eth_subscribe / eth_getLogs Transfer log with hex-string fields."""
    return {
        "address": CONTRACT,
        "topics": [
            TRANSFER_TOPIC,
            _topic("address", sender),
            _topic("address", recipient),
            _topic("uint256", item_id),
        ],
        "data": "0x",
        "blockNumber": hex(block_number),
        "logIndex": hex(log_index),
        "transactionHash": tx_hash or "0x" + f"{block_number:032x}{log_index:032x}",
        "removed": removed,
    }


def make_mint_log(item_id: int, block_number: int, log_index: int = 0, recipient: str = ALICE) -> dict:
    return make_transfer_log(
        item_id=item_id, recipient=recipient, block_number=block_number, log_index=log_index,
    )


def as_web3_log(raw: dict) -> AttributeDict:
    """The same log as web3's eth.get_logs returns it: HexBytes and ints."""
    return AttributeDict({
        "address": raw["address"],
        "topics": [HexBytes(t) for t in raw["topics"]],
        "data": HexBytes(raw["data"]),
        "blockNumber": int(raw["blockNumber"], 16),
        "logIndex": int(raw["logIndex"], 16),
        "transactionHash": HexBytes(raw["transactionHash"]),
        "removed": raw["removed"],
    })
