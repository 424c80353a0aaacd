"""Chain event models produced by the decoder and carried by the channel."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MintEvent:
    """A Transfer log whose sender is the zero address (first issuance)."""

    recipient: str  # checksum address until resolved
    item_id: int  # uint256 token id
    block_number: int
    log_index: int = 0
    tx_hash: str = ""


@dataclass(frozen=True)
class Notification:
    """One (display name, item id) pair travelling listener -> dispatcher."""

    recipient: str
    item_id: int


@dataclass(frozen=True)
class LogFilter:
    """Log filter scoped to one contract and a topic list."""

    address: str
    topics: tuple[str, ...] = ()

    def to_rpc(self) -> dict:
        return {"address": self.address, "topics": list(self.topics)}
