"""Result and handle types used inside the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from mint_announcer.models.events import LogFilter

if TYPE_CHECKING:
    from mint_announcer.interfaces.chain import LogStream


@dataclass
class ItemMetadata:
    """Display metadata served for an item id."""

    name: str | None = None
    image: str | None = None


@dataclass
class SubscriptionHandle:
    """One live streaming connection and the filter it was opened with.

    Owned by the listener; replaced on every reconnect.
    """

    stream: LogStream
    log_filter: LogFilter
    from_block: int


@dataclass
class DeliveryReport:
    """Outcome of fanning one announcement out to every destination."""

    item_id: int
    announcement: str
    delivered: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)  # missing or not sendable

    @property
    def success(self) -> bool:
        return not self.failed and bool(self.delivered)
