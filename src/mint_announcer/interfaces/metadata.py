"""MetadataLookup protocol - best-effort item display data."""

from __future__ import annotations

from typing import Protocol

from mint_announcer.models.records import ItemMetadata


class MetadataLookup(Protocol):
    """Fetches name/image for an item id."""

    async def fetch(self, item_id: int) -> ItemMetadata | None:
        """Return metadata, or None when the lookup failed."""
        ...
