"""Recency ring used to suppress repeat announcements."""

from __future__ import annotations


class DedupRing:
    """Recency filter over the last ``capacity`` item ids.

    A monotonic cursor picks the slot to overwrite (``cursor % capacity``),
    so the oldest id is evicted first. A miss means "not seen in the last
    ``capacity`` items", not "never seen".
    """

    def __init__(self, capacity: int = 50) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._slots: list[int | None] = [None] * capacity
        self._cursor = 0

    @property
    def capacity(self) -> int:
        return len(self._slots)

    def __contains__(self, item_id: int) -> bool:
        return item_id in self._slots

    def __len__(self) -> int:
        return min(self._cursor, len(self._slots))

    def record(self, item_id: int) -> None:
        self._slots[self._cursor % len(self._slots)] = item_id
        self._cursor += 1

    def check_and_record(self, item_id: int) -> bool:
        """Return True if ``item_id`` was already seen, else record it."""
        if item_id in self._slots:
            return True
        self.record(item_id)
        return False
