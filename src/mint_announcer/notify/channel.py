"""Listener -> dispatcher hand-off queue."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator

from mint_announcer.models.events import Notification

log = logging.getLogger(__name__)

_CLOSED = object()


class NotificationChannel:
    """Unbounded FIFO with one writer (listener) and one reader (dispatcher).

    Writes never block. Once closed, writes are dropped and the reader's
    iteration ends after the queued items have been consumed.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        return self._queue.qsize()

    def try_write(self, recipient: str, item_id: int) -> bool:
        """Enqueue a notification. Returns False if it was dropped."""
        if self._closed:
            log.debug("Channel closed, dropping item %d", item_id)
            return False
        try:
            self._queue.put_nowait(Notification(recipient=recipient, item_id=item_id))
        except asyncio.QueueFull:
            return False
        return True

    def close(self) -> None:
        """Signal end-of-stream to the reader."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    async def read_all(self) -> AsyncIterator[Notification]:
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            yield item

    def __aiter__(self) -> AsyncIterator[Notification]:
        return self.read_all()
