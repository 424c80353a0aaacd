"""Notification dispatcher - dedup, render and fan out announcements."""

from __future__ import annotations

import logging
from typing import Sequence

from mint_announcer.interfaces.chat import ChatClient
from mint_announcer.interfaces.metadata import MetadataLookup
from mint_announcer.models.events import Notification
from mint_announcer.models.records import DeliveryReport, ItemMetadata
from mint_announcer.notify.channel import NotificationChannel
from mint_announcer.notify.dedup import DedupRing

log = logging.getLogger(__name__)


def render_announcement(
    message_format: str,
    *,
    name: str,
    item_id: int,
    recipient: str,
    url: str,
    image: str = "",
) -> str:
    """Format the announcement text, falling back to the default layout on a bad template."""
    fields = {"name": name, "item_id": item_id, "recipient": recipient, "url": url, "image": image}
    try:
        return message_format.format(**fields)
    except (KeyError, IndexError, ValueError) as exc:
        log.error("Bad message_format %r (%s), using default layout", message_format, exc)
        return f"{name} was just minted by {recipient}! {url}"


class NotificationDispatcher:
    """Single consumer of the notification channel.

    Items are processed strictly one at a time:
    1. skip ids seen within the dedup window (recorded before delivery)
    2. fetch optional display metadata
    3. render the announcement once
    4. deliver to every destination, isolating per-destination failures
    """

    def __init__(
        self,
        channel: NotificationChannel,
        chat: ChatClient,
        destinations: Sequence[int],
        metadata: MetadataLookup | None = None,
        message_format: str = "{name} was just minted by {recipient}! {url}",
        item_url_format: str = "",
        contract_address: str = "",
        dedup_capacity: int = 50,
    ) -> None:
        self._channel = channel
        self._chat = chat
        self._destinations = list(destinations)
        self._metadata = metadata
        self._message_format = message_format
        self._item_url_format = item_url_format
        self._contract_address = contract_address
        self.dedup = DedupRing(dedup_capacity)

    async def run(self) -> None:
        """Consume the channel until it is closed."""
        await self._chat.wait_until_ready()
        log.info("Dispatcher started, %d destination(s)", len(self._destinations))
        async for notification in self._channel:
            try:
                await self.process(notification)
            except Exception:
                log.exception("Dispatcher failed processing item %d", notification.item_id)
        log.info("Dispatcher stopped, channel closed")

    async def process(self, notification: Notification) -> DeliveryReport | None:
        """Announce one notification. Returns None for duplicates."""
        item_id = notification.item_id
        if self.dedup.check_and_record(item_id):
            log.debug("Item %d already announced, skipping", item_id)
            return None

        meta = await self._fetch_metadata(item_id)
        name = (meta.name if meta else None) or str(item_id)
        text = render_announcement(
            self._message_format,
            name=name,
            item_id=item_id,
            recipient=notification.recipient,
            url=self.item_url(item_id),
            image=(meta.image if meta else None) or "",
        )
        log.info("Announcing item %d: %s", item_id, text)

        report = DeliveryReport(item_id=item_id, announcement=text)
        for channel_id in self._destinations:
            try:
                sendable = await self._chat.get_sendable(channel_id)
                if sendable is None:
                    report.skipped.append(channel_id)
                    continue
                log.info("Sending item %d to channel %d", item_id, channel_id)
                await self._chat.send(sendable, text)
                report.delivered.append(channel_id)
            except Exception as exc:
                log.error("Sending item %d to channel %d failed: %s", item_id, channel_id, exc)
                report.failed.append(channel_id)

        return report

    def item_url(self, item_id: int) -> str:
        if not self._item_url_format:
            return ""
        try:
            return self._item_url_format.format(contract=self._contract_address, item_id=item_id)
        except (KeyError, IndexError, ValueError) as exc:
            log.error("Bad item_url_format %r: %s", self._item_url_format, exc)
            return ""

    async def _fetch_metadata(self, item_id: int) -> ItemMetadata | None:
        if self._metadata is None:
            return None
        try:
            return await self._metadata.fetch(item_id)
        except Exception as exc:
            log.error("Metadata lookup for item %d failed: %s", item_id, exc)
            return None
