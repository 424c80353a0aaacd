"""Announcement side: channel, dedup, metadata, chat client, dispatcher."""

from mint_announcer.notify.channel import NotificationChannel
from mint_announcer.notify.dedup import DedupRing
from mint_announcer.notify.discord import DiscordChatClient
from mint_announcer.notify.dispatcher import NotificationDispatcher, render_announcement
from mint_announcer.notify.metadata import HttpMetadataLookup, metadata_url

__all__ = [
    "NotificationChannel", "DedupRing",
    "DiscordChatClient",
    "NotificationDispatcher", "render_announcement",
    "HttpMetadataLookup", "metadata_url",
]
