"""Data models for the mint_announcer daemon."""

from mint_announcer.models.config import (
    AnnouncerConfig,
    ChainConfig,
    DiscordConfig,
    ListenerMode,
    MetadataConfig,
)
from mint_announcer.models.events import LogFilter, MintEvent, Notification
from mint_announcer.models.records import DeliveryReport, ItemMetadata, SubscriptionHandle

__all__ = [
    "AnnouncerConfig", "ChainConfig", "DiscordConfig", "ListenerMode", "MetadataConfig",
    "LogFilter", "MintEvent", "Notification",
    "DeliveryReport", "ItemMetadata", "SubscriptionHandle",
]
