"""Exception hierarchy for mint_announcer."""

from __future__ import annotations


class MintAnnouncerError(Exception):
    """Base class for all mint_announcer errors."""


class ConfigError(MintAnnouncerError):
    """Configuration is missing or invalid."""


class SubscriptionError(MintAnnouncerError):
    """The node rejected or never acknowledged a log subscription."""


class StreamClosedError(MintAnnouncerError):
    """The streaming connection closed underneath a reader."""
