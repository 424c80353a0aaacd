"""Configuration models for the announcer daemon."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ListenerMode(str, Enum):
    """How the listener receives logs."""

    STREAM = "stream"  # eth_subscribe, polling only as a fallback
    POLL = "poll"  # eth_getLogs only


@dataclass
class ChainConfig:
    """Blockchain endpoints and listener tuning."""

    rpc_url: str = "http://127.0.0.1:8545"
    ws_url: str = "ws://127.0.0.1:8546"
    ens_rpc_url: str = ""  # defaults to rpc_url
    contract_address: str = ""

    listener_mode: ListenerMode = ListenerMode.STREAM
    lookback_blocks: int = 100
    reconnect_backoff: float = 5.0  # seconds, fixed
    liveness_interval: float = 5.0  # seconds
    fallback_after_failures: int = 3  # consecutive stream failures
    fallback_poll_cycles: int = 20  # poll passes before retrying the stream
    poll_block_range: int = 10_000
    poll_interval: float = 15.0  # seconds between caught-up poll passes
    poll_error_backoff: float = 15.0  # seconds
    resolve_timeout: float = 10.0  # seconds per ENS lookup


@dataclass
class DiscordConfig:
    """Chat platform credentials and message layout."""

    token: str = ""  # loaded from env var MINT_ANNOUNCER_DISCORD_TOKEN
    channels: list[int] = field(default_factory=list)
    message_format: str = "{name} was just minted by {recipient}! {url}"
    login_backoff: float = 30.0  # seconds between failed logins
    drain_timeout: float = 15.0  # seconds the dispatcher gets to finish at shutdown


@dataclass
class MetadataConfig:
    """Item metadata service and canonical item links."""

    base_url: str = ""  # empty disables the lookup
    timeout: float = 10.0
    item_url_format: str = "https://opensea.io/assets/ethereum/{contract}/{item_id}"


@dataclass
class AnnouncerConfig:
    """Complete daemon configuration."""

    log_level: str = "info"
    dedup_capacity: int = 50

    chain: ChainConfig = field(default_factory=ChainConfig)
    discord: DiscordConfig = field(default_factory=DiscordConfig)
    metadata: MetadataConfig = field(default_factory=MetadataConfig)
