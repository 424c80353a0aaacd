"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from web3 import Web3

from mint_announcer.errors import ConfigError
from mint_announcer.models.config import AnnouncerConfig, ListenerMode


def _parse_channels(value: object) -> list[int]:
    """Channel ids from a TOML list or a comma-separated string."""
    if isinstance(value, str):
        items = [v.strip() for v in value.split(",") if v.strip()]
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        raise ConfigError(f"channels must be a list or comma-separated string, got {value!r}")
    try:
        return [int(v) for v in items]
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"invalid channel id in {value!r}") from exc


def _parse_mode(value: str) -> ListenerMode:
    try:
        return ListenerMode(value)
    except ValueError:
        raise ConfigError(f"listener_mode must be 'stream' or 'poll', got {value!r}") from None


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "MINT_ANNOUNCER_",
) -> AnnouncerConfig:
    """Load daemon configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (MINT_ANNOUNCER_DISCORD_TOKEN, etc.)
        2. TOML config file
        3. Defaults from AnnouncerConfig
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = AnnouncerConfig()

    # ── Daemon section ─────────────────────────────────────
    daemon = raw.get("daemon", {})
    if v := daemon.get("log_level"):
        cfg.log_level = str(v)

    # ── Chain section ──────────────────────────────────────
    chain = raw.get("chain", {})
    for key in ("rpc_url", "ws_url", "ens_rpc_url", "contract_address"):
        if v := chain.get(key):
            setattr(cfg.chain, key, str(v))
    if v := chain.get("listener_mode"):
        cfg.chain.listener_mode = _parse_mode(str(v))
    for key in ("lookback_blocks", "fallback_after_failures", "fallback_poll_cycles",
                "poll_block_range"):
        if (v := chain.get(key)) is not None:
            setattr(cfg.chain, key, int(v))
    for key in ("reconnect_backoff", "liveness_interval", "poll_interval",
                "poll_error_backoff", "resolve_timeout"):
        if (v := chain.get(key)) is not None:
            setattr(cfg.chain, key, float(v))

    # ── Discord section ────────────────────────────────────
    discord = raw.get("discord", {})
    if v := discord.get("token"):
        cfg.discord.token = str(v)
    if (v := discord.get("channels")) is not None:
        cfg.discord.channels = _parse_channels(v)
    if v := discord.get("message_format"):
        cfg.discord.message_format = str(v)
    if (v := discord.get("login_backoff")) is not None:
        cfg.discord.login_backoff = float(v)
    if (v := discord.get("drain_timeout")) is not None:
        cfg.discord.drain_timeout = float(v)

    # ── Metadata section ───────────────────────────────────
    metadata = raw.get("metadata", {})
    if v := metadata.get("base_url"):
        cfg.metadata.base_url = str(v)
    if (v := metadata.get("timeout")) is not None:
        cfg.metadata.timeout = float(v)
    if (v := metadata.get("item_url_format")) is not None:
        cfg.metadata.item_url_format = str(v)

    # ── Dispatch section ───────────────────────────────────
    dispatch = raw.get("dispatch", {})
    if (v := dispatch.get("dedup_capacity")) is not None:
        cfg.dedup_capacity = int(v)

    # ── Environment variable overrides (highest priority) ──
    if token := os.environ.get(f"{env_prefix}DISCORD_TOKEN"):
        cfg.discord.token = token
    if channels := os.environ.get(f"{env_prefix}CHANNELS"):
        cfg.discord.channels = _parse_channels(channels)
    if rpc := os.environ.get(f"{env_prefix}RPC_URL"):
        cfg.chain.rpc_url = rpc
    if ws := os.environ.get(f"{env_prefix}WS_URL"):
        cfg.chain.ws_url = ws
    if ens := os.environ.get(f"{env_prefix}ENS_RPC_URL"):
        cfg.chain.ens_rpc_url = ens
    if contract := os.environ.get(f"{env_prefix}CONTRACT_ADDRESS"):
        cfg.chain.contract_address = contract
    if mode := os.environ.get(f"{env_prefix}LISTENER_MODE"):
        cfg.chain.listener_mode = _parse_mode(mode)

    return cfg


def validate_config(cfg: AnnouncerConfig) -> list[str]:
    """Return a list of human-readable problems; empty means runnable."""
    problems: list[str] = []

    if not cfg.discord.token:
        problems.append("No Discord token (set MINT_ANNOUNCER_DISCORD_TOKEN or [discord] token)")
    if not cfg.discord.channels:
        problems.append("No destination channels configured ([discord] channels)")
    if not cfg.chain.contract_address:
        problems.append("No contract address configured ([chain] contract_address)")
    elif not Web3.is_address(cfg.chain.contract_address):
        problems.append(f"Contract address {cfg.chain.contract_address!r} is not a valid address")
    if not cfg.chain.rpc_url:
        problems.append("No RPC URL configured ([chain] rpc_url)")
    if cfg.chain.listener_mode is ListenerMode.STREAM and not cfg.chain.ws_url:
        problems.append("Stream mode needs a websocket URL ([chain] ws_url)")
    if cfg.dedup_capacity < 1:
        problems.append("dedup_capacity must be at least 1")
    if cfg.chain.poll_block_range < 1:
        problems.append("poll_block_range must be at least 1")

    return problems
