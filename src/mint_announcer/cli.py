"""CLI entry point for the mint_announcer daemon."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from mint_announcer.config import load_config, validate_config
from mint_announcer.daemon import run_daemon
from mint_announcer.errors import ConfigError


def _load(ctx: click.Context):
    try:
        return load_config(ctx.obj["config_path"])
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """mint-announcer - announce new mints to Discord channels."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


def _setup_logging(verbose: bool, level_name: str) -> None:
    level = logging.DEBUG if verbose else getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ── Daemon ─────────────────────────────────────────────


@cli.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """Start the announcer daemon."""
    cfg = _load(ctx)
    _setup_logging(ctx.obj["verbose"], cfg.log_level)

    problems = validate_config(cfg)
    if problems:
        for problem in problems:
            click.echo(f"Error: {problem}", err=True)
        sys.exit(1)

    click.echo(f"Starting mint-announcer (contract: {cfg.chain.contract_address})")
    asyncio.run(run_daemon(cfg))


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the effective configuration."""
    cfg = _load(ctx)
    click.echo(f"Contract:     {cfg.chain.contract_address or '(not set)'}")
    click.echo(f"Mode:         {cfg.chain.listener_mode.value}")
    click.echo(f"RPC URL:      {cfg.chain.rpc_url}")
    click.echo(f"WS URL:       {cfg.chain.ws_url or '(not set)'}")
    click.echo(f"ENS RPC URL:  {cfg.chain.ens_rpc_url or '(same as RPC)'}")
    click.echo(f"Look-back:    {cfg.chain.lookback_blocks} blocks")
    click.echo(f"Backoff:      {cfg.chain.reconnect_backoff}s")
    click.echo(f"Channels:     {', '.join(str(c) for c in cfg.discord.channels) or '(none)'}")
    click.echo(f"Metadata:     {cfg.metadata.base_url or '(disabled)'}")
    click.echo(f"Dedup window: {cfg.dedup_capacity} items")
    click.echo(f"Token:        {'***configured***' if cfg.discord.token else '(not set)'}")


@cli.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Validate the configuration and exit non-zero on problems."""
    cfg = _load(ctx)
    problems = validate_config(cfg)
    if not problems:
        click.echo("Configuration OK")
        return
    for problem in problems:
        click.echo(f"- {problem}", err=True)
    sys.exit(1)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
