"""ChainClient / LogStream protocols - the blockchain RPC boundary."""

from __future__ import annotations

from typing import Any, Mapping, Protocol

from mint_announcer.models.events import LogFilter

RawLog = Mapping[str, Any]


class LogStream(Protocol):
    """A live log subscription on a streaming connection."""

    @property
    def is_alive(self) -> bool:
        """False once the connection closed or the subscription went away."""
        ...

    async def next_log(self, timeout: float) -> RawLog | None:
        """Wait up to ``timeout`` seconds for the next log.

        Returns None on timeout. Raises StreamClosedError when the
        connection drops.
        """
        ...

    async def close(self) -> None:
        """Release the connection. Safe to call more than once."""
        ...


class ChainClient(Protocol):
    """Read-only access to the chain the contract lives on."""

    async def get_block_number(self) -> int:
        """Current chain head."""
        ...

    async def open_log_stream(self, log_filter: LogFilter) -> LogStream:
        """Connect and register a log subscription for ``log_filter``."""
        ...

    async def poll_logs(
        self, from_block: int, to_block: int, log_filter: LogFilter,
    ) -> list[RawLog]:
        """Fetch logs in the inclusive block range."""
        ...

    async def reverse_resolve(self, address: str) -> str | None:
        """Reverse-resolve an address to its primary name, if any."""
        ...
