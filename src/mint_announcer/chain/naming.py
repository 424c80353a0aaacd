"""Display names for recipient addresses."""

from __future__ import annotations

import asyncio
import logging

from mint_announcer.interfaces.chain import ChainClient

log = logging.getLogger(__name__)


def truncate_address(address: str) -> str:
    """First 6 and last 4 characters joined by an ellipsis."""
    return f"{address[:6]}…{address[-4:]}"


class NameResolver:
    """Reverse-resolves addresses, falling back to a truncated address.

    One attempt per address, no retries. Never raises.
    """

    def __init__(self, chain: ChainClient, timeout: float = 10.0) -> None:
        self._chain = chain
        self._timeout = timeout

    async def resolve(self, address: str) -> str:
        try:
            name = await asyncio.wait_for(
                self._chain.reverse_resolve(address), timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            log.info("Reverse lookup for %s timed out after %ss", address, self._timeout)
            return truncate_address(address)
        except Exception as exc:
            log.info("Reverse lookup for %s failed: %s", address, exc)
            return truncate_address(address)

        if not name:
            log.debug("No reverse record for %s", address)
            return truncate_address(address)
        return name
