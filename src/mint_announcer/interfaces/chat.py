"""ChatClient protocol - the destination chat platform boundary."""

from __future__ import annotations

from typing import Any, Protocol


class ChatClient(Protocol):
    """Minimal capability set needed to post announcements."""

    async def login(self, token: str) -> None:
        """Authenticate. Raises on rejected credentials."""
        ...

    async def connect(self) -> None:
        """Hold the connection open until close() is called."""
        ...

    async def wait_until_ready(self) -> None:
        """Block until the client is logged in and connected."""
        ...

    async def get_sendable(self, channel_id: int) -> Any | None:
        """Return a handle messages can be sent to, or None if unavailable."""
        ...

    async def send(self, sendable: Any, text: str) -> None:
        """Post ``text``. Raises on delivery failure."""
        ...

    async def close(self) -> None:
        ...
