"""Item metadata lookup over HTTP."""

from __future__ import annotations

import logging

import httpx

from mint_announcer.models.records import ItemMetadata

log = logging.getLogger(__name__)


def metadata_url(base_url: str, item_id: int) -> str:
    """``{base}/data/{item_id:04d}.json``"""
    return f"{base_url.rstrip('/')}/data/{item_id:04d}.json"


class HttpMetadataLookup:
    """Fetches ``{name, image}`` JSON documents for item ids.

    Best-effort: any HTTP, timeout or decoding problem is logged and
    reported as None.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._client = client

    async def fetch(self, item_id: int) -> ItemMetadata | None:
        url = metadata_url(self._base_url, item_id)
        try:
            if self._client is not None:
                resp = await self._client.get(url, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
                    resp = await client.get(url)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as exc:
            log.error("Metadata lookup %s failed: HTTP %d", url, exc.response.status_code)
            return None
        except httpx.TimeoutException:
            log.error("Metadata lookup %s timed out after %ss", url, self._timeout)
            return None
        except Exception as exc:
            log.error("Metadata lookup %s failed: %s", url, exc)
            return None

        if not isinstance(data, dict):
            log.error("Metadata lookup %s returned %s, expected an object", url, type(data).__name__)
            return None

        return ItemMetadata(name=data.get("name"), image=data.get("image"))
