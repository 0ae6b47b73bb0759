"""NetBox IPAM client."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from ipam_firewall_sync.drivers.http import HTTPDriver
from ipam_firewall_sync.models.prefix import Prefix
from ipam_firewall_sync.utils.errors import CollaboratorFetchError


class NetboxDriver(HTTPDriver):
    """Client for the NetBox prefix API.

    Follows ``next`` links so callers always receive the full result set.
    """

    PREFIXES_PATH = "/api/ipam/prefixes/"

    # Guard against a server that keeps returning the same next link
    MAX_PAGES = 1000

    def __init__(self, base_url: str, token: str | None = None, **kwargs) -> None:
        headers = dict(kwargs.pop("headers", None) or {})
        headers.setdefault("Content-Type", "application/json")
        if token:
            headers["Authorization"] = f"Token {token}"
        super().__init__(base_url.rstrip("/"), headers=headers, **kwargs)

    async def get_prefixes(self, query: list[tuple[str, str]]) -> list[Prefix]:
        """Return every prefix matching the query."""
        prefixes: list[Prefix] = []
        url: str | None = self.PREFIXES_PATH
        params: Any = query

        pages = 0

        while url is not None:
            if pages >= self.MAX_PAGES:
                raise CollaboratorFetchError(
                    f"Prefix listing exceeded {self.MAX_PAGES} pages", code="TOO_MANY_PAGES"
                )
            data = await self._request("GET", url, params=params)
            if not isinstance(data, dict):
                raise CollaboratorFetchError("Unexpected prefix list response", code="INVALID_RESPONSE")

            try:
                prefixes.extend(Prefix.model_validate(item) for item in data.get("results") or [])
            except ValidationError as e:
                raise CollaboratorFetchError(f"Malformed prefix record: {e}", code="INVALID_RESPONSE") from e
            url = data.get("next")
            # The next link already carries the query
            params = None
            pages += 1

        return prefixes
