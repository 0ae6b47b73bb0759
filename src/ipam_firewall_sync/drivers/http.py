"""Shared async HTTP plumbing for the collaborator drivers."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

import httpx

from ipam_firewall_sync.utils.errors import (
    CollaboratorFetchError,
    CollaboratorMutationError,
    NotFoundError,
)

READ_METHODS = frozenset({"GET", "HEAD"})


class HTTPDriver:
    """Base class for drivers talking JSON over HTTP.

    One ``httpx.AsyncClient`` backs each driver instance. The client
    pools connections and may be used by several concurrent tasks.

    Failures are mapped onto the error taxonomy: reads raise
    CollaboratorFetchError (NotFoundError on 404), writes raise
    CollaboratorMutationError. The ``code`` tells timeouts, transport
    errors, auth failures and other HTTP statuses apart.
    """

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        auth: httpx.Auth | None = None,
        timeout: float = 10.0,
        verify: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the driver.

        Args:
            base_url: Base URL of the API
            headers: Default request headers
            auth: Optional httpx auth (e.g. BasicAuth)
            timeout: Request timeout in seconds
            verify: Verify TLS certificates
            transport: Custom transport (used by tests)
        """
        self._base_url = base_url
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            auth=auth,
            timeout=timeout,
            verify=verify,
            transport=transport,
            follow_redirects=True,
        )

    @property
    def hostname(self) -> str:
        return urlparse(self._base_url).hostname or self._base_url

    @property
    def closed(self) -> bool:
        return self._client.is_closed

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "HTTPDriver":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        params: Any = None,
        json: Any = None,
    ) -> Any:
        """Make a request and return the decoded JSON body (or None)."""
        method = method.upper()
        is_read = method in READ_METHODS
        if path.startswith("http"):
            url = path
        else:
            url = f"{self._base_url.rstrip('/')}/{path.lstrip('/')}"

        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.TimeoutException as e:
            raise self._error(is_read, f"{method} {url} timed out", "TIMEOUT", url) from e
        except httpx.HTTPError as e:
            raise self._error(is_read, f"{method} {url} failed: {e}", "NETWORK_ERROR", url) from e

        if response.status_code == 404 and is_read:
            raise NotFoundError(path, url=url)
        if response.status_code in (401, 403):
            raise self._error(
                is_read,
                f"{method} {url} was rejected ({response.status_code})",
                "AUTH_ERROR",
                url,
                response.status_code,
            )
        if response.status_code >= 400:
            raise self._error(
                is_read,
                f"{method} {url} returned {response.status_code}",
                f"HTTP_{response.status_code}",
                url,
                response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise self._error(is_read, f"{method} {url} returned invalid JSON", "INVALID_RESPONSE", url) from e

    @staticmethod
    def _error(
        is_read: bool,
        message: str,
        code: str,
        url: str,
        status_code: int | None = None,
    ) -> CollaboratorFetchError | CollaboratorMutationError:
        if is_read:
            return CollaboratorFetchError(message, code=code, url=url, status_code=status_code)
        return CollaboratorMutationError(message, code=code, url=url, status_code=status_code)
