"""NAM directory client."""

from __future__ import annotations

from pydantic import ValidationError

from ipam_firewall_sync.drivers.http import HTTPDriver
from ipam_firewall_sync.models.integrator import Integrator, SyncPriority
from ipam_firewall_sync.utils.errors import CollaboratorFetchError


class NAMDriver(HTTPDriver):
    """Client for the NAM directory that serves integrator definitions.

    Example:
        async with NAMDriver("https://nam.example.org/api", token="...") as nam:
            integrators = await nam.get_integrators("high")
    """

    INTEGRATORS_PATH = "/netbox_integrators"

    def __init__(self, base_url: str, token: str | None = None, **kwargs) -> None:
        headers = dict(kwargs.pop("headers", None) or {})
        headers.setdefault("Content-Type", "application/json")
        if token:
            headers["Authorization"] = f"Bearer {token}"
        super().__init__(base_url, headers=headers, **kwargs)

    async def get_integrators(self, priority: SyncPriority | str) -> list[Integrator]:
        """List integrators of one priority class, with endpoints expanded."""
        priority = SyncPriority(priority)
        data = await self._request(
            "GET",
            self.INTEGRATORS_PATH,
            params={"expand": 1, "sync_priority": priority.value},
        )
        if not isinstance(data, dict):
            raise CollaboratorFetchError(
                "Unexpected integrator list response", code="INVALID_RESPONSE"
            )
        try:
            return [Integrator.model_validate(item) for item in data.get("results") or []]
        except ValidationError as e:
            raise CollaboratorFetchError(f"Malformed integrator record: {e}", code="INVALID_RESPONSE") from e

    async def get_integrator(self, integrator_id: str) -> Integrator:
        """Fetch one integrator by id, with endpoints expanded."""
        data = await self._request(
            "GET",
            f"{self.INTEGRATORS_PATH}/{integrator_id}",
            params={"expand": 1},
        )
        if not isinstance(data, dict):
            raise CollaboratorFetchError(
                f"Unexpected response for integrator {integrator_id}", code="INVALID_RESPONSE"
            )
        try:
            return Integrator.model_validate(data)
        except ValidationError as e:
            raise CollaboratorFetchError(f"Malformed integrator record: {e}", code="INVALID_RESPONSE") from e
