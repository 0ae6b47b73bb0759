"""VMware NSX security group client."""

from __future__ import annotations

from urllib.parse import quote

import httpx

from ipam_firewall_sync.drivers.http import HTTPDriver
from ipam_firewall_sync.models.security_group import SecurityGroup
from ipam_firewall_sync.utils.errors import CollaboratorFetchError


class NSXDriver(HTTPDriver):
    """Client for the NSX Policy API groups of the default domain.

    Groups live either on the local manager or, for federated setups,
    on the global manager; ``global_manager`` selects the tree.
    """

    LOCAL_GROUPS = "/policy/api/v1/infra/domains/default/groups"
    GLOBAL_GROUPS = "/global-manager/api/v1/global-infra/domains/default/groups"

    def __init__(
        self,
        base_url: str,
        username: str | None = None,
        password: str | None = None,
        **kwargs,
    ) -> None:
        headers = dict(kwargs.pop("headers", None) or {})
        headers.setdefault("Content-Type", "application/json")
        auth = httpx.BasicAuth(username or "", password or "")
        # Endpoints are registered with the manager API root
        super().__init__(base_url.replace("/api/v1", "").rstrip("/"), headers=headers, auth=auth, **kwargs)

    def _path(self, name: str, global_manager: bool) -> str:
        root = self.GLOBAL_GROUPS if global_manager else self.LOCAL_GROUPS
        return f"{root}/{quote(name, safe='')}"

    async def get_group(self, name: str, global_manager: bool = False) -> SecurityGroup:
        data = await self._request("GET", self._path(name, global_manager))
        if not isinstance(data, dict):
            raise CollaboratorFetchError(f"Unexpected response for group '{name}'", code="INVALID_RESPONSE")
        return SecurityGroup.from_api(data)

    async def patch_group(
        self, name: str, group: SecurityGroup, global_manager: bool = False
    ) -> None:
        await self._request("PATCH", self._path(name, global_manager), json=group.to_api())
