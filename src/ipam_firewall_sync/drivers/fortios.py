"""FortiOS firewall client."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from ipam_firewall_sync.drivers.http import HTTPDriver
from ipam_firewall_sync.models.address import AddressGroup, AddressObject
from ipam_firewall_sync.models.common import AddressFamily
from ipam_firewall_sync.utils.errors import CollaboratorFetchError, NotFoundError


class FortiOSDriver(HTTPDriver):
    """Client for the FortiOS CMDB firewall address API.

    The IPv4 and IPv6 tables live under separate paths; every method
    selects the path from the address family. All calls are scoped to a
    VDOM.

    Example:
        async with FortiOSDriver("https://fw01.example.org", token="...") as fw:
            addresses = await fw.get_addresses("root", AddressFamily.IPV4)
    """

    CMDB = "/api/v2/cmdb/firewall"

    ADDRESS_TABLE = {
        AddressFamily.IPV4: "address",
        AddressFamily.IPV6: "address6",
    }
    GROUP_TABLE = {
        AddressFamily.IPV4: "addrgrp",
        AddressFamily.IPV6: "addrgrp6",
    }

    def __init__(self, base_url: str, token: str | None = None, **kwargs) -> None:
        headers = dict(kwargs.pop("headers", None) or {})
        headers.setdefault("Content-Type", "application/json")
        if token:
            headers["Authorization"] = f"Bearer {token}"
        super().__init__(base_url, headers=headers, **kwargs)

    def _path(self, table: str, name: str | None = None) -> str:
        path = f"{self.CMDB}/{table}"
        if name is not None:
            # Names such as "netbox_10.0.0.0/24" must stay one path segment
            path = f"{path}/{quote(name, safe='')}"
        return path

    @staticmethod
    def _results(data: Any) -> list[dict[str, Any]]:
        if not isinstance(data, dict) or not isinstance(data.get("results"), list):
            raise CollaboratorFetchError("Unexpected FortiOS response", code="INVALID_RESPONSE")
        return data["results"]

    async def get_addresses(self, scope: str, family: AddressFamily) -> list[AddressObject]:
        data = await self._request(
            "GET", self._path(self.ADDRESS_TABLE[family]), params={"vdom": scope}
        )
        return [AddressObject.from_api(item, family) for item in self._results(data)]

    async def add_address(self, address: AddressObject, scope: str) -> None:
        await self._request(
            "POST",
            self._path(self.ADDRESS_TABLE[address.family]),
            params={"vdom": scope},
            json=address.to_api(),
        )

    async def get_reference_count(self, name: str, scope: str, family: AddressFamily) -> int:
        """Read ``q_ref`` of an address object (requires ``with_meta``)."""
        path = self._path(self.ADDRESS_TABLE[family], name)
        data = await self._request("GET", path, params={"vdom": scope, "with_meta": 1})
        results = self._results(data)
        if not results:
            raise NotFoundError(name)

        q_ref = results[0].get("q_ref")
        if not isinstance(q_ref, int):
            raise CollaboratorFetchError(
                f"No reference count returned for '{name}'", code="INVALID_RESPONSE"
            )
        return q_ref

    async def delete_address(self, name: str, scope: str, family: AddressFamily) -> None:
        await self._request(
            "DELETE", self._path(self.ADDRESS_TABLE[family], name), params={"vdom": scope}
        )

    async def get_address_groups(self, scope: str, family: AddressFamily) -> list[AddressGroup]:
        data = await self._request(
            "GET", self._path(self.GROUP_TABLE[family]), params={"vdom": scope}
        )
        return [AddressGroup.from_api(item, family) for item in self._results(data)]

    async def add_address_group(self, group: AddressGroup, scope: str) -> None:
        await self._request(
            "POST",
            self._path(self.GROUP_TABLE[group.family]),
            params={"vdom": scope},
            json=group.to_api(),
        )

    async def update_address_group(self, name: str, group: AddressGroup, scope: str) -> None:
        await self._request(
            "PUT",
            self._path(self.GROUP_TABLE[group.family], name),
            params={"vdom": scope},
            json=group.to_api(),
        )
