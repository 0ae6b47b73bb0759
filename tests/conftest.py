"""Shared test fixtures for ipam-firewall-sync tests."""

from collections import defaultdict
from typing import Any

import pytest

from ipam_firewall_sync.models.address import AddressGroup, AddressObject
from ipam_firewall_sync.models.common import AddressFamily
from ipam_firewall_sync.models.integrator import APIEndpoint, Integrator
from ipam_firewall_sync.models.prefix import Prefix, Vlan
from ipam_firewall_sync.models.security_group import SecurityGroup
from ipam_firewall_sync.utils.config import SyncConfig
from ipam_firewall_sync.utils.errors import NotFoundError, SyncError


class FakeHandle:
    """Base of the in-memory collaborators: records calls and injected failures."""

    def __init__(self, hostname: str) -> None:
        self.hostname = hostname
        self.calls: list[tuple[Any, ...]] = []
        self.fail_on: dict[str, SyncError] = {}
        self.close_count = 0

    def _call(self, method: str, *args: Any) -> None:
        self.calls.append((method, *args))
        error = self.fail_on.get(method)
        if error is not None:
            raise error

    def called(self, method: str) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == method]

    async def close(self) -> None:
        self.close_count += 1

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


class FakeDirectory(FakeHandle):
    def __init__(self, integrators: list[Integrator] | None = None) -> None:
        super().__init__("nam.example.org")
        self.integrators = list(integrators or [])

    async def get_integrators(self, priority):
        self._call("get_integrators", str(getattr(priority, "value", priority)))
        return [i for i in self.integrators if i.sync_priority.value == getattr(priority, "value", priority)]

    async def get_integrator(self, integrator_id):
        self._call("get_integrator", integrator_id)
        for integrator in self.integrators:
            if str(integrator.id) == str(integrator_id):
                return integrator
        raise NotFoundError(f"integrator {integrator_id}")


class FakeIPAM(FakeHandle):
    def __init__(self, prefixes: list[Prefix] | None = None) -> None:
        super().__init__("netbox.example.org")
        self.prefixes = list(prefixes or [])

    async def get_prefixes(self, query):
        self._call("get_prefixes", query)
        return list(self.prefixes)


class FakeFirewall(FakeHandle):
    """In-memory firewall keyed by (scope, family)."""

    def __init__(self, hostname: str = "fw01.example.org") -> None:
        super().__init__(hostname)
        self.addresses: dict[tuple[str, AddressFamily], dict[str, AddressObject]] = defaultdict(dict)
        self.groups: dict[tuple[str, AddressFamily], dict[str, AddressGroup]] = defaultdict(dict)
        self.references: dict[str, int] = {}

    def seed(self, scope: str, *items: AddressObject | AddressGroup) -> None:
        for item in items:
            table = self.groups if isinstance(item, AddressGroup) else self.addresses
            table[(scope, item.family)][item.name] = item

    async def get_addresses(self, scope, family):
        self._call("get_addresses", scope, family)
        return list(self.addresses[(scope, family)].values())

    async def add_address(self, address, scope):
        self._call("add_address", address.name, scope)
        self.addresses[(scope, address.family)][address.name] = address

    async def get_reference_count(self, name, scope, family):
        self._call("get_reference_count", name, scope)
        return self.references.get(name, 0)

    async def delete_address(self, name, scope, family):
        self._call("delete_address", name, scope)
        self.addresses[(scope, family)].pop(name, None)

    async def get_address_groups(self, scope, family):
        self._call("get_address_groups", scope, family)
        return list(self.groups[(scope, family)].values())

    async def add_address_group(self, group, scope):
        self._call("add_address_group", group.name, scope)
        self.groups[(scope, group.family)][group.name] = group

    async def update_address_group(self, name, group, scope):
        self._call("update_address_group", name, scope)
        self.groups[(scope, group.family)][name] = group


class FakeSecurityPlatform(FakeHandle):
    """In-memory security platform keyed by (name, global_manager)."""

    def __init__(self, hostname: str = "nsx01.example.org") -> None:
        super().__init__(hostname)
        self.groups: dict[tuple[str, bool], SecurityGroup] = {}

    async def get_group(self, name, global_manager=False):
        self._call("get_group", name, global_manager)
        group = self.groups.get((name, global_manager))
        if group is None:
            raise NotFoundError(name)
        return group

    async def patch_group(self, name, group, global_manager=False):
        self._call("patch_group", name, global_manager)
        self.groups[(name, global_manager)] = group


class FakeFactory:
    """Stand-in for DriverFactory handing out the in-memory collaborators.

    State lives on the fake per URL, so it survives handle replacement and
    consecutive runs. ``opened`` lists every handle handed out, in order.
    """

    def __init__(self, directory: FakeDirectory, ipam: FakeIPAM | None = None) -> None:
        self.directory_handle = directory
        self.ipam_handle = ipam or FakeIPAM()
        self.firewalls: dict[str, FakeFirewall] = {}
        self.platforms: dict[str, FakeSecurityPlatform] = {}
        self.opened: list[tuple[str, FakeHandle]] = []

    def directory(self):
        self.opened.append(("directory", self.directory_handle))
        return self.directory_handle

    def ipam(self, endpoint):
        self.opened.append(("ipam", self.ipam_handle))
        return self.ipam_handle

    def firewall(self, endpoint):
        host = endpoint.url.split("//")[-1].split("/")[0]
        handle = self.firewalls.setdefault(endpoint.url, FakeFirewall(host))
        self.opened.append(("firewall", handle))
        return handle

    def security_platform(self, endpoint):
        host = endpoint.url.split("//")[-1].split("/")[0]
        handle = self.platforms.setdefault(endpoint.url, FakeSecurityPlatform(host))
        self.opened.append(("nsx", handle))
        return handle


def make_integrator(**overrides: Any) -> Integrator:
    """Build an enabled integrator with one firewall and one NSX endpoint."""
    data: dict[str, Any] = {
        "id": 1,
        "name": "office-lan",
        "enabled": True,
        "query": "https://netbox.example.org/api/ipam/prefixes/?tag=office&status=active",
        "sync_priority": "low",
        "netbox_endpoint": {"name": "netbox", "url": "https://netbox.example.org", "key": "nb-token"},
        "create_fg_group": True,
        "fg_group_name": "office",
        "fortigate_endpoints": [
            {
                "endpoint": {"name": "fw01", "url": "https://fw01.example.org", "key": "fw-token"},
                "vdoms": [{"name": "root"}, {"name": "dmz"}],
            }
        ],
        "create_nsx_group": True,
        "nsx_group_name": "office",
        "nsx_group_scope": "site",
        "nsx_group_tag": "oslo",
        "nsx_endpoints": [
            {"name": "nsx01", "url": "https://nsx01.example.org/api/v1", "user": "admin", "pass": "secret"}
        ],
    }
    data.update(overrides)
    return Integrator.model_validate(data)


@pytest.fixture
def config() -> SyncConfig:
    """Production-mode configuration pointing at a fake directory."""
    return SyncConfig(
        ssi_name="ipam-firewall-sync-test",
        nam_url="https://nam.example.org/api",
        nam_token="nam-token",
    )


@pytest.fixture
def prefixes() -> list[Prefix]:
    """Desired-state prefixes of both families."""
    return [
        Prefix(id=1, prefix="192.168.1.0/24", family=4, vlan=Vlan(id=10, name="Production")),
        Prefix(id=2, prefix="10.20.0.0/16", family=4),
        Prefix(id=3, prefix="2001:db8::/32", family=6),
    ]


@pytest.fixture
def integrator() -> Integrator:
    return make_integrator()


@pytest.fixture
def firewall() -> FakeFirewall:
    return FakeFirewall()


@pytest.fixture
def platform() -> FakeSecurityPlatform:
    return FakeSecurityPlatform()


@pytest.fixture
def factory(integrator: Integrator, prefixes: list[Prefix]) -> FakeFactory:
    return FakeFactory(FakeDirectory([integrator]), FakeIPAM(prefixes))
