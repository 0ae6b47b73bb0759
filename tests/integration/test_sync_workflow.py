"""Integration tests for end-to-end reconciliation runs."""

import pytest

from conftest import FakeDirectory, FakeFactory, FakeIPAM, make_integrator

from ipam_firewall_sync.core.worker import SyncWorker
from ipam_firewall_sync.models.address import AddressGroup, AddressObject
from ipam_firewall_sync.models.common import AddressFamily
from ipam_firewall_sync.models.prefix import Prefix, Vlan
from ipam_firewall_sync.models.report import Action, RunStatus
from ipam_firewall_sync.utils.config import SyncConfig

pytestmark = pytest.mark.integration

V4 = AddressFamily.IPV4
V6 = AddressFamily.IPV6
FW = "https://fw01.example.org"
NSX = "https://nsx01.example.org/api/v1"


class TestFirstRun:
    """A first run against empty targets."""

    @pytest.mark.asyncio
    async def test_objects_and_groups_created(self, config: SyncConfig, factory: FakeFactory):
        """Test every scope receives objects and both managed groups."""
        await SyncWorker(config, factory=factory).work("low")
        firewall = factory.firewalls[FW]

        for scope in ("root", "dmz"):
            assert set(firewall.addresses[(scope, V4)]) == {"netbox_192.168.1.0/24", "netbox_10.20.0.0/16"}
            assert set(firewall.addresses[(scope, V6)]) == {"netbox6_2001:db8::/32"}
            assert firewall.groups[(scope, V4)]["grp_office"].members == [
                "netbox_192.168.1.0/24",
                "netbox_10.20.0.0/16",
            ]
            assert firewall.groups[(scope, V6)]["grp6_office"].members == ["netbox6_2001:db8::/32"]

        assert firewall.addresses[("root", V4)]["netbox_192.168.1.0/24"].comment == "production"

    @pytest.mark.asyncio
    async def test_security_group_created(self, config: SyncConfig, factory: FakeFactory):
        """Test the security group carries every prefix and the tag."""
        await SyncWorker(config, factory=factory).work("low")

        group = factory.platforms[NSX].groups[("nsg-office", False)]
        assert set(group.ip_addresses()) == {"192.168.1.0/24", "10.20.0.0/16", "2001:db8::/32"}
        assert [(t.scope, t.tag) for t in group.tags] == [("site", "oslo")]

    @pytest.mark.asyncio
    async def test_second_run_is_a_no_op(self, config: SyncConfig, factory: FakeFactory):
        """Test a converged state issues no further mutations."""
        worker = SyncWorker(config, factory=factory)
        await worker.work("low")
        firewall = factory.firewalls[FW]
        platform = factory.platforms[NSX]
        firewall.calls.clear()
        platform.calls.clear()

        assert await worker.work("low") == RunStatus.SUCCESS

        mutations = {"add_address", "add_address_group", "update_address_group", "delete_address"}
        assert [c for c in firewall.calls if c[0] in mutations] == []
        assert platform.called("patch_group") == []
        assert worker.last_report.succeeded == 0
        assert worker.run_count == 2


class TestDrift:
    """Runs against targets that drifted from the IPAM."""

    @pytest.mark.asyncio
    async def test_removed_prefix(self, config: SyncConfig):
        """Test a prefix dropped from the IPAM leaves the group and is deleted if unused."""
        integrator = make_integrator(
            fortigate_endpoints=[{"endpoint": {"url": FW}, "vdoms": [{"name": "root"}]}],
            create_nsx_group=False,
        )
        ipam = FakeIPAM([Prefix(prefix="10.0.1.0/24", family=4), Prefix(prefix="10.0.2.0/24", family=4)])
        factory = FakeFactory(FakeDirectory([integrator]), ipam)
        worker = SyncWorker(config, factory=factory)
        await worker.work()

        firewall = factory.firewalls[FW]
        ipam.prefixes = [Prefix(prefix="10.0.1.0/24", family=4), Prefix(prefix="10.0.3.0/24", family=4)]
        await worker.work()

        assert set(firewall.groups[("root", V4)]["grp_office"].members) == {
            "netbox_10.0.1.0/24",
            "netbox_10.0.3.0/24",
        }
        assert "netbox_10.0.2.0/24" not in firewall.addresses[("root", V4)]
        deletes = [o.name for t in worker.last_report.targets for o in t.by_action(Action.DELETE)]
        assert deletes == ["netbox_10.0.2.0/24"]

    @pytest.mark.asyncio
    async def test_referenced_object_survives(self, config: SyncConfig):
        """Test a removed member still used by a policy is kept."""
        integrator = make_integrator(
            fortigate_endpoints=[{"endpoint": {"url": FW}, "vdoms": [{"name": "root"}]}],
            create_nsx_group=False,
        )
        factory = FakeFactory(FakeDirectory([integrator]), FakeIPAM([Prefix(prefix="10.0.1.0/24", family=4)]))
        factory.firewall(integrator.fortigate_endpoints[0].endpoint).seed(
            "root",
            AddressObject(name="netbox_10.9.0.0/16", family=V4, value="10.9.0.0 255.255.0.0"),
            AddressGroup(name="grp_office", family=V4, members=["netbox_10.9.0.0/16"]),
        )
        firewall = factory.firewalls[FW]
        firewall.references["netbox_10.9.0.0/16"] = 1

        await SyncWorker(config, factory=factory).work()

        assert firewall.groups[("root", V4)]["grp_office"].members == ["netbox_10.0.1.0/24"]
        assert "netbox_10.9.0.0/16" in firewall.addresses[("root", V4)]
        assert firewall.called("delete_address") == []

    @pytest.mark.asyncio
    async def test_security_group_replaced(self, config: SyncConfig):
        """Test a drifted security group is replaced once with the full set."""
        integrator = make_integrator(create_fg_group=False, nsx_group_scope=None)
        factory = FakeFactory(
            FakeDirectory([integrator]),
            FakeIPAM([Prefix(prefix="10.0.0.2/32", family=4, vlan=Vlan(name="x"))]),
        )
        worker = SyncWorker(config, factory=factory)
        await worker.work()
        platform = factory.platforms[NSX]
        platform.groups[("nsg-office", False)] = platform.groups[("nsg-office", False)].model_copy(
            update={"expression": []}
        )
        platform.calls.clear()

        await worker.work()

        assert len(platform.called("patch_group")) == 1
        assert platform.groups[("nsg-office", False)].ip_addresses() == ["10.0.0.2/32"]
        assert platform.groups[("nsg-office", False)].tags == []


class TestMultipleIntegrators:
    """Runs spanning several integrators."""

    @pytest.mark.asyncio
    async def test_integrators_processed_in_order(self, config: SyncConfig, prefixes):
        """Test integrators are handled one after the other with their own groups."""
        directory = FakeDirectory([
            make_integrator(id=1, name="a", fg_group_name="a", create_nsx_group=False),
            make_integrator(id=2, name="b", fg_group_name="b", create_nsx_group=False),
            make_integrator(id=3, name="c", enabled=False),
        ])
        factory = FakeFactory(directory, FakeIPAM(prefixes))
        worker = SyncWorker(config, factory=factory)

        await worker.work()

        groups = factory.firewalls[FW].groups[("root", V4)]
        assert set(groups) == {"grp_a", "grp_b"}
        assert worker.last_report.integrators_processed == ["a", "b"]
        assert worker.last_report.integrators_skipped == ["c"]
        assert [k for k, _ in factory.opened] == [
            "directory", "ipam", "firewall", "ipam", "firewall",
        ]
