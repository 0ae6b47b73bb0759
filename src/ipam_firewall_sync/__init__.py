"""ipam-firewall-sync: keep firewalls in line with the IPAM.

Reads integrator definitions from the NAM directory, fetches each
integrator's prefixes from NetBox and reconciles them into:

- **FortiOS** address objects and managed address groups, per VDOM and
  address family, with reference-checked deletion of stale members
- **NSX** security groups holding the raw IP/CIDR values

Usage:
    # Library API
    import asyncio
    from ipam_firewall_sync import SyncWorker, load_config

    worker = SyncWorker(load_config("config.yaml"))
    status = asyncio.run(worker.work("high"))

CLI:
    ipam-firewall-sync run --priority high
    ipam-firewall-sync integrators
    ipam-firewall-sync preview <integrator-id>
"""

__version__ = "0.1.0"

# Core
from ipam_firewall_sync.core.projection import project
from ipam_firewall_sync.core.diff import group_diff, list_diff
from ipam_firewall_sync.core.fortios import reconcile_addresses
from ipam_firewall_sync.core.nsx import build_security_group, reconcile_security_group
from ipam_firewall_sync.core.worker import DesiredState, SyncWorker

# Models (commonly used)
from ipam_firewall_sync.models.common import AddressFamily
from ipam_firewall_sync.models.prefix import Prefix
from ipam_firewall_sync.models.address import AddressGroup, AddressObject
from ipam_firewall_sync.models.security_group import SecurityGroup
from ipam_firewall_sync.models.integrator import Integrator, SyncPriority
from ipam_firewall_sync.models.report import RunReport, RunStatus

# Drivers
from ipam_firewall_sync.drivers.factory import DriverFactory

# Config
from ipam_firewall_sync.utils.config import SyncConfig, load_config

__all__ = [
    # Version
    "__version__",
    # Core
    "project",
    "group_diff",
    "list_diff",
    "reconcile_addresses",
    "build_security_group",
    "reconcile_security_group",
    "DesiredState",
    "SyncWorker",
    # Models
    "AddressFamily",
    "Prefix",
    "AddressGroup",
    "AddressObject",
    "SecurityGroup",
    "Integrator",
    "SyncPriority",
    "RunReport",
    "RunStatus",
    # Drivers
    "DriverFactory",
    # Config
    "SyncConfig",
    "load_config",
]
