"""Data models for ipam-firewall-sync.

Value models are Pydantic BaseModel with frozen=True for immutability.
"""

from ipam_firewall_sync.models.common import AddressFamily, ErrorDetail
from ipam_firewall_sync.models.prefix import Prefix, Vlan
from ipam_firewall_sync.models.address import AddressGroup, AddressObject
from ipam_firewall_sync.models.security_group import (
    GroupTag,
    IPAddressExpression,
    SecurityGroup,
)
from ipam_firewall_sync.models.integrator import (
    APIEndpoint,
    FirewallEndpoint,
    FirewallScope,
    Integrator,
    SyncPriority,
)
from ipam_firewall_sync.models.diff import DiffResult
from ipam_firewall_sync.models.report import (
    Action,
    ObjectKind,
    Outcome,
    RunReport,
    RunStatus,
    TargetReport,
)

__all__ = [
    # Common
    "AddressFamily",
    "ErrorDetail",
    # IPAM
    "Prefix",
    "Vlan",
    # Firewall
    "AddressGroup",
    "AddressObject",
    # Security platform
    "GroupTag",
    "IPAddressExpression",
    "SecurityGroup",
    # Directory
    "APIEndpoint",
    "FirewallEndpoint",
    "FirewallScope",
    "Integrator",
    "SyncPriority",
    # Diff
    "DiffResult",
    # Reports
    "Action",
    "ObjectKind",
    "Outcome",
    "RunReport",
    "RunStatus",
    "TargetReport",
]
