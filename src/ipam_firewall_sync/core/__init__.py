"""Core reconciliation logic for ipam-firewall-sync.

Projection and set-diff are pure; the reconcilers and the worker talk
to collaborators only through the protocols in ``drivers.base``.
"""

from ipam_firewall_sync.core.projection import NAME_PREFIX, project
from ipam_firewall_sync.core.diff import group_diff, list_diff, unique_members
from ipam_firewall_sync.core.fortios import GROUP_PREFIX, group_name, reconcile_addresses
from ipam_firewall_sync.core.nsx import build_security_group, reconcile_security_group
from ipam_firewall_sync.core.worker import DesiredState, SyncWorker

__all__ = [
    # Projection
    "NAME_PREFIX",
    "project",
    # Diff
    "group_diff",
    "list_diff",
    "unique_members",
    # Reconcilers
    "GROUP_PREFIX",
    "group_name",
    "reconcile_addresses",
    "build_security_group",
    "reconcile_security_group",
    # Orchestrator
    "DesiredState",
    "SyncWorker",
]
