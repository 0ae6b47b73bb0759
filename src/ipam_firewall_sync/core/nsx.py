"""Reconciliation of security-platform groups holding raw IP values."""

from __future__ import annotations

from ipam_firewall_sync.core.diff import list_diff
from ipam_firewall_sync.drivers.base import SecurityPlatformClient
from ipam_firewall_sync.models.integrator import Integrator
from ipam_firewall_sync.models.prefix import Prefix
from ipam_firewall_sync.models.report import Action, ObjectKind, Outcome, TargetReport
from ipam_firewall_sync.models.security_group import GroupTag, IPAddressExpression, SecurityGroup
from ipam_firewall_sync.utils.errors import (
    CollaboratorMutationError,
    NotFoundError,
    SyncError,
)
from ipam_firewall_sync.utils.logging import get_logger_with_context

GROUP_PREFIX = "nsg-"


def build_security_group(
    integrator: Integrator,
    prefixes: list[Prefix],
    description: str | None = "Managed by NAM",
) -> SecurityGroup:
    """Build the desired security group of an integrator.

    The group carries one IP expression with every prefix (both
    families), or no expression at all when there are no prefixes. A
    tag is attached only when both scope and tag are configured.
    """
    values = list(dict.fromkeys(p.prefix for p in prefixes))

    tags = []
    if integrator.nsx_group_scope and integrator.nsx_group_tag:
        tags.append(GroupTag(scope=integrator.nsx_group_scope, tag=integrator.nsx_group_tag))

    return SecurityGroup(
        display_name=f"{GROUP_PREFIX}{integrator.nsx_group_name}",
        description=description,
        expression=[IPAddressExpression(ip_addresses=values)] if values else [],
        tags=tags,
    )


async def reconcile_security_group(
    platform: SecurityPlatformClient,
    group: SecurityGroup,
    integrator: str,
    global_manager: bool = False,
) -> TargetReport:
    """Push the desired group to one security-platform endpoint.

    A missing group is created. An existing group is replaced in full,
    once, when its IP values differ from the desired ones. Any other
    read failure skips the endpoint.
    """
    name = group.display_name
    log = get_logger_with_context(
        __name__,
        integrator=integrator,
        host=platform.hostname,
        scope="global" if global_manager else "local",
    )
    report = {
        "integrator": integrator,
        "target": platform.hostname,
        "scope": "global" if global_manager else "local",
    }

    try:
        current = await platform.get_group(name, global_manager=global_manager)
    except NotFoundError:
        current = None
    except SyncError as e:
        log.warning(f"Skipping endpoint, group '{name}' unavailable: {e}")
        return TargetReport(**report, skipped=True, reason=str(e))

    if current is None:
        action = Action.CREATE
    else:
        diff = list_diff(current.ip_addresses(), group.ip_addresses())
        if not diff.has_changes:
            log.debug(f"Security group '{name}' is up to date")
            return TargetReport(**report)
        log.debug(f"Security group '{name}' changes: +{len(diff.added)} -{len(diff.removed)}")
        action = Action.UPDATE

    try:
        await platform.patch_group(name, group, global_manager=global_manager)
    except CollaboratorMutationError as e:
        log.error(f"Failed to {action.value} security group '{name}': {e}")
        outcome = Outcome.fail(action, ObjectKind.SECURITY_GROUP, name, e.to_error_detail())
    else:
        log.info(f"{action.value.capitalize()}d security group '{name}'")
        outcome = Outcome.ok(action, ObjectKind.SECURITY_GROUP, name)

    return TargetReport(**report, outcomes=[outcome])
