"""Reconciliation of firewall address objects and groups for one scope."""

from __future__ import annotations

from typing import Awaitable

from ipam_firewall_sync.core.diff import group_diff, unique_members
from ipam_firewall_sync.drivers.base import FirewallClient
from ipam_firewall_sync.models.address import AddressGroup, AddressObject
from ipam_firewall_sync.models.common import AddressFamily
from ipam_firewall_sync.models.integrator import Integrator
from ipam_firewall_sync.models.report import Action, ObjectKind, Outcome, TargetReport
from ipam_firewall_sync.utils.errors import CollaboratorMutationError, SyncError
from ipam_firewall_sync.utils.logging import LoggerAdapter, get_logger_with_context

GROUP_PREFIX = {
    AddressFamily.IPV4: "grp_",
    AddressFamily.IPV6: "grp6_",
}

# Display color of groups owned by the sync service
MANAGED_GROUP_COLOR = 3


def group_name(integrator: Integrator, family: AddressFamily) -> str:
    """Name of the managed address group of an integrator."""
    return f"{GROUP_PREFIX[family]}{integrator.fg_group_name}"


async def _attempt(
    log: LoggerAdapter,
    call: Awaitable[None],
    action: Action,
    kind: ObjectKind,
    name: str,
) -> Outcome:
    """Await one mutation and turn its result into an Outcome."""
    try:
        await call
    except CollaboratorMutationError as e:
        log.error(f"Failed to {action.value} {kind.value} '{name}': {e}")
        return Outcome.fail(action, kind, name, e.to_error_detail())

    log.info(f"{action.value.capitalize()}d {kind.value} '{name}'")
    return Outcome.ok(action, kind, name)


async def _safe_delete(
    firewall: FirewallClient,
    log: LoggerAdapter,
    name: str,
    scope: str,
    family: AddressFamily,
) -> Outcome:
    """Delete an address object only when nothing on the target references it."""
    try:
        references = await firewall.get_reference_count(name, scope, family)
    except SyncError as e:
        log.warning(f"Keeping '{name}', reference count unavailable: {e}")
        return Outcome.skipped(ObjectKind.ADDRESS, name, "reference count unavailable")

    if references != 0:
        log.info(f"Keeping '{name}', still referenced {references} time(s)")
        return Outcome.skipped(ObjectKind.ADDRESS, name, f"referenced {references} time(s)")

    return await _attempt(
        log,
        firewall.delete_address(name, scope, family),
        Action.DELETE,
        ObjectKind.ADDRESS,
        name,
    )


async def reconcile_addresses(
    firewall: FirewallClient,
    scope: str,
    integrator: Integrator,
    desired: list[AddressObject],
    family: AddressFamily | int,
    managed_comment: str = "Managed by NAM",
) -> TargetReport:
    """Bring one scope of a firewall in line with the desired address objects.

    Existing objects and groups are read once up front; that snapshot
    drives every decision for the scope. Missing objects are created
    before the managed group is created or updated, and members dropped
    from the group are deleted only after the update succeeded and only
    when their reference count is zero.

    Args:
        firewall: Open firewall handle
        scope: Scope (VDOM) to reconcile
        integrator: Integrator the objects belong to
        desired: Projected address objects of ``family``
        family: Address family of this pass
        managed_comment: Comment set on managed groups

    Returns:
        TargetReport with one Outcome per attempted action. A failed
        snapshot read yields a skipped report instead of an exception.
    """
    family = AddressFamily(family)
    log = get_logger_with_context(
        __name__,
        integrator=integrator.name,
        host=firewall.hostname,
        scope=scope,
        family=family.label,
    )
    report = {
        "integrator": integrator.name,
        "target": firewall.hostname,
        "scope": scope,
        "family": family,
    }

    try:
        existing_groups = await firewall.get_address_groups(scope, family)
        existing_objects = await firewall.get_addresses(scope, family)
    except SyncError as e:
        log.warning(f"Skipping scope, existing state unavailable: {e}")
        return TargetReport(**report, skipped=True, reason=str(e))

    outcomes: list[Outcome] = []

    existing_names = {obj.name for obj in existing_objects}
    for obj in desired:
        if obj.name in existing_names:
            continue
        existing_names.add(obj.name)
        outcomes.append(
            await _attempt(
                log, firewall.add_address(obj, scope), Action.CREATE, ObjectKind.ADDRESS, obj.name
            )
        )

    if not (integrator.create_fg_group and integrator.fg_group_name):
        log.debug("Group management disabled")
        return TargetReport(**report, outcomes=outcomes)

    name = group_name(integrator, family)
    wanted = AddressGroup(
        name=name,
        family=family,
        members=unique_members(desired),
        comment=managed_comment,
        color=MANAGED_GROUP_COLOR,
    )
    current = next((g for g in existing_groups if g.name == name), None)

    if current is None:
        outcomes.append(
            await _attempt(
                log,
                firewall.add_address_group(wanted, scope),
                Action.CREATE,
                ObjectKind.ADDRESS_GROUP,
                name,
            )
        )
        return TargetReport(**report, outcomes=outcomes)

    diff = group_diff(current, wanted)
    if not diff.has_changes:
        log.debug(f"Group '{name}' is up to date")
        return TargetReport(**report, outcomes=outcomes)

    log.debug(f"Group '{name}' changes: +{len(diff.added)} -{len(diff.removed)}")
    updated = await _attempt(
        log,
        firewall.update_address_group(name, wanted, scope),
        Action.UPDATE,
        ObjectKind.ADDRESS_GROUP,
        name,
    )
    outcomes.append(updated)

    if updated.success:
        for removed in diff.removed:
            outcomes.append(await _safe_delete(firewall, log, removed, scope, family))

    return TargetReport(**report, outcomes=outcomes)
