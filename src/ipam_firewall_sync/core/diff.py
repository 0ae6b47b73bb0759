"""Set-difference helpers for groups and flat value lists."""

from __future__ import annotations

from typing import Iterable

from ipam_firewall_sync.models.address import AddressGroup, AddressObject
from ipam_firewall_sync.models.diff import DiffResult
from ipam_firewall_sync.utils.errors import PreconditionError


def _difference(left: Iterable[str], right: Iterable[str]) -> list[str]:
    """Values of ``left`` missing from ``right``, de-duplicated, in order."""
    exclude = set(right)
    return [value for value in dict.fromkeys(left) if value not in exclude]


def group_diff(existing: AddressGroup | None, desired: AddressGroup | None) -> DiffResult:
    """Compare two groups by member name.

    Args:
        existing: Group as observed on the target
        desired: Group as derived from the IPAM

    Returns:
        DiffResult with names only in ``desired`` (added) and only in
        ``existing`` (removed)

    Raises:
        PreconditionError: If either group is None
    """
    if existing is None or desired is None:
        raise PreconditionError(
            "Address group(s) cannot be undefined",
            argument="existing" if existing is None else "desired",
        )

    return DiffResult(
        added=_difference(desired.members, existing.members),
        removed=_difference(existing.members, desired.members),
    )


def list_diff(existing: Iterable[str], desired: Iterable[str]) -> DiffResult:
    """Compare two flat lists of raw values by string equality."""
    existing = list(dict.fromkeys(existing))
    desired = list(desired)
    return DiffResult(
        added=_difference(desired, existing),
        removed=_difference(existing, desired),
    )


def unique_members(objects: Iterable[AddressObject]) -> list[str]:
    """Names of the given objects with duplicates dropped, in order."""
    return list(dict.fromkeys(obj.name for obj in objects))
