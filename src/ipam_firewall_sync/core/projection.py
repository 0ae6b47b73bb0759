"""Projection of IPAM prefixes into firewall address objects."""

from __future__ import annotations

from netaddr import AddrFormatError, IPNetwork

from ipam_firewall_sync.models.address import AddressObject
from ipam_firewall_sync.models.common import AddressFamily
from ipam_firewall_sync.models.prefix import Prefix
from ipam_firewall_sync.utils.logging import get_logger

logger = get_logger(__name__)

NAME_PREFIX = {
    AddressFamily.IPV4: "netbox_",
    AddressFamily.IPV6: "netbox6_",
}


def _comment(prefix: Prefix) -> str | None:
    label = prefix.label
    return label.lower() if label else None


def _ipv4_object(prefix: Prefix) -> AddressObject | None:
    try:
        network = IPNetwork(prefix.prefix, version=4)
    except (AddrFormatError, ValueError):
        logger.warning(f"Ignoring malformed IPv4 prefix '{prefix.prefix}'")
        return None

    return AddressObject(
        name=f"{NAME_PREFIX[AddressFamily.IPV4]}{prefix.prefix}",
        family=AddressFamily.IPV4,
        value=f"{network.network} {network.netmask}",
        comment=_comment(prefix),
        color=0,
    )


def _ipv6_object(prefix: Prefix) -> AddressObject:
    return AddressObject(
        name=f"{NAME_PREFIX[AddressFamily.IPV6]}{prefix.display}",
        family=AddressFamily.IPV6,
        value=prefix.prefix,
        comment=_comment(prefix),
    )


def project(prefixes: list[Prefix], family: AddressFamily | int) -> list[AddressObject]:
    """Map IPAM prefixes of one family to firewall address objects.

    Prefixes of the other family are filtered out. Input order is kept.

    IPv4 objects are named ``netbox_<cidr>`` and carry
    ``"<network> <dotted mask>"``; IPv6 objects are named
    ``netbox6_<display>`` and carry the CIDR text unchanged. The comment
    is the lowercased VLAN name, or absent.

    Args:
        prefixes: Desired-state prefixes
        family: Address family to keep (4 or 6)

    Returns:
        Address objects, possibly empty
    """
    family = AddressFamily(family)
    objects: list[AddressObject] = []

    for prefix in prefixes:
        if prefix.family != family:
            continue
        if family == AddressFamily.IPV4:
            obj = _ipv4_object(prefix)
            if obj is not None:
                objects.append(obj)
        else:
            objects.append(_ipv6_object(prefix))

    return objects
