"""Collaborator clients (directory, IPAM, firewall, security platform)."""

from ipam_firewall_sync.drivers.base import (
    DirectoryClient,
    FirewallClient,
    Handle,
    IPAMClient,
    SecurityPlatformClient,
)
from ipam_firewall_sync.drivers.factory import DriverFactory
from ipam_firewall_sync.drivers.fortios import FortiOSDriver
from ipam_firewall_sync.drivers.http import HTTPDriver
from ipam_firewall_sync.drivers.nam import NAMDriver
from ipam_firewall_sync.drivers.netbox import NetboxDriver
from ipam_firewall_sync.drivers.nsx import NSXDriver

__all__ = [
    # Protocols
    "Handle",
    "DirectoryClient",
    "IPAMClient",
    "FirewallClient",
    "SecurityPlatformClient",
    # Implementations
    "HTTPDriver",
    "NAMDriver",
    "NetboxDriver",
    "FortiOSDriver",
    "NSXDriver",
    "DriverFactory",
]
