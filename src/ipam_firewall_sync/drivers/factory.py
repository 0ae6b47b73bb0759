"""Construction of driver handles from configuration and endpoints."""

from __future__ import annotations

from typing import Any

import httpx

from ipam_firewall_sync.drivers.fortios import FortiOSDriver
from ipam_firewall_sync.drivers.nam import NAMDriver
from ipam_firewall_sync.drivers.netbox import NetboxDriver
from ipam_firewall_sync.drivers.nsx import NSXDriver
from ipam_firewall_sync.models.integrator import APIEndpoint
from ipam_firewall_sync.utils.config import SyncConfig
from ipam_firewall_sync.utils.errors import ConfigurationError


class DriverFactory:
    """Open handles for the directory and for integrator endpoints.

    Every handle shares the configured timeout, TLS policy and
    User-Agent. Tests pass an ``httpx.MockTransport`` as ``transport``.
    """

    def __init__(
        self,
        config: SyncConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.transport = transport

    def _options(self) -> dict[str, Any]:
        return {
            "headers": {"User-Agent": self.config.user_agent},
            "timeout": self.config.request_timeout,
            "verify": self.config.verify_tls,
            "transport": self.transport,
        }

    def directory(self) -> NAMDriver:
        """Open the NAM directory handle.

        Raises:
            ConfigurationError: If no directory URL is configured
        """
        if not self.config.nam_url:
            raise ConfigurationError("NAM directory URL is not configured", config_key="nam_url")
        return NAMDriver(self.config.nam_url, token=self.config.nam_token, **self._options())

    def ipam(self, endpoint: APIEndpoint) -> NetboxDriver:
        return NetboxDriver(endpoint.url, token=endpoint.key, **self._options())

    def firewall(self, endpoint: APIEndpoint) -> FortiOSDriver:
        return FortiOSDriver(endpoint.url, token=endpoint.key, **self._options())

    def security_platform(self, endpoint: APIEndpoint) -> NSXDriver:
        return NSXDriver(
            endpoint.url,
            username=endpoint.user,
            password=endpoint.password,
            **self._options(),
        )
