"""Sync orchestrator: one reconciliation run across all integrators."""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone

from ipam_firewall_sync.core.fortios import reconcile_addresses
from ipam_firewall_sync.core.nsx import build_security_group, reconcile_security_group
from ipam_firewall_sync.core.projection import project
from ipam_firewall_sync.drivers.base import (
    DirectoryClient,
    FirewallClient,
    Handle,
    IPAMClient,
    SecurityPlatformClient,
)
from ipam_firewall_sync.drivers.factory import DriverFactory
from ipam_firewall_sync.models.address import AddressObject
from ipam_firewall_sync.models.common import AddressFamily
from ipam_firewall_sync.models.integrator import FirewallEndpoint, Integrator, SyncPriority
from ipam_firewall_sync.models.prefix import Prefix
from ipam_firewall_sync.models.report import RunReport, RunStatus, TargetReport
from ipam_firewall_sync.utils.config import SyncConfig
from ipam_firewall_sync.utils.errors import SyncError
from ipam_firewall_sync.utils.logging import LoggerAdapter, get_logger_with_context


@dataclass
class DesiredState:
    """Desired state of one integrator: raw prefixes and their projections."""

    prefixes: list[Prefix] = field(default_factory=list)
    addresses: list[AddressObject] = field(default_factory=list)
    addresses6: list[AddressObject] = field(default_factory=list)

    @classmethod
    def from_prefixes(cls, prefixes: list[Prefix]) -> "DesiredState":
        return cls(
            prefixes=list(prefixes),
            addresses=project(prefixes, AddressFamily.IPV4),
            addresses6=project(prefixes, AddressFamily.IPV6),
        )

    def release(self) -> None:
        """Drop every list so a large integrator does not outlive its turn."""
        self.prefixes.clear()
        self.addresses.clear()
        self.addresses6.clear()


class _RunState:
    """Single-flight guard and the handles owned by the current run."""

    def __init__(self, log: LoggerAdapter) -> None:
        self._lock = threading.Lock()
        self.log = log
        self.directory: DirectoryClient | None = None
        self.ipam: IPAMClient | None = None
        self.firewall: FirewallClient | None = None
        self.nsx: SecurityPlatformClient | None = None

    @property
    def running(self) -> bool:
        return self._lock.locked()

    def begin(self) -> bool:
        """Atomically enter the running state; False if already running."""
        return self._lock.acquire(blocking=False)

    def end(self) -> None:
        self._lock.release()

    async def replace(self, slot: str, handle: Handle) -> None:
        """Close the handle held in ``slot`` and store ``handle`` in its place."""
        previous = getattr(self, slot)
        setattr(self, slot, handle)
        if previous is not None:
            await self._close(slot, previous)

    async def release(self) -> None:
        """Close every open handle."""
        for slot in ("ipam", "firewall", "nsx", "directory"):
            handle = getattr(self, slot)
            setattr(self, slot, None)
            if handle is not None:
                await self._close(slot, handle)

    async def _close(self, slot: str, handle: Handle) -> None:
        try:
            await handle.close()
        except Exception as e:
            self.log.warning(f"Failed closing {slot} handle for {handle.hostname}: {e!r}")


class SyncWorker:
    """Reconcile firewall targets with the IPAM for every integrator.

    Integrators are processed one after another. Within a firewall
    endpoint, every scope and both address families run concurrently
    over the endpoint's single handle. Security-platform endpoints are
    handled one at a time.

    Only one run may be in flight per worker; a second request returns
    ``RunStatus.ALREADY_RUNNING`` without touching any collaborator.

    Example:
        worker = SyncWorker(load_config())
        status = asyncio.run(worker.work("high"))
    """

    def __init__(self, config: SyncConfig, factory: DriverFactory | None = None) -> None:
        self.config = config
        self.factory = factory or DriverFactory(config)
        self.log = get_logger_with_context(__name__, component="worker")
        self._state = _RunState(self.log)
        self._run_count = 0
        self._last_report: RunReport | None = None

    @property
    def is_running(self) -> bool:
        return self._state.running

    @property
    def run_count(self) -> int:
        """Number of runs completed without raising."""
        return self._run_count

    @property
    def last_report(self) -> RunReport | None:
        return self._last_report

    async def work(self, priority: SyncPriority | str | None = None) -> RunStatus:
        """Run one reconciliation pass.

        Args:
            priority: Priority class of integrators to process (defaults
                to the configured priority)

        Returns:
            RunStatus.SUCCESS, or RunStatus.ALREADY_RUNNING when a run is
            in progress

        Raises:
            SyncError: If the run could not start (configuration, or the
                integrator list could not be fetched). Any unexpected
                exception also propagates. Handles are closed and the
                running flag is cleared first.
        """
        priority = SyncPriority(priority or self.config.priority)
        if not self._state.begin():
            self.log.warning("Worker task already running")
            return RunStatus.ALREADY_RUNNING

        processed: list[str] = []
        skipped: list[str] = []
        targets: list[TargetReport] = []
        started_at = datetime.now(timezone.utc)

        try:
            self.log.debug(f"Worker running task (priority={priority.value})")
            integrators = await self._resolve_integrators(priority)

            for integrator in integrators:
                if not integrator.enabled and not self.config.diagnostic_mode:
                    if self.config.dev_mode:
                        self.log.debug(f"Skipping disabled integrator '{integrator.name}'")
                    skipped.append(integrator.name)
                    continue

                results = await self._process(integrator)
                if results is None:
                    skipped.append(integrator.name)
                    continue
                processed.append(integrator.name)
                targets.extend(results)
        finally:
            try:
                await self._state.release()
            finally:
                self._state.end()

        self._run_count += 1
        self._last_report = RunReport(
            priority=priority.value,
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
            integrators_processed=processed,
            integrators_skipped=skipped,
            targets=targets,
        )
        self.log.info(
            f"Completed run number {self._run_count}: "
            f"{len(processed)} integrator(s), "
            f"{self._last_report.succeeded} change(s), {self._last_report.failed} failure(s)"
        )
        return RunStatus.SUCCESS

    async def _resolve_integrators(self, priority: SyncPriority) -> list[Integrator]:
        directory = self.factory.directory()
        self._state.directory = directory

        try:
            if self.config.diagnostic_mode:
                self.log.info(f"Diagnostic mode, processing integrator {self.config.test_integrator} only")
                return [await directory.get_integrator(self.config.test_integrator)]
            return await directory.get_integrators(priority)
        except SyncError as e:
            self.log.error(f"Failed fetching integrators from {directory.hostname}: {e}")
            raise

    async def desired_state(self, integrator: Integrator) -> DesiredState | None:
        """Open a fresh IPAM handle and read the integrator's desired state.

        Returns:
            DesiredState, or None when the prefixes could not be read
        """
        log = self.log.bind(integrator=integrator.name)
        if integrator.netbox_endpoint is None:
            log.warning("No IPAM endpoint configured, check the integrator in NAM")
            return None

        ipam = self.factory.ipam(integrator.netbox_endpoint)
        await self._state.replace("ipam", ipam)

        if self.config.dev_mode:
            log.debug("Preparing IP prefix(es) from IPAM")
        try:
            prefixes = await ipam.get_prefixes(integrator.query_params())
        except SyncError as e:
            log.warning(f"Could not retrieve prefixes from IPAM {ipam.hostname}: {e}")
            return None

        return DesiredState.from_prefixes(prefixes)

    async def _process(self, integrator: Integrator) -> list[TargetReport] | None:
        log = self.log.bind(integrator=integrator.name)
        desired = await self.desired_state(integrator)
        if desired is None:
            log.info("Skipping integrator, prefixes unavailable")
            return None

        targets: list[TargetReport] = []
        try:
            if integrator.create_fg_group and integrator.fortigate_endpoints:
                if self.config.dev_mode:
                    log.debug("Deploying to firewall(s)")
                for fortigate in integrator.fortigate_endpoints:
                    targets.extend(await self._deploy_firewall(integrator, fortigate, desired))

            if integrator.create_nsx_group and integrator.nsx_endpoints:
                if self.config.dev_mode:
                    log.debug("Deploying to security platform(s)")
                targets.extend(await self._deploy_security_groups(integrator, desired))
        finally:
            if self.config.dev_mode:
                log.debug(
                    f"Releasing desired state (prefixes: {len(desired.prefixes)}, "
                    f"addresses: {len(desired.addresses)}, addresses6: {len(desired.addresses6)})"
                )
            desired.release()

        return targets

    async def _deploy_firewall(
        self,
        integrator: Integrator,
        fortigate: FirewallEndpoint,
        desired: DesiredState,
    ) -> list[TargetReport]:
        log = self.log.bind(integrator=integrator.name)
        endpoint = fortigate.endpoint

        if not fortigate.vdoms:
            log.warning(
                f"Firewall endpoint '{endpoint.name or endpoint.url}' has no scopes, "
                "check the configuration in NAM"
            )
            return []
        if not endpoint.enabled:
            log.debug(f"Skipping disabled firewall endpoint '{endpoint.name or endpoint.url}'")
            return []

        firewall = self.factory.firewall(endpoint)
        await self._state.replace("firewall", firewall)

        jobs = []
        for vdom in fortigate.vdoms:
            for family, objects in (
                (AddressFamily.IPV4, desired.addresses),
                (AddressFamily.IPV6, desired.addresses6),
            ):
                jobs.append((vdom.name, family, reconcile_addresses(
                    firewall,
                    vdom.name,
                    integrator,
                    objects,
                    family,
                    managed_comment=self.config.managed_comment,
                )))

        results = await asyncio.gather(*(job for _, _, job in jobs), return_exceptions=True)

        reports: list[TargetReport] = []
        for (scope, family, _), result in zip(jobs, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                log.error(
                    f"Reconciliation of scope '{scope}' ({family.label}) failed: {result!r}",
                    extra={"extra_fields": {"host": firewall.hostname, "scope": scope}},
                )
                result = TargetReport(
                    integrator=integrator.name,
                    target=firewall.hostname,
                    scope=scope,
                    family=family,
                    skipped=True,
                    reason=repr(result),
                )
            reports.append(result)
        return reports

    async def _deploy_security_groups(
        self,
        integrator: Integrator,
        desired: DesiredState,
    ) -> list[TargetReport]:
        log = self.log.bind(integrator=integrator.name)
        if not integrator.nsx_group_name:
            log.warning(
                "Security group management requested without a group name, "
                "check the configuration in NAM"
            )
            return []

        group = build_security_group(
            integrator, desired.prefixes, description=self.config.managed_comment
        )

        reports: list[TargetReport] = []
        for endpoint in integrator.nsx_endpoints:
            if not endpoint.enabled:
                log.debug(f"Skipping disabled security platform '{endpoint.name or endpoint.url}'")
                continue

            nsx = self.factory.security_platform(endpoint)
            await self._state.replace("nsx", nsx)
            reports.append(
                await reconcile_security_group(
                    nsx, group, integrator.name, global_manager=endpoint.is_global
                )
            )
        return reports
