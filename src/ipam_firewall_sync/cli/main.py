"""Main CLI entry point for ipam-firewall-sync."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ipam_firewall_sync.cli.utils import (
    console,
    fail,
    load_settings,
    output_json,
    print_run_report,
)
from ipam_firewall_sync.models.integrator import SyncPriority
from ipam_firewall_sync.utils.errors import ConfigurationError, SyncError

app = typer.Typer(
    name="ipam-firewall-sync",
    help="Synchronize IPAM prefixes into firewall address objects and security groups.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output"),
    config: Optional[Path] = typer.Option(
        None, "--config", help="YAML configuration file (defaults to $CONFIG_PATH)"
    ),
) -> None:
    """
    ipam-firewall-sync: keep firewalls in line with the IPAM.

    - [bold]run[/bold]: Reconcile every integrator of a priority class
    - [bold]integrators[/bold]: List integrators served by the directory
    - [bold]preview[/bold]: Show the desired state of one integrator
    """
    from ipam_firewall_sync.utils.logging import configure_logging

    if ctx.invoked_subcommand == "version":
        return

    settings = load_settings(config)
    ctx.obj = settings

    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "WARNING"
    elif settings.dev_mode:
        level = "DEBUG"
    else:
        level = settings.logging.level
    configure_logging(
        level=level,
        structured=settings.logging.structured,
        log_file=settings.logging.file,
    )


@app.command()
def run(
    ctx: typer.Context,
    priority: Optional[SyncPriority] = typer.Option(
        None, "--priority", "-p", help="Priority class to process (defaults to configuration)"
    ),
    show_report: bool = typer.Option(False, "--report", help="Print a table of target outcomes"),
) -> None:
    """
    Run one reconciliation pass.

    Exits with 0 on success, 7 when a run is already in progress and 1
    on error.

    Example:
        ipam-firewall-sync run --priority high
    """
    from ipam_firewall_sync.core.worker import SyncWorker

    worker = SyncWorker(ctx.obj)
    try:
        status = asyncio.run(worker.work(priority))
    except SyncError as e:
        fail(e)

    if show_report and worker.last_report is not None:
        print_run_report(worker.last_report)
    raise typer.Exit(int(status))


@app.command()
def integrators(
    ctx: typer.Context,
    priority: Optional[SyncPriority] = typer.Option(
        None, "--priority", "-p", help="Priority class to list (defaults to configuration)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
) -> None:
    """List the integrators the directory serves for a priority class."""
    from ipam_firewall_sync.drivers.factory import DriverFactory

    settings = ctx.obj
    priority = priority or settings.priority

    async def fetch():
        async with DriverFactory(settings).directory() as directory:
            return await directory.get_integrators(priority)

    try:
        with console.status("Fetching integrators..."):
            found = asyncio.run(fetch())
    except SyncError as e:
        fail(e)

    if json_output:
        endpoints = {"netbox_endpoint", "fortigate_endpoints", "nsx_endpoints"}
        output_json({"integrators": [i.model_dump(mode="json", exclude=endpoints) for i in found]})
        return

    table = Table(title=f"Integrators ({SyncPriority(priority).value})")
    table.add_column("ID")
    table.add_column("Name", style="bold")
    table.add_column("Enabled")
    table.add_column("Firewalls", justify="right")
    table.add_column("Security platforms", justify="right")
    for integrator in found:
        table.add_row(
            str(integrator.id or "-"),
            integrator.name,
            "[green]yes[/green]" if integrator.enabled else "[dim]no[/dim]",
            str(len(integrator.fortigate_endpoints)) if integrator.create_fg_group else "-",
            str(len(integrator.nsx_endpoints)) if integrator.create_nsx_group else "-",
        )
    console.print(table)


@app.command()
def preview(
    ctx: typer.Context,
    integrator_id: str = typer.Argument(..., help="Integrator id in the directory"),
) -> None:
    """
    Show the desired state of one integrator without changing anything.

    Prints the projected IPv4 and IPv6 address objects and the security
    group that a run would push.
    """
    from ipam_firewall_sync.core.nsx import build_security_group
    from ipam_firewall_sync.core.worker import DesiredState
    from ipam_firewall_sync.drivers.factory import DriverFactory

    settings = ctx.obj
    factory = DriverFactory(settings)

    async def fetch():
        async with factory.directory() as directory:
            integrator = await directory.get_integrator(integrator_id)
        if integrator.netbox_endpoint is None:
            raise ConfigurationError(
                f"Integrator '{integrator.name}' has no IPAM endpoint", config_key="netbox_endpoint"
            )
        async with factory.ipam(integrator.netbox_endpoint) as ipam:
            prefixes = await ipam.get_prefixes(integrator.query_params())
        return integrator, DesiredState.from_prefixes(prefixes)

    try:
        with console.status("Fetching desired state..."):
            integrator, desired = asyncio.run(fetch())
    except SyncError as e:
        fail(e)

    console.print(f"[bold]{integrator.name}[/bold]: {len(desired.prefixes)} prefix(es)")
    for title, objects in (("IPv4", desired.addresses), ("IPv6", desired.addresses6)):
        table = Table(title=f"{title} address objects")
        table.add_column("Name", style="bold")
        table.add_column("Value")
        table.add_column("Comment")
        for obj in objects:
            table.add_row(obj.name, obj.value, obj.comment or "")
        console.print(table)

    if integrator.create_nsx_group and integrator.nsx_group_name:
        group = build_security_group(integrator, desired.prefixes, description=settings.managed_comment)
        output_json(group.to_api())


@app.command()
def version() -> None:
    """Show the ipam-firewall-sync version."""
    from ipam_firewall_sync import __version__

    console.print(f"ipam-firewall-sync version {__version__}")


if __name__ == "__main__":
    app()
