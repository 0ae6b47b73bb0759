"""Shared utilities for CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from pydantic import BaseModel
from rich.console import Console
from rich.table import Table

from ipam_firewall_sync.models.report import RunReport
from ipam_firewall_sync.utils.config import SyncConfig, get_config, load_config, set_config
from ipam_firewall_sync.utils.errors import SyncError

# Shared console instance
console = Console()


def load_settings(config_path: Path | None = None) -> SyncConfig:
    """Load configuration and install it as the global instance.

    Exits with status 1 when the configuration cannot be loaded.
    """
    try:
        config = load_config(config_path) if config_path else get_config()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] Invalid configuration: {e}")
        raise typer.Exit(1)
    set_config(config)
    return config


def fail(error: SyncError | str) -> None:
    """Print an error and exit with status 1."""
    console.print(f"[red]Error:[/red] {error}")
    raise typer.Exit(1)


def output_json(data: dict[str, Any] | BaseModel) -> None:
    """Print data as JSON."""
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")
    console.print(json.dumps(data, indent=2, default=str))


def status_icon(success: bool) -> str:
    """Get a colored status icon."""
    return "[green]OK[/green]" if success else "[red]FAIL[/red]"


def print_run_report(report: RunReport) -> None:
    """Render a run report as a table of targets."""
    table = Table(title=f"Run ({report.priority})")
    table.add_column("Integrator", style="bold")
    table.add_column("Target")
    table.add_column("Scope")
    table.add_column("Family")
    table.add_column("Changes", justify="right")
    table.add_column("Failures", justify="right")
    table.add_column("Status")

    for target in report.targets:
        if target.skipped:
            status = f"[yellow]SKIPPED[/yellow] {target.reason or ''}"
        else:
            status = status_icon(target.failed == 0)
        table.add_row(
            target.integrator,
            target.target,
            target.scope or "-",
            target.family.label if target.family else "-",
            str(target.succeeded),
            str(target.failed),
            status,
        )

    console.print(table)
    if report.integrators_skipped:
        console.print(f"Skipped integrators: {', '.join(report.integrators_skipped)}")
