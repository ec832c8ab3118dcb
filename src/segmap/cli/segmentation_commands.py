"""Micro-segmentation CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from segmap.cli.inventory import load_model
from segmap.config import settings
from segmap.core.segmentation import analyze_segmentation
from segmap.schemas.segmentation import SegmentationRequest

console = Console()
app = typer.Typer(no_args_is_help=True)


@app.command("analyze")
def analyze(
    file: Path = typer.Argument(..., help="JSON file with aliases, groups and vms"),
    gateway_offset: int = typer.Option(settings.gateway_offset, "--gateway-offset", help="Gateway last octet"),
    format: str = typer.Option("table", "--format", "-f", help="Output format (table/json)"),
):
    """Check which zones have gateway aliases and base security groups."""
    body = load_model(file, SegmentationRequest)
    analysis = analyze_segmentation(body.aliases, body.groups, body.vms, gateway_offset)

    if format == "json":
        typer.echo(json.dumps(analysis.model_dump(mode="json"), indent=2))
        return
    if format != "table":
        console.print(f"[red]Unknown format: {format}[/red]")
        raise typer.Exit(1)

    if not analysis.networks:
        console.print("[yellow]No net-* aliases found.[/yellow]")
        return

    table = Table(title="Networks")
    table.add_column("Network")
    table.add_column("CIDR")
    table.add_column("Gateway")
    table.add_column("Gateway Alias")
    table.add_column("Base SG")
    for net in analysis.networks:
        table.add_row(
            net.name,
            net.cidr,
            net.gateway or "-",
            "Yes" if net.has_gateway else "[red]No[/red]",
            "Yes" if net.has_base_sg else "[red]No[/red]",
        )
    console.print(table)

    ready = "[green]ready[/green]" if analysis.segmentation_ready else "[yellow]incomplete[/yellow]"
    console.print(f"[bold]Segmentation:[/bold] {ready}")
    console.print(f"  VMs:         {analysis.total_vms}")
    console.print(f"  Isolated:    {analysis.isolated_vms}")
    console.print(f"  Unprotected: {analysis.unprotected_vms}")
