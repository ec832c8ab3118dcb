"""Reachability matrix and topology CLI commands."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from segmap.cli.inventory import load_model
from segmap.core.orchestrator_client import OrchestratorError
from segmap.core.security_map import SecurityMapService
from segmap.core.topology_builder import zone_details
from segmap.schemas.graph import TopologyFilters
from segmap.schemas.inventory import InventorySnapshot
from segmap.schemas.security_map import SecurityMapResponse

console = Console()
app = typer.Typer(no_args_is_help=True)

_STATUS_CELLS = {
    "self": "[dim]-[/dim]",
    "allowed": "[green]allow[/green]",
    "blocked": "[red]block[/red]",
    "partial": "[yellow]partial[/yellow]",
}


@app.command("matrix")
def show_matrix(
    file: Path = typer.Argument(..., help="JSON inventory snapshot"),
    format: str = typer.Option("table", "--format", "-f", help="Output format (table/json)"),
):
    """Show the zone-to-zone reachability matrix."""
    snapshot = load_model(file, InventorySnapshot)
    result = SecurityMapService().derive(snapshot)
    flow = result.flow_matrix

    if format == "json":
        typer.echo(json.dumps(flow.model_dump(mode="json"), indent=2))
        return
    if format != "table":
        console.print(f"[red]Unknown format: {format}[/red]")
        raise typer.Exit(1)

    if not flow.labels:
        console.print("[yellow]No networks found.[/yellow]")
        return

    table = Table(title="Zone Reachability (row = source, column = destination)")
    table.add_column("From \\ To", style="bold")
    for label in flow.labels:
        table.add_column(label)
    for label, row in zip(flow.labels, flow.matrix):
        table.add_row(label, *(_STATUS_CELLS[cell.status.value] for cell in row))
    console.print(table)

    flows = Table(title="Flows")
    flows.add_column("From")
    flows.add_column("To")
    flows.add_column("Status")
    flows.add_column("Protocols")
    flows.add_column("Rules")
    for row in flow.matrix:
        for cell in row:
            if cell.status.value in ("allowed", "partial"):
                flows.add_row(
                    cell.from_zone,
                    cell.to_zone,
                    _STATUS_CELLS[cell.status.value],
                    cell.summary,
                    str(len(cell.rules)),
                )
    console.print(flows)

    stats = flow.stats
    console.print(f"  Allowed: {stats.allowed}  Partial: {stats.partial}  Blocked: {stats.blocked}")


@app.command("graph")
def show_graph(
    file: Path = typer.Argument(..., help="JSON inventory snapshot"),
    hide_infra: bool = typer.Option(False, "--hide-infra", help="Hide infrastructure networks"),
    hide_stopped: bool = typer.Option(False, "--hide-stopped", help="Hide VMs that are not running"),
    format: str = typer.Option("table", "--format", "-f", help="Output format (table/json)"),
):
    """Build the security topology graph."""
    snapshot = load_model(file, InventorySnapshot)
    filters = TopologyFilters(hide_infra_networks=hide_infra, hide_stopped_vms=hide_stopped)
    result = SecurityMapService().derive(snapshot, filters)
    _print_graph(result, format)


@app.command("fetch")
def fetch_map(
    connection_id: str = typer.Argument(..., help="Cluster connection ID"),
    hide_infra: bool = typer.Option(False, "--hide-infra", help="Hide infrastructure networks"),
    hide_stopped: bool = typer.Option(False, "--hide-stopped", help="Hide VMs that are not running"),
    format: str = typer.Option("table", "--format", "-f", help="Output format (table/json)"),
):
    """Fetch a cluster's inventory from the orchestrator and build its map."""
    filters = TopologyFilters(hide_infra_networks=hide_infra, hide_stopped_vms=hide_stopped)
    try:
        result = asyncio.run(SecurityMapService().refresh(connection_id, filters))
    except OrchestratorError as e:
        console.print(f"[red]Fetch failed: {e}[/red]")
        raise typer.Exit(1)
    _print_graph(result, format)


def _print_graph(result: SecurityMapResponse, format: str) -> None:
    graph = result.graph
    if format == "json":
        typer.echo(json.dumps(result.model_dump(mode="json"), indent=2))
        return
    if format != "table":
        console.print(f"[red]Unknown format: {format}[/red]")
        raise typer.Exit(1)

    nodes = Table(title="Nodes")
    nodes.add_column("ID", style="dim")
    nodes.add_column("Type")
    nodes.add_column("Details")
    for node in graph.nodes:
        data = node.data
        if node.type == "clusterFirewall":
            state = "[green]enabled[/green]" if data.enabled else "[red]disabled[/red]"
            details = f"{state} in={data.policy_in} out={data.policy_out} rules={data.rule_count}"
        elif node.type == "securityZone":
            details = f"{data.cidr} ({len(data.vms)} VMs)"
        else:
            details = data.label
        nodes.add_row(node.id, node.type, details)
    console.print(nodes)

    zones = Table(title="Zones")
    zones.add_column("Zone")
    zones.add_column("VMs", justify="right")
    zones.add_column("Isolated", justify="right")
    zones.add_column("Unprotected", justify="right")
    zones.add_column("Security Groups")
    for node in graph.nodes:
        if node.type != "securityZone":
            continue
        summary = zone_details(node.data)
        zones.add_row(
            summary.zone,
            str(summary.vm_count),
            str(summary.isolated_count),
            f"[red]{summary.unprotected_count}[/red]" if summary.unprotected_count else "0",
            ", ".join(summary.applied_sgs) or "-",
        )
    console.print(zones)

    edges = Table(title="Edges")
    edges.add_column("Source")
    edges.add_column("Target")
    edges.add_column("Kind")
    edges.add_column("Label")
    for edge in graph.edges:
        kind = edge.kind
        if edge.status is not None:
            kind = f"{kind} ({_STATUS_CELLS[edge.status.value]})"
        edges.add_row(edge.source, edge.target, kind, edge.label or "-")
    console.print(edges)
