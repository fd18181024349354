"""Command Line Interface for Elec Planner.

This module provides a simple CLI for sizing circuits, printing the load
schedule of a diagram and applying scripted operations to diagram files.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .core.model import Diagram
from .core.topology import wall_networks
from .electrical.schedule import build_schedule
from .electrical.sizing import LoadParameters, size
from .electrical.survey import survey as survey_loads
from .engine.api import apply_all
from .engine.validators import InvalidOperation
from .geom.units import segment_length_m
from .io.parser import load_diagram, save_diagram

app = typer.Typer(
    name="elecplanner",
    help="A CLI tool for electrical floor plan diagrams and NBR 5410 circuit sizing",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging")):
    """Electrical floor plan tools."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _fmt(value, digits: int = 2) -> str:
    if value is None:
        return "-"
    if isinstance(value, float):
        return f"{value:.{digits}f}"
    return str(value)


@app.command("size")
def size_circuit(
    power: float = typer.Option(1000.0, "--power", "-p", help="Load power in W (VA with --pf 1)"),
    voltage: float = typer.Option(220.0, "--voltage", help="Nominal voltage in V"),
    phase: str = typer.Option("single", "--phase", help="single, two or three"),
    material: str = typer.Option("copper", "--material", help="copper or aluminum"),
    circuit_type: str = typer.Option("power", "--type", help="lighting or power"),
    length: float = typer.Option(30.0, "--length", "-l", help="Run length in m"),
    method: str = typer.Option("B1", "--method", "-m", help="Installation method (A1, A2, B1, B2, C, D)"),
    power_factor: float = typer.Option(0.92, "--pf", help="Power factor"),
    temperature_factor: float = typer.Option(1.0, "--temperature-factor", help="Temperature correction factor"),
    grouping_factor: float = typer.Option(1.0, "--grouping-factor", help="Grouping correction factor"),
    voltage_drop: float = typer.Option(3.0, "--voltage-drop", help="Allowed voltage drop in %"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
):
    """Size one circuit: conductor section, breaker and voltage drop."""
    try:
        load = LoadParameters.from_dict(
            {
                "power": power,
                "voltage": voltage,
                "phase": phase,
                "material": material,
                "circuit_type": circuit_type,
                "length": length,
                "method": method,
                "power_factor": power_factor,
                "temperature_factor": temperature_factor,
                "grouping_factor": grouping_factor,
                "voltage_drop": voltage_drop,
            }
        )
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    result = size(load)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return

    table = Table(title="Circuit sizing")
    table.add_column("Quantity", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Design current Ib (A)", _fmt(result.design_current))
    table.add_row("Required ampacity (A)", _fmt(result.required_ampacity))
    table.add_row("Section by ampacity (mm²)", _fmt(result.section_by_ampacity, 1))
    table.add_row("Section by voltage drop (mm²)", _fmt(result.section_by_voltage_drop, 1))
    table.add_row("Section (mm²)", _fmt(result.section, 1))
    table.add_row("Cable ampacity Iz (A)", _fmt(result.ampacity))
    table.add_row("Breaker In (A)", _fmt(result.breaker))
    table.add_row("Voltage drop (%)", _fmt(result.voltage_drop))
    console.print(table)

    if result.conformant:
        console.print("[bold green]✓ Conformant[/bold green]")
    else:
        console.print(f"[bold red]✗ {result.status.value}: {result.message}[/bold red]")
        raise typer.Exit(1)


@app.command()
def schedule(
    diagram: Path = typer.Option(..., "--diagram", "-d", help="Path to diagram JSON file"),
    as_json: bool = typer.Option(False, "--json", help="Print the schedule as JSON"),
):
    """Print the load schedule of a diagram."""
    try:
        diagram_obj = load_diagram(diagram)
    except FileNotFoundError as e:
        console.print(f"[red]Error: File not found - {e}[/red]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    try:
        rows = build_schedule(diagram_obj)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps([row.to_dict() for row in rows], indent=2))
        return

    if not rows:
        console.print("[yellow]No circuits in this diagram[/yellow]")
        return

    table = Table(title="Load schedule")
    table.add_column("Circuit", style="cyan")
    table.add_column("Description")
    table.add_column("Scheme", justify="center")
    table.add_column("V", justify="right")
    table.add_column("VA", justify="right")
    table.add_column("Ib (A)", justify="right")
    table.add_column("In (A)", justify="right")
    table.add_column("mm²", justify="right")
    table.add_column("L (m)", justify="right")
    table.add_column("ΔV (%)", justify="right")
    table.add_column("Status", justify="center")

    for row in rows:
        status = "[green]✓[/green]" if row.status == "conformant" else f"[red]✗ {row.reason or row.status}[/red]"
        table.add_row(
            row.label,
            row.description,
            row.scheme,
            _fmt(row.voltage, 0),
            _fmt(row.power, 0),
            _fmt(row.design_current),
            _fmt(row.breaker),
            _fmt(row.section, 1),
            _fmt(row.length, 1),
            _fmt(row.voltage_drop),
            status,
        )

    console.print(table)


@app.command()
def survey(
    loads: Path = typer.Option(..., "--loads", help="Path to a JSON list of loads (description, quantity, power_va, demand_factor)"),
    voltage: float = typer.Option(220.0, "--voltage", help="Supply voltage in V"),
    phase: str = typer.Option("single", "--phase", help="single, two or three"),
    power_factor: float = typer.Option(0.92, "--pf", help="Power factor"),
    as_json: bool = typer.Option(False, "--json", help="Print the totals as JSON"),
):
    """Total a load survey and suggest the main breaker."""
    try:
        with open(loads, encoding="utf-8") as f:
            records = json.load(f)
        totals = survey_loads(records, voltage=voltage, phase=phase, power_factor=power_factor)
    except FileNotFoundError as e:
        console.print(f"[red]Error: File not found - {e}[/red]")
        raise typer.Exit(1)
    except json.JSONDecodeError as e:
        console.print(f"[red]Error: Invalid JSON - {e}[/red]")
        raise typer.Exit(1)
    except (TypeError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(totals.to_dict(), indent=2))
        return

    table = Table(title="Load survey")
    table.add_column("Quantity", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Demand (VA)", _fmt(totals.apparent_power, 0))
    table.add_row("Demand (W)", _fmt(totals.active_power, 0))
    table.add_row("Current (A)", _fmt(totals.current))
    table.add_row("Main breaker (A)", _fmt(totals.breaker))
    console.print(table)


@app.command()
def info(
    diagram: Path = typer.Option(..., "--diagram", "-d", help="Path to diagram JSON file"),
):
    """Summarize a diagram: item counts, scale and wall networks."""
    try:
        diagram_obj = load_diagram(diagram)
    except FileNotFoundError as e:
        console.print(f"[red]Error: File not found - {e}[/red]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    calibration = diagram_obj.calibration
    console.print(f"[bold]Diagram[/bold] {diagram}")
    console.print(f"  Scale: {calibration.pixels_per_meter:.2f} px/m")
    console.print(
        f"  Walls: {len(diagram_obj.walls)}, components: {len(diagram_obj.components)}, "
        f"wires: {len(diagram_obj.wires)}, dimensions: {len(diagram_obj.dimensions)}"
    )

    kinds = {}
    for component in diagram_obj.components.values():
        kinds[component.kind] = kinds.get(component.kind, 0) + 1
    if kinds:
        table = Table(title="Components")
        table.add_column("Kind", style="cyan")
        table.add_column("Count", justify="right")
        for kind, count in sorted(kinds.items()):
            table.add_row(kind, str(count))
        console.print(table)

    networks = wall_networks(diagram_obj)
    if networks:
        table = Table(title="Wall networks")
        table.add_column("#", justify="right")
        table.add_column("Walls", justify="right")
        table.add_column("Length (m)", justify="right")
        for i, network in enumerate(networks, start=1):
            length = sum(
                segment_length_m(diagram_obj.walls[w].a, diagram_obj.walls[w].b, calibration) for w in network
            )
            table.add_row(str(i), str(len(network)), f"{length:.2f}")
        console.print(table)


@app.command()
def apply(
    diagram: Path = typer.Option(..., "--diagram", "-d", help="Path to diagram JSON file"),
    operation: Path = typer.Option(..., "--op", help="Path to operation JSON file (one operation or a list)"),
    output: Optional[Path] = typer.Option(None, "--out", help="Path to output diagram JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
):
    """Apply scripted operations to a diagram and save the result."""
    try:
        if diagram.exists():
            diagram_obj = load_diagram(diagram)
            console.print(f"[green]✓[/green] Loaded diagram from {diagram}")
        else:
            diagram_obj = Diagram()
            console.print(f"[blue]ℹ[/blue] {diagram} does not exist, starting from an empty diagram")

        with open(operation, encoding="utf-8") as f:
            operation_data = json.load(f)
    except FileNotFoundError as e:
        console.print(f"[red]Error: File not found - {e}[/red]")
        raise typer.Exit(1)
    except json.JSONDecodeError as e:
        console.print(f"[red]Error: Invalid JSON - {e}[/red]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    operations = operation_data if isinstance(operation_data, list) else [operation_data]
    if verbose:
        for op in operations:
            console.print(f"Operation: {op}")

    try:
        modified = apply_all(diagram_obj, operations)
    except (ValueError, InvalidOperation) as e:
        console.print(f"[red]✗[/red] Operation failed: {e}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Applied {len(operations)} operation(s)")

    target = output or diagram
    save_diagram(modified, target)
    console.print(f"[green]✓[/green] Diagram saved to {target}")


if __name__ == "__main__":
    app()
