"""
Loadboard CLI

Command-line interface for operating the load management service.
"""

from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import settings
from ..db import get_repository
from ..exceptions import LoadboardError
from ..logging_config import configure_logging
from ..models import LoadDraft, LoadWithOwner, Receiver, TruckType
from ..routing import get_routing_client
from ..services import Services, build_services

app = typer.Typer(
    name="loadboard",
    help="Loadboard: load management for drivers, shippers and admins",
    add_completion=False,
)
console = Console()


def get_services() -> Services:
    return build_services(get_repository(), get_routing_client())


def _fail(error: LoadboardError) -> None:
    console.print(f"[red]{error.code}:[/red] {error.message}")
    raise typer.Exit(1)


def _loads_table(title: str, loads: list[LoadWithOwner]) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="dim", max_width=12)
    table.add_column("Route", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Status")
    table.add_column("Shipper")
    table.add_column("Posted")

    for load in loads:
        table.add_row(
            load.id[:8],
            load.route,
            f"{load.weight:,.0f}",
            f"{load.price:,.2f}",
            load.status,
            load.owner.full_name if load.owner else "-",
            load.created_at.strftime("%Y-%m-%d %H:%M"),
        )
    return table


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
):
    configure_logging(log_level)


# =============================================================================
# Setup
# =============================================================================

@app.command("init-db")
def init_db():
    """Create database tables."""
    get_repository().init_db()
    console.print(f"[green]Database ready:[/green] {settings.DATABASE_URL}")


# =============================================================================
# Load Commands
# =============================================================================

@app.command("post-load")
def post_load(
    shipper_id: str = typer.Argument(..., help="Profile id of the shipper"),
    origin: str = typer.Option(..., "--from", help="Pickup place"),
    destination: str = typer.Option(..., "--to", help="Delivery place"),
    weight: float = typer.Option(0.0, "--weight", "-w", help="Weight"),
    price: float = typer.Option(0.0, "--price", "-p", help="Offered price"),
    truck_type: Optional[TruckType] = typer.Option(None, "--truck-type", "-t", help="Required truck type"),
    receiver_name: Optional[str] = typer.Option(None, "--receiver", help="Recipient name"),
    receiver_phone: Optional[str] = typer.Option(None, "--receiver-phone", help="Recipient phone"),
):
    """Post a new load on behalf of a shipper."""
    services = get_services()
    try:
        draft = LoadDraft(
            origin=origin,
            destination=destination,
            weight=weight,
            price=price,
            truck_type_required=truck_type,
            receiver=Receiver(name=receiver_name, phone=receiver_phone)
            if receiver_name or receiver_phone else None,
        )
    except ValueError as e:
        console.print(f"[red]Invalid load:[/red] {e}")
        raise typer.Exit(1)

    try:
        load = services.loads.post_load(shipper_id, draft)
    except LoadboardError as e:
        _fail(e)

    console.print(Panel.fit(
        f"[bold]{load.route}[/bold]\n"
        f"Weight: {load.weight:,.0f} | Price: {load.price:,.2f}\n"
        f"ID: {load.id}",
        title="[green]Load posted[/green]",
    ))


@app.command()
def loads(
    limit: int = typer.Option(20, "--limit", "-l", help="Maximum loads to show"),
):
    """List available loads, newest first."""
    services = get_services()
    try:
        available = services.loads.get_loads(limit=limit)
    except LoadboardError as e:
        _fail(e)

    if not available:
        console.print("[yellow]No available loads.[/yellow]")
        return
    console.print(_loads_table("Available Loads", available))


@app.command()
def show(load_id: str = typer.Argument(..., help="Load id")):
    """Show one load."""
    services = get_services()
    try:
        load = services.loads.get_load_by_id(load_id)
    except LoadboardError as e:
        _fail(e)

    table = Table(title=f"Load {load.id}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Route", load.route)
    table.add_row("Status", load.status)
    table.add_row("Driver", load.driver_id or "-")
    table.add_row("Weight", f"{load.weight:,.0f}")
    table.add_row("Price", f"{load.price:,.2f}")
    table.add_row("Truck type", load.truck_type_required or "-")
    if load.distance_km is not None:
        table.add_row("Distance", f"{load.distance_km} km")
    if load.owner:
        table.add_row("Shipper", f"{load.owner.full_name} ({load.owner.phone})")
    if load.receiver:
        table.add_row("Receiver", f"{load.receiver.name or '-'} ({load.receiver.phone or '-'})")
    console.print(table)


@app.command()
def accept(
    load_id: str = typer.Argument(..., help="Load id"),
    driver_id: str = typer.Argument(..., help="Profile id of the driver"),
):
    """Accept an available load as a driver."""
    services = get_services()
    try:
        load = services.loads.accept_load(load_id, driver_id)
    except LoadboardError as e:
        _fail(e)
    console.print(f"[green]Load {load.id} is now {load.status} with driver {load.driver_id}[/green]")


@app.command()
def cancel(
    load_id: str = typer.Argument(..., help="Load id"),
    actor_id: str = typer.Argument(..., help="Owner, assigned driver or admin"),
):
    """Release a load back to the marketplace."""
    services = get_services()
    try:
        load = services.loads.cancel_load(load_id, actor_id)
    except LoadboardError as e:
        _fail(e)
    console.print(f"[green]Load {load.id} is {load.status}[/green]")


@app.command()
def complete(
    load_id: str = typer.Argument(..., help="Load id"),
    driver_id: str = typer.Argument(..., help="Profile id of the assigned driver"),
):
    """Mark an in-progress load as delivered."""
    services = get_services()
    try:
        load = services.loads.complete_load(load_id, driver_id)
    except LoadboardError as e:
        _fail(e)
    console.print(f"[green]Load {load.id} completed[/green]")


@app.command()
def history(driver_id: str = typer.Argument(..., help="Profile id of the driver")):
    """Loads held by a driver."""
    services = get_services()
    try:
        held = services.loads.get_driver_history(driver_id)
    except LoadboardError as e:
        _fail(e)

    if not held:
        console.print("[yellow]No loads for this driver yet.[/yellow]")
        return
    console.print(_loads_table(f"History of {driver_id}", held))


# =============================================================================
# Driver Commands
# =============================================================================

@app.command()
def drivers():
    """List drivers and their vehicle setup."""
    services = get_services()
    try:
        entries = services.fleet.list_available_drivers()
    except LoadboardError as e:
        _fail(e)

    table = Table(title="Drivers")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Phone")
    table.add_column("Truck")
    table.add_column("Plate")

    for entry in entries:
        table.add_row(
            entry.driver.id,
            entry.driver.full_name,
            entry.driver.phone,
            entry.truck_type or "[yellow]pending setup[/yellow]",
            entry.details.plate_number or "-" if entry.details else "-",
        )
    console.print(table)


# =============================================================================
# Statistics
# =============================================================================

@app.command()
def stats(
    driver_id: Optional[str] = typer.Option(None, "--driver", "-d", help="Stats for one driver"),
):
    """Show dashboard statistics."""
    services = get_services()
    try:
        if driver_id:
            values = services.stats.get_driver_stats(driver_id).model_dump()
            title = f"Driver {driver_id}"
        else:
            values = services.stats.get_admin_stats().model_dump()
            title = "Platform"
    except LoadboardError as e:
        _fail(e)

    table = Table(title=f"{title} Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    for key, value in values.items():
        table.add_row(key.replace("_", " ").title(), f"{value:,}")
    console.print(table)


# =============================================================================
# Server
# =============================================================================

@app.command()
def serve(
    host: str = typer.Option(settings.API_HOST, "--host", help="Bind address"),
    port: int = typer.Option(settings.API_PORT, "--port", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on changes"),
):
    """Run the HTTP API."""
    import uvicorn

    console.print(Panel.fit(
        f"[bold green]{settings.APP_NAME} API[/bold green]\n"
        f"http://{host}:{port}/docs",
        title=f"v{settings.APP_VERSION}",
    ))
    uvicorn.run("loadboard.server:app", host=host, port=port, reload=reload, log_level="info")


if __name__ == "__main__":
    app()
