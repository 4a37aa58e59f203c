"""
Main CLI application using Typer.

A developer harness over the library: every command reads an app config
(YAML) and a JSON fixture of employees and reservations.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated, Any, Dict, NoReturn, Optional

import pendulum
import typer
import yaml
from pendulum import DateTime
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.fixture_loader import Fixture, load_fixture
from ..adapters.in_memory import InMemoryPricingConfigStore
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import BookingError
from ..domain.models import BookingRequest, ServiceType
from ..domain.pricing import PriceBreakdown, validate_pricing_config
from ..services.availability_checker import AvailabilityChecker
from ..services.occupancy_service import OccupancyService
from ..services.pricing_service import PricingService

app = typer.Typer(
    name="bookingengine",
    help="Price bookings and inspect room and employee availability",
    add_completion=False,
)

console = Console()

DEFAULT_OWNER = "default"

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./bookingengine.yaml"),
]
DataOption = Annotated[
    Optional[Path],
    typer.Option("--data", help="JSON fixture with employees and reservations."),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """
    Pricing and availability engine for small service businesses.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _fail(message: Any) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(1)


def _load_config(config_file: Optional[Path]) -> AppConfig:
    """Explicit config path, else ./bookingengine.yaml if present, else defaults."""
    if config_file is not None:
        return AppConfig.load_from_yaml(config_file)

    default_path = get_default_config_path()
    if default_path.exists():
        return AppConfig.load_from_yaml(default_path)

    return AppConfig()


def _load_fixture(config: AppConfig, data_file: Optional[Path]) -> Fixture:
    return load_fixture(data_file or config.data_file, timezone=config.timezone)


def _build_checker(config: AppConfig, fixture: Fixture) -> AvailabilityChecker:
    return AvailabilityChecker(
        reservation_lookup=fixture.reservations,
        employee_directory=fixture.employees,
        slot_calculator=config.build_slot_calculator(),
        max_suggestions_per_day=config.suggestions.per_day,
        max_suggestions=config.suggestions.max_total,
    )


def _parse_moment(value: str, tz: str) -> DateTime:
    try:
        parsed = pendulum.parse(value, tz=tz)
    except ValueError as e:
        _fail(f"Could not parse time '{value}': {e}")

    if not isinstance(parsed, DateTime):
        _fail(f"Expected a date and time, got '{value}'")
    return parsed


def _parse_day(value: str, tz: str) -> DateTime:
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).start_of("day")
    except ValueError as e:
        _fail(f"Could not parse date '{value}' (expected YYYY-MM-DD): {e}")


def _print_breakdown(breakdown: PriceBreakdown) -> None:
    table = Table(title="Price breakdown", show_header=True, header_style="bold cyan")
    table.add_column("Item", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Base rate", str(breakdown.base_rate))
    table.add_row(
        "Employee rate",
        "-" if breakdown.employee_rate is None else str(breakdown.employee_rate),
    )
    table.add_row("Hourly rate used", str(breakdown.final_base_rate))
    table.add_row("Duration (h)", f"{breakdown.duration_hours.normalize():f}")
    table.add_row("Day multiplier", str(breakdown.time_multiplier))
    table.add_row("Dead hour", "yes" if breakdown.is_dead_hour else "no")
    table.add_row("Base price", str(breakdown.base_price))
    table.add_row("Discount", str(breakdown.discount_amount))
    table.add_row("[bold green]Final price[/bold green]", f"[bold green]{breakdown.final_price}[/bold green]")

    console.print()
    console.print(table)
    console.print()


@app.command()
def price(
    service: Annotated[str, typer.Argument(help="physiotherapy, personal_training or other")],
    start: Annotated[str, typer.Argument(help="Start time, e.g. 2024-01-09T10:00")],
    end: Annotated[str, typer.Argument(help="End time, e.g. 2024-01-09T11:00")],
    location: Annotated[str, typer.Option("--location", "-l", help="Location ID")] = "loc-centrum",
    employee: Annotated[Optional[str], typer.Option("--employee", "-e", help="Employee ID")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the breakdown as JSON.")] = False,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Calculate the price of a booking.

    Examples:

        bookingengine price physiotherapy 2024-01-09T10:00 2024-01-09T11:00

        bookingengine price physiotherapy 2024-01-13T10:00 2024-01-13T11:30 -e emp-anna
    """
    try:
        config = _load_config(config_file)
        fixture = _load_fixture(config, data_file)

        config_store = InMemoryPricingConfigStore()
        service_layer = PricingService(
            config_store=config_store,
            employee_directory=fixture.employees,
            engine=config.build_pricing_engine(),
            defaults=config.pricing,
        )

        request = BookingRequest(
            service_type=service,
            start_time=_parse_moment(start, config.timezone),
            end_time=_parse_moment(end, config.timezone),
            location_id=location,
            employee_id=employee,
        )

        result = asyncio.run(service_layer.preview_price(DEFAULT_OWNER, request))
    except (FileNotFoundError, ValueError) as e:
        _fail(e)

    if not result.success:
        _fail(result.error)

    if as_json:
        console.print_json(json.dumps(result.breakdown.to_dict()))
    else:
        _print_breakdown(result.breakdown)


@app.command()
def slots(
    room: Annotated[str, typer.Argument(help="Room ID")],
    day: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    duration: Annotated[int, typer.Option("--duration", "-d", help="Booking length in minutes")] = 60,
    free_only: Annotated[bool, typer.Option("--free", help="Only show free slots.")] = False,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    List a room's candidate slots for one day.
    """
    try:
        config = _load_config(config_file)
        checker = _build_checker(config, _load_fixture(config, data_file))
        schedule = asyncio.run(
            checker.get_available_slots(room, _parse_day(day, config.timezone), duration)
        )
    except (FileNotFoundError, ValueError, BookingError) as e:
        _fail(e)

    table = Table(title=f"Room {room} - {day}", show_header=True, header_style="bold cyan")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Status")

    shown = 0
    for slot in schedule:
        if free_only and not slot.is_available:
            continue
        status = "[green]free[/green]" if slot.is_available else "[red]busy[/red]"
        table.add_row(slot.start_time.format("HH:mm"), slot.end_time.format("HH:mm"), status)
        shown += 1

    console.print()
    console.print(table)
    console.print(f"{shown} slot(s)")


@app.command()
def check(
    room: Annotated[str, typer.Argument(help="Room ID")],
    start: Annotated[str, typer.Argument(help="Start time, e.g. 2024-01-10T10:30")],
    end: Annotated[str, typer.Argument(help="End time, e.g. 2024-01-10T11:30")],
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Check whether a room is free for a time window.
    """
    try:
        config = _load_config(config_file)
        checker = _build_checker(config, _load_fixture(config, data_file))
        available = asyncio.run(
            checker.is_available(
                room,
                _parse_moment(start, config.timezone),
                _parse_moment(end, config.timezone),
            )
        )
    except (FileNotFoundError, ValueError, BookingError) as e:
        _fail(e)

    if available:
        console.print(f"[green]✓ Room {room} is available[/green]")
    else:
        console.print(f"[yellow]⚠ Room {room} is already booked in that window[/yellow]")


@app.command()
def suggest(
    room: Annotated[str, typer.Argument(help="Room ID")],
    day: Annotated[str, typer.Argument(help="Preferred date (YYYY-MM-DD)")],
    duration: Annotated[int, typer.Option("--duration", "-d", help="Booking length in minutes")] = 60,
    days: Annotated[Optional[int], typer.Option("--days", help="How many days to scan")] = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Suggest free slots on and after a preferred date.
    """
    try:
        config = _load_config(config_file)
        checker = _build_checker(config, _load_fixture(config, data_file))
        suggestions = asyncio.run(
            checker.suggest_alternative_times(
                room,
                _parse_day(day, config.timezone),
                duration,
                days if days is not None else config.suggestions.days_to_check,
            )
        )
    except (FileNotFoundError, ValueError, BookingError) as e:
        _fail(e)

    if not suggestions:
        console.print("[yellow]⚠ No free slots found.[/yellow]")
        return

    console.print(f"[bold green]✓ {len(suggestions)} suggestion(s):[/bold green]\n")
    for slot in suggestions:
        console.print(f"  {slot.format_display()}")
    console.print()


@app.command()
def employees(
    location: Annotated[str, typer.Argument(help="Location ID")],
    service: Annotated[str, typer.Argument(help="physiotherapy, personal_training or other")],
    start: Annotated[str, typer.Argument(help="Start time")],
    end: Annotated[str, typer.Argument(help="End time")],
    room: Annotated[str, typer.Option("--room", "-r", help="Room ID")] = "",
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    List employees of a location who can run a service and are free.
    """
    try:
        config = _load_config(config_file)
        checker = _build_checker(config, _load_fixture(config, data_file))
        found = asyncio.run(
            checker.get_available_employees(
                location,
                room,
                ServiceType.parse(service),
                _parse_moment(start, config.timezone),
                _parse_moment(end, config.timezone),
            )
        )
    except (FileNotFoundError, ValueError, BookingError) as e:
        _fail(e)

    if not found:
        console.print("[yellow]Nobody is available.[/yellow]")
        return

    table = Table(title="Available employees", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold yellow")
    table.add_column("Type")
    for employee in found:
        table.add_row(employee.id, employee.full_name(), employee.employee_type.value)

    console.print()
    console.print(table)
    console.print()


@app.command()
def occupancy(
    room: Annotated[str, typer.Argument(help="Room ID")],
    date_from: Annotated[str, typer.Argument(help="First day (YYYY-MM-DD)")],
    date_to: Annotated[str, typer.Argument(help="Last day (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Show booking statistics for a room over a range of days.
    """
    try:
        config = _load_config(config_file)
        fixture = _load_fixture(config, data_file)
        service_layer = OccupancyService(fixture.reservations, timezone=config.timezone)
        report = asyncio.run(
            service_layer.get_room_occupancy(
                room,
                _parse_day(date_from, config.timezone),
                _parse_day(date_to, config.timezone).add(days=1),
            )
        )
    except (FileNotFoundError, ValueError, BookingError) as e:
        _fail(e)

    stats = report.stats
    table = Table(title=f"Occupancy of room {room}", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Reservations", str(stats.total_slots))
    table.add_row("Confirmed", str(stats.confirmed_slots))
    table.add_row("Revenue", str(stats.total_revenue))
    table.add_row("Dead-hour reservations", str(stats.dead_hour_slots))
    table.add_row("Dead-hour revenue", str(stats.dead_hour_revenue))
    table.add_row("Occupancy rate", f"{stats.occupancy_rate:.0%}")

    console.print()
    console.print(table)
    console.print()


@app.command("validate-pricing")
def validate_pricing(
    pricing_file: Annotated[Path, typer.Argument(help="YAML or JSON file with pricing fields")],
):
    """
    Validate a pricing configuration file and list every problem found.
    """
    if not pricing_file.exists():
        _fail(f"File not found: {pricing_file}")

    try:
        with open(pricing_file, "r", encoding="utf-8") as f:
            data: Dict[str, Any] = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        _fail(f"Invalid YAML in {pricing_file}: {exc}")

    if not isinstance(data, dict):
        _fail("Pricing file must contain a mapping at the root level.")

    errors = validate_pricing_config(data)
    if not errors:
        console.print("[green]✓ Pricing configuration is valid[/green]")
        return

    table = Table(title="Invalid pricing configuration", show_header=True, header_style="bold red")
    table.add_column("Field", style="bold")
    table.add_column("Problem")
    for error in errors:
        table.add_row(error.field, error.message)

    console.print(table)
    raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]bookingengine[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
