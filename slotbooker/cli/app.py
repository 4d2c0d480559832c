"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.sql_store import SqlCalendarStore
from ..config import AppConfig
from ..domain.exceptions import SchedulingError
from ..services.scheduler import SchedulingService

app = typer.Typer(
    name="slotbooker",
    help="Find and book time slots shared by two calendar users",
    add_completion=False
)

console = Console()
err_console = Console(stderr=True)

# Stable exit status per error classification
EXIT_CODES = {
    "invalid_configuration": 2,
    "invalid_date": 3,
    "not_found": 4,
    "slot_unavailable": 5,
    "persistence_error": 6,
}

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")]
GranularityOption = Annotated[
    Optional[str],
    typer.Option("--granularity", "-g", help="Slot duration: 'half-hourly' or 'hourly'"),
]
StepOption = Annotated[
    Optional[int],
    typer.Option("--step", "-s", help="Minutes between candidate slot starts (15-60)"),
]


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load(config_file: Optional[Path], verbose: bool):
    """Load config, set up logging and build the service on the SQL store."""
    try:
        config = AppConfig.load(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    _configure_logging("DEBUG" if verbose else config.log_level)

    store = SqlCalendarStore(
        config.database_url,
        busy_timeout_seconds=config.busy_timeout_seconds,
    )
    store.create_schema()
    return config, SchedulingService(availability_provider=store, booking_store=store)


def _fail(error: SchedulingError) -> typer.Exit:
    console.print(f"[bold red]Error ({error.code}):[/bold red] {error}")
    return typer.Exit(EXIT_CODES.get(error.code, 1))


def _slot_table(title: str, slots: List[str]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Slot", style="bold yellow")
    for idx, slot in enumerate(slots, 1):
        table.add_row(str(idx), slot)
    return table


@app.command()
def init_db(
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Create the database tables.
    """
    try:
        config, _ = _load(config_file, verbose)
    except SchedulingError as e:
        raise _fail(e)
    console.print(f"[green]✓ Database ready:[/green] {config.database_url}")


@app.command()
def create_user(
    name: Annotated[str, typer.Argument(help="Display name (max. 20 characters)")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Register a new user and print their id.
    """
    try:
        _, service = _load(config_file, verbose)
        user = service.create_user(name)
    except SchedulingError as e:
        raise _fail(e)
    console.print(f"[green]✓ Created user[/green] [bold]{user.name}[/bold] with id [bold]{user.id}[/bold]")


@app.command()
def set_availability(
    user_id: Annotated[int, typer.Argument(help="User id")],
    day: Annotated[str, typer.Argument(help="Weekday, e.g. 'monday'")],
    start: Annotated[str, typer.Argument(help="Window start, HH:MM")],
    end: Annotated[str, typer.Argument(help="Window end, HH:MM")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Set a user's recurring availability for one weekday.

    Examples:

        slotbooker set-availability 1 monday 09:00 17:00
    """
    try:
        _, service = _load(config_file, verbose)
        window = service.set_availability(user_id, day, start, end)
    except SchedulingError as e:
        raise _fail(e)
    console.print(
        f"[green]✓ Availability set:[/green] user {window.user_id}, "
        f"{window.weekday.value} {window.start}-{window.end}"
    )


@app.command()
def view_schedule(
    user_id: Annotated[int, typer.Argument(help="User id")],
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Show a user's booked and free hourly slots on a date.
    """
    try:
        _, service = _load(config_file, verbose)
        schedule = service.view_schedule(user_id, date)
    except SchedulingError as e:
        raise _fail(e)

    table = Table(title=f"Schedule for user {user_id} on {schedule.date}", header_style="bold cyan")
    table.add_column("Slot", style="bold")
    table.add_column("Status")
    rows = [(slot, "[red]booked[/red]") for slot in schedule.booked_slots]
    rows += [(slot, "[green]available[/green]") for slot in schedule.available_slots]
    for slot, status in sorted(rows):
        table.add_row(slot, status)

    console.print()
    console.print(table)
    console.print()


@app.command()
def find_slots(
    user_id_1: Annotated[int, typer.Argument(help="First user id")],
    user_id_2: Annotated[int, typer.Argument(help="Second user id")],
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    granularity: GranularityOption = None,
    step: StepOption = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    List the slots open for both users on a date.

    Examples:

        slotbooker find-slots 1 2 2024-11-25
        slotbooker find-slots 1 2 2024-11-25 --granularity hourly --step 15
    """
    try:
        config, service = _load(config_file, verbose)
        result = service.find_available_slots(
            user_id_1,
            user_id_2,
            date,
            granularity or config.defaults.granularity,
            step if step is not None else config.defaults.step_minutes,
        )
    except SchedulingError as e:
        raise _fail(e)

    console.print()
    if not result.slots:
        console.print(f"[yellow]⚠ No shared slots on {result.date}.[/yellow]")
    else:
        console.print(_slot_table(f"Open slots on {result.date}", result.slots))
    console.print()


@app.command()
def book_slot(
    user_id_1: Annotated[int, typer.Argument(help="First user id")],
    user_id_2: Annotated[int, typer.Argument(help="Second user id")],
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    slot: Annotated[str, typer.Argument(help="Slot start, HH:MM")],
    granularity: GranularityOption = None,
    step: StepOption = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Book a slot for two users.

    Examples:

        slotbooker book-slot 1 2 2024-11-25 11:30
    """
    try:
        config, service = _load(config_file, verbose)
        booking = service.book_slot(
            user_id_1,
            user_id_2,
            date,
            granularity or config.defaults.granularity,
            step if step is not None else config.defaults.step_minutes,
            slot,
        )
    except SchedulingError as e:
        raise _fail(e)

    console.print(Panel.fit(
        f"[bold green]✓ Slot booked[/bold green]\n\n"
        f"[bold]Users:[/bold] {booking.user_id_1} & {booking.user_id_2}\n"
        f"[bold]Date:[/bold] {booking.date}\n"
        f"[bold]Time:[/bold] {booking.start} - {booking.end} ({booking.granularity.value})",
        title="Booking"
    ))


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotbooker[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
