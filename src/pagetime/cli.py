"""Command-line interface for pagetime.

Built with Typer for commands and Rich for beautiful output.
"""

import asyncio
import contextlib
import logging
import sys
from datetime import date, datetime, time as dt_time, timezone
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .config import get_config
from .db import DatabaseLedgerStore, get_db
from .errors import InvalidPageTimeError, LedgerStateError, PersistenceError
from .reading import ReadingLedger, ReadingSession, run_ticker
from .stats import (
    confidence_info,
    estimate,
    reading_requirements,
    reading_velocity,
)
from .utils import format_clock, format_duration

# Create the main app
app = typer.Typer(
    name="pagetime",
    help="Track time spent per page and estimate how long a document will take.",
    no_args_is_help=True,
)

# Rich console for pretty output
console = Console()
err_console = Console(stderr=True)


# ============================================================================
# Helper Functions
# ============================================================================


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[dim]{message}[/dim]")


def configure_logging(level: str) -> None:
    """Send log records to stderr through Rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def get_store() -> DatabaseLedgerStore:
    """Ledger store backed by the configured database."""
    return DatabaseLedgerStore(get_db(str(get_config().db_path)))


def format_page_table(pages: dict, title: str = "Time per Page") -> Table:
    """Create a rich table of seconds per page."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Page", justify="right", style="cyan")
    table.add_column("Time", justify="right", style="green")
    table.add_column("Seconds", justify="right", style="dim")

    for page_number in sorted(pages):
        seconds = pages[page_number]
        table.add_row(str(page_number), format_duration(seconds), f"{seconds:.0f}")

    return table


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Track time spent per page and estimate how long a document will take."""
    configure_logging("DEBUG" if verbose else get_config().log_level)


@app.command()
def version() -> None:
    """Show the pagetime version."""
    console.print(f"pagetime {__version__}")


# ============================================================================
# Ledger Commands
# ============================================================================


@app.command()
def record(
    document: str = typer.Argument(..., help="Document ID"),
    page: int = typer.Argument(..., help="Page number"),
    seconds: float = typer.Argument(..., help="Seconds spent on the page"),
) -> None:
    """Add manually timed seconds to a page."""
    try:
        ledger = ReadingLedger.from_config(document, get_store(), get_config())
        ledger.hydrate()
        total = ledger.merge(page, seconds)
    except (InvalidPageTimeError, LedgerStateError) as e:
        print_error(str(e))
        raise typer.Exit(1)
    except PersistenceError as e:
        print_error(f"Could not load {document}: {e}")
        raise typer.Exit(1)

    if not ledger.flush():
        print_error(f"Could not save {document}; see log for details.")
        raise typer.Exit(1)

    print_success(f"Page {page} of {document}: {format_duration(total)} total")


@app.command()
def show(
    document: str = typer.Argument(..., help="Document ID"),
) -> None:
    """Show time spent on each page of a document."""
    try:
        pages = dict(get_store().load(document))
    except PersistenceError as e:
        print_error(str(e))
        raise typer.Exit(1)

    if not pages:
        console.print(f"[dim]No reading time recorded for {document}.[/dim]")
        return

    console.print(format_page_table(pages, title=f"Time per Page: {document}"))
    total = sum(pages.values())
    console.print(f"\n[bold]Total:[/bold] {format_duration(total, 'detailed')} over {len(pages)} page(s)")


@app.command()
def documents() -> None:
    """List documents with recorded reading time."""
    summaries = get_store().db.list_documents()
    if not summaries:
        console.print("[dim]No reading time recorded yet.[/dim]")
        return

    table = Table(title="Documents", show_header=True, header_style="bold magenta")
    table.add_column("Document", style="cyan")
    table.add_column("Pages Timed", justify="right")
    table.add_column("Total Time", justify="right", style="green")
    table.add_column("Last Updated", style="dim")

    for summary in summaries:
        table.add_row(
            summary.document_id,
            str(summary.pages_timed),
            format_duration(summary.total_seconds),
            (summary.last_updated or "-")[:16].replace("T", " "),
        )

    console.print(table)


# ============================================================================
# Estimate Commands
# ============================================================================


@app.command("estimate")
def estimate_command(
    document: str = typer.Argument(..., help="Document ID"),
    pages: int = typer.Option(..., "--pages", "-n", help="Total pages in the document"),
    current: Optional[int] = typer.Option(
        None, "--current", "-c", help="Current page (default: last timed page)"
    ),
    deadline: Optional[str] = typer.Option(
        None, "--deadline", "-d", help="Target finish date (YYYY-MM-DD)"
    ),
) -> None:
    """Estimate reading speed and time remaining for a document."""
    if pages < 1:
        print_error("Document must have at least one page.")
        raise typer.Exit(1)

    target = None
    if deadline:
        try:
            target = datetime.combine(date.fromisoformat(deadline), dt_time.max, tzinfo=timezone.utc)
        except ValueError:
            print_error(f"Invalid deadline: {deadline} (expected YYYY-MM-DD)")
            raise typer.Exit(1)

    try:
        ledger = dict(get_store().load(document))
    except PersistenceError as e:
        print_error(str(e))
        raise typer.Exit(1)

    current_page = current if current is not None else max(ledger, default=1)
    current_page = min(max(current_page, 1), pages)

    snapshot = estimate(ledger, pages, current_page)
    if not snapshot.has_estimate:
        console.print(f"[dim]Not enough reading data for {document} yet.[/dim]")
        console.print("[dim]Time at least two pages to get estimates.[/dim]")
        return

    remaining_info = confidence_info(snapshot.confidence_tier)
    total_info = confidence_info(snapshot.total_confidence_tier)

    table = Table(title=f"Reading Estimates: {document}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Reading Speed", f"{snapshot.reading_speed_pages_per_hour:.1f} pages/hour")
    table.add_row(
        "Time per Page",
        f"{format_duration(snapshot.seconds_per_page)} ({snapshot.estimator.value})",
    )
    table.add_row("Average / Median", (
        f"{format_duration(snapshot.average_seconds_per_page)} / "
        f"{format_duration(snapshot.median_seconds_per_page)}"
    ))
    table.add_row("Pages Sampled", f"{snapshot.pages_sampled} of {pages}")
    table.add_row("Completion", f"{snapshot.completion_percentage:.0f}%")
    table.add_row(
        "Total Estimate",
        f"{format_duration(snapshot.total_estimate_seconds, 'detailed')} ({total_info.label})",
    )
    table.add_row(
        "Remaining",
        f"{format_duration(snapshot.remaining_estimate_seconds, 'detailed')} ({remaining_info.label})",
    )
    if snapshot.projected_finish_timestamp:
        finish = snapshot.projected_finish_timestamp.astimezone()
        table.add_row("Finish At", finish.strftime("%Y-%m-%d %H:%M"))

    velocity = reading_velocity(ledger)
    table.add_row("Trend", f"{velocity.trend.value} ({velocity.improvement_percent:+d}%)")

    console.print(table)
    print_info(remaining_info.description)

    if target is not None or snapshot.remaining_estimate_seconds > 0:
        needed = reading_requirements(snapshot.remaining_estimate_seconds, target)
        console.print(
            f"\nTo finish by {needed.target_date:%Y-%m-%d}: "
            f"[bold]{needed.daily_minutes} min/day[/bold] "
            f"({needed.weekly_minutes} min/week)"
        )


# ============================================================================
# Live Tracking
# ============================================================================


TRACK_HELP = (
    "[dim]Enter: next page · p: previous · <number>: go to page · "
    "t: pause/resume · q: quit[/dim]"
)


def _print_status(session: ReadingSession) -> None:
    """Print the current page and its time so far."""
    console.print(
        f"Page [cyan]{session.current_page}[/cyan]/{session.total_pages} "
        f"[dim]{session.status.value}[/dim] "
        f"{format_clock(session.timer.page_total())} on this page"
    )


async def _track_session(session: ReadingSession, tick_interval: float) -> bool:
    """Drive a session from stdin commands until quit or end of input."""
    ticker = asyncio.create_task(run_ticker(session, tick_interval))
    try:
        while True:
            line = await asyncio.to_thread(sys.stdin.readline)
            if not line:
                break

            command = line.strip().lower()
            if command in ("q", "quit"):
                break
            elif command in ("", "n", "next"):
                if not session.next_page():
                    print_info("Already on the last page.")
            elif command in ("p", "prev"):
                if not session.prev_page():
                    print_info("Already on the first page.")
            elif command in ("t", "pause", "resume"):
                session.toggle()
            elif command.isdigit():
                if not session.go_to(int(command)):
                    print_warning(f"Cannot go to page {command}.")
            else:
                print_warning(f"Unknown command: {command}")

            _print_status(session)
    finally:
        ticker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await ticker
        saved = await session.aclose()

    return saved


@app.command()
def track(
    document: str = typer.Argument(..., help="Document ID"),
    pages: int = typer.Option(..., "--pages", "-n", help="Total pages in the document"),
    page: int = typer.Option(1, "--page", "-p", help="Page to start on"),
) -> None:
    """Time a reading session interactively.

    Examples:
      pagetime track thesis.pdf --pages 120            # Start at page 1
      pagetime track thesis.pdf --pages 120 --page 40  # Resume at page 40
    """
    config = get_config()
    try:
        session = ReadingSession.open(
            document, pages, store=get_store(), page=page, config=config
        )
    except InvalidPageTimeError as e:
        print_error(str(e))
        raise typer.Exit(1)
    except PersistenceError as e:
        print_error(f"Could not load {document}: {e}")
        raise typer.Exit(1)

    console.print(Panel(f"Reading [bold]{document}[/bold]", subtitle=f"{pages} pages"))
    console.print(TRACK_HELP)
    _print_status(session)

    saved = asyncio.run(_track_session(session, config.tick_interval))

    recorded = dict(session.ledger.snapshot())
    console.print("\n[green]Reading session stopped.[/green]")
    if recorded:
        console.print(f"  Total time: {format_duration(sum(recorded.values()), 'detailed')}")
        console.print(f"  Pages timed: {len(recorded)}")
    if not saved:
        print_warning("Some reading time could not be saved; see log for details.")
