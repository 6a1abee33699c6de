"""
Command-line interface for the triathlon race scheduler.

Provides commands for:
- Database setup and the sample season
- Listing, adding and deleting races
- Conflict checks against recovery periods
- Month calendar view and schedule reports
- Running the API server
"""

from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Optional

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from src import database
from src.calendar_view import build_month_view, parse_month
from src.config import configure_logging, get_settings
from src.conflicts import ConflictDetector, find_schedule_conflicts
from src.formatting import format_display_date, format_time
from src.recovery import derive_recovery, race_status
from src.report import ScheduleReportBuilder
from src.schemas import (
    RACE_DISTANCES,
    CalendarDayView,
    ConflictSeverity,
    ConflictVerdict,
    InvalidCategory,
    Race,
    RaceCreate,
    RaceDistance,
    RaceStatusType,
    RecoveryIntensity,
)

# Initialize Typer app and Rich console
app = typer.Typer(
    help="Triathlon Race Scheduler - plan races around recovery periods"
)
console = Console()

INTENSITY_COLORS = {
    RecoveryIntensity.LIGHT: "green",
    RecoveryIntensity.MODERATE: "yellow",
    RecoveryIntensity.HEAVY: "red",
}

STATUS_COLORS = {
    RaceStatusType.UPCOMING: "blue",
    RaceStatusType.TODAY: "bold green",
    RaceStatusType.RECOVERY: "dark_orange",
    RaceStatusType.PAST: "dim",
}


@app.callback()
def main(
    ctx: typer.Context,
    database_url: Optional[str] = typer.Option(
        None,
        "--database-url",
        help="Database connection string (defaults to DATABASE_URL / settings)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show log output"),
):
    """Triathlon Race Scheduler."""
    settings = get_settings()
    configure_logging(settings.log_level if verbose else "WARNING")
    ctx.obj = {"database_url": database_url or settings.database_url}


def _open_session(ctx: typer.Context):
    try:
        return database.init_database(ctx.obj["database_url"])
    except Exception as e:
        console.print(f"[red]✗ Failed to open database: {e}[/red]")
        raise typer.Exit(1)


def _load_races(session) -> List[Race]:
    try:
        return database.list_races(session)
    except InvalidCategory as e:
        console.print(f"[red]✗ Stored race has an invalid distance: {e}[/red]")
        raise typer.Exit(1)


def _parse_day(value: str, option: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        console.print(f"[red]✗ Invalid {option} '{value}'. Expected YYYY-MM-DD[/red]")
        raise typer.Exit(1)


# ===== DISPLAY HELPER FUNCTIONS =====


def _display_conflict(verdict: Optional[ConflictVerdict]):
    """
    Display a conflict verdict in a colored panel.

    Args:
        verdict: Result of a conflict check (None for no conflict)
    """
    summary = ConflictDetector([]).display_conflict_summary(verdict)
    if verdict is None:
        console.print(f"[green]{summary}[/green]")
        return

    color = "red" if verdict.severity == ConflictSeverity.ERROR else "yellow"
    title = "Scheduling Conflict" if verdict.severity == ConflictSeverity.ERROR else "Scheduling Warning"
    console.print(Panel(summary, title=title, border_style=color))


def _display_race_table(races: List[Race], today: date, conflicts: Dict[str, ConflictVerdict]):
    """
    Display races with recovery windows, status and conflict flags.

    Args:
        races: Races to show, in display order
        today: Reference day for status labels
        conflicts: Schedule-wide conflicts keyed by race id
    """
    table = Table(title="Race Schedule", box=box.ROUNDED)
    table.add_column("Date", style="cyan")
    table.add_column("Race")
    table.add_column("Distance")
    table.add_column("Location")
    table.add_column("Recovery")
    table.add_column("Status")
    table.add_column("ID", style="dim")

    for race in races:
        recovery = derive_recovery(race)
        status = race_status(race, today)
        when = format_display_date(race.date)
        if race.time:
            when = f"{when} {format_time(race.time)}"

        title = race.title
        conflict = conflicts.get(race.id)
        if conflict is not None:
            marker = "red" if conflict.severity == ConflictSeverity.ERROR else "yellow"
            title = f"{title} [{marker}]⚠ conflict[/{marker}]"

        color = INTENSITY_COLORS[recovery.intensity]
        table.add_row(
            when,
            title,
            RACE_DISTANCES[race.distance].label,
            race.location or "",
            f"[{color}]{recovery.start_date.isoformat()} → {recovery.end_date.isoformat()}[/{color}]",
            f"[{STATUS_COLORS[status.type]}]{status.text}[/{STATUS_COLORS[status.type]}]",
            race.id[:8],
        )

    console.print(table)


def _calendar_cell(day: CalendarDayView) -> str:
    day_style = "bold" if day.is_current_month else "dim"
    lines = [f"[{day_style}]{day.date.day}[/{day_style}]"]

    for race in day.races:
        lines.append(f"[bold magenta]🏆 {race.title[:14]}[/bold magenta]")

    if day.recovery_periods:
        worst = max(
            (p.intensity for p in day.recovery_periods),
            key=lambda i: list(RecoveryIntensity).index(i),
        )
        color = INTENSITY_COLORS[worst]
        lines.append(f"[{color}]recovery[/{color}]")

    if day.has_conflict:
        lines.append("[red]⚠ conflict[/red]")

    return "\n".join(lines)


# ===== CLI COMMANDS =====


@app.command("init-db")
def init_db(
    ctx: typer.Context,
    seed: bool = typer.Option(
        False,
        "--seed/--no-seed",
        help="Replace all races with the sample season",
    ),
):
    """
    Create the database tables, optionally loading the sample season.
    """
    session = _open_session(ctx)
    try:
        console.print(f"✓ Database ready: [cyan]{ctx.obj['database_url']}[/cyan]")
        if seed:
            races = database.seed_sample_races(session)
            console.print(f"✓ Loaded [green]{len(races)}[/green] sample races")
    finally:
        session.close()


@app.command()
def distances():
    """
    Show the recovery guidance for each distance category.
    """
    table = Table(title="Race Distances", box=box.ROUNDED)
    table.add_column("Distance", style="cyan")
    table.add_column("Format")
    table.add_column("Recovery", justify="right")
    table.add_column("Recommended", justify="right", style="yellow")
    table.add_column("Intensity")

    for config in RACE_DISTANCES.values():
        color = INTENSITY_COLORS[config.intensity]
        table.add_row(
            config.label,
            config.description,
            f"{config.min_days}-{config.max_days} days",
            f"{config.recommended_days} days",
            f"[{color}]{config.intensity.value}[/{color}]",
        )

    console.print(table)


@app.command("list")
def list_races(
    ctx: typer.Context,
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Filter by text"),
    distance: Optional[RaceDistance] = typer.Option(
        None, "--distance", "-d", help="Filter by distance", case_sensitive=False
    ),
    sort: str = typer.Option("date", "--sort", help="Sort by date, title, distance or location"),
    descending: bool = typer.Option(False, "--desc", help="Sort descending"),
    today: Optional[str] = typer.Option(None, "--today", help="Reference day for status (YYYY-MM-DD)"),
):
    """
    List races with recovery windows, status and conflicts.
    """
    reference_day = _parse_day(today, "--today") if today else date.today()

    session = _open_session(ctx)
    try:
        races = database.list_races(
            session,
            search=search,
            distance=distance,
            sort_field=sort,
            direction="desc" if descending else "asc",
        )
        # Conflicts are always computed against the whole schedule
        everything = _load_races(session)
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)
    finally:
        session.close()

    if not races:
        console.print("[yellow]No races found.[/yellow]")
        return

    conflicts = find_schedule_conflicts(everything)
    shown_ids = {race.id for race in races}
    _display_race_table(races, reference_day, conflicts)

    hidden = [race_id for race_id in conflicts if race_id not in shown_ids]
    if conflicts:
        console.print(
            f"\n[yellow]{len(conflicts)} race(s) fall inside another race's recovery period"
            + (f" ({len(hidden)} not shown)" if hidden else "")
            + "[/yellow]"
        )


@app.command()
def add(
    ctx: typer.Context,
    title: str = typer.Option(..., "--title", "-t", help="Race name"),
    race_date: str = typer.Option(..., "--date", help="Race day (YYYY-MM-DD)"),
    distance: RaceDistance = typer.Option(
        RaceDistance.SPRINT, "--distance", "-d", help="Distance category", case_sensitive=False
    ),
    time: Optional[str] = typer.Option(None, "--time", help="Start time (HH:MM)"),
    location: Optional[str] = typer.Option(None, "--location", "-l", help="Venue"),
    description: Optional[str] = typer.Option(None, "--description", help="Notes"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Save without confirming conflicts"),
):
    """
    Add a race, warning when it falls inside a recovery period.

    Conflicts never block saving: error-level conflicts ask for
    confirmation (skip with --yes).
    """
    try:
        payload = RaceCreate(
            title=title,
            date=_parse_day(race_date, "--date"),
            time=time,
            distance=distance,
            location=location,
            description=description,
        )
    except ValueError as e:
        console.print(f"[red]✗ Invalid race: {e}[/red]")
        raise typer.Exit(1)

    session = _open_session(ctx)
    try:
        detector = ConflictDetector(_load_races(session))
        verdict = detector.check(payload)
        _display_conflict(verdict)

        if verdict is not None and verdict.severity == ConflictSeverity.ERROR and not yes:
            proceed = Confirm.ask(
                "This race falls during a recovery period and is not recommended. "
                "Schedule it anyway?",
                default=False,
            )
            if not proceed:
                console.print("[yellow]Race not saved.[/yellow]")
                raise typer.Exit(0)

        race = database.create_race(session, payload)
    finally:
        session.close()

    recovery = derive_recovery(race)
    console.print(
        f"\n✓ Saved [green]{race.title}[/green] on {format_display_date(race.date)} "
        f"(id [dim]{race.id}[/dim])"
    )
    console.print(
        f"  Recovery: {recovery.start_date.isoformat()} → {recovery.end_date.isoformat()} "
        f"({recovery.intensity.value})"
    )


@app.command()
def delete(
    ctx: typer.Context,
    race_id: str = typer.Argument(..., help="Race id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Delete without confirming"),
):
    """
    Delete a race.
    """
    session = _open_session(ctx)
    try:
        # Rows with an unknown distance must stay deletable
        title = database.get_race_title(session, race_id)
        if title is None:
            console.print(f"[red]✗ Race not found: {race_id}[/red]")
            raise typer.Exit(1)

        if not yes and not Confirm.ask(f'Delete "{title}"?', default=False):
            console.print("[yellow]Cancelled.[/yellow]")
            raise typer.Exit(0)

        database.delete_race(session, race_id)
    finally:
        session.close()

    console.print(f"✓ Deleted [green]{title}[/green]")


@app.command()
def check(
    ctx: typer.Context,
    race_date: str = typer.Option(..., "--date", help="Proposed race day (YYYY-MM-DD)"),
    exclude: Optional[str] = typer.Option(
        None, "--exclude", help="Race id to leave out (the race being edited)"
    ),
):
    """
    Check whether a date falls inside any recovery period.
    """
    day = _parse_day(race_date, "--date")

    session = _open_session(ctx)
    try:
        races = [race for race in _load_races(session) if race.id != exclude]
    finally:
        session.close()

    _display_conflict(ConflictDetector(races).check(day))


@app.command()
def calendar(
    ctx: typer.Context,
    month: Optional[str] = typer.Option(None, "--month", "-m", help="Month to show (YYYY-MM)"),
):
    """
    Show a month calendar with races and recovery periods.
    """
    try:
        anchor = parse_month(month)
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)

    session = _open_session(ctx)
    try:
        races = _load_races(session)
    finally:
        session.close()

    days = build_month_view(anchor, races)

    table = Table(title=anchor.strftime("%B %Y"), box=box.SQUARE, show_lines=True)
    for name in ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"):
        table.add_column(name, min_width=12, vertical="top")

    for week_start in range(0, len(days), 7):
        table.add_row(*[_calendar_cell(day) for day in days[week_start:week_start + 7]])

    console.print(table)
    console.print(
        "[green]light[/green] / [yellow]moderate[/yellow] / [red]heavy[/red] recovery"
    )


@app.command()
def report(
    ctx: typer.Context,
    output_format: str = typer.Option(
        "markdown",
        "--format",
        "-f",
        help="Report format (json or markdown)",
    ),
    output_dir: Path = typer.Option(
        Path("reports"),
        "--output",
        "-o",
        help="Directory for the report file",
    ),
    today: Optional[str] = typer.Option(None, "--today", help="Reference day for status (YYYY-MM-DD)"),
):
    """
    Save a schedule report with recovery windows and conflicts.
    """
    reference_day = _parse_day(today, "--today") if today else date.today()

    session = _open_session(ctx)
    try:
        races = _load_races(session)
    finally:
        session.close()

    builder = ScheduleReportBuilder(races, as_of=reference_day)
    try:
        path = builder.save_to_file(output_dir, format=output_format)
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)

    console.print(
        f"✓ Report saved: [cyan]{path}[/cyan] "
        f"({len(builder.report.entries)} races, {builder.report.conflict_count} conflicts)"
    )


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
):
    """
    Run the REST API server.
    """
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.api.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    app()
