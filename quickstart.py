#!/usr/bin/env python3
"""
Quick start script to demonstrate the Triathlon Race Scheduler.

This script shows the complete workflow:
1. Load the sample race season into an in-memory database
2. Show each race's recovery period
3. Check proposed race dates for conflicts
4. Find conflicts across the whole schedule
5. Render a month calendar
"""

from datetime import date

from rich import box
from rich.console import Console
from rich.table import Table

from src import database
from src.calendar_view import build_month_view
from src.conflicts import ConflictDetector, find_schedule_conflicts
from src.recovery import derive_recovery, race_status
from src.schemas import RACE_DISTANCES, RaceCreate, RaceDistance

console = Console()


def print_header(title: str):
    """Print a formatted header."""
    console.print(f"\n[bold cyan]{title}[/bold cyan]")
    console.print("=" * len(title))


def main():
    """Run the complete demonstration workflow."""
    console.print("\n[bold magenta]🏊 🚴 🏃 Triathlon Race Scheduler[/bold magenta]")
    console.print("[dim]Demonstration of complete workflow[/dim]\n")

    # ===== STEP 1: Load Sample Season =====
    print_header("Step 1: Load Sample Season")

    session = database.init_database("sqlite://")
    races = database.seed_sample_races(session)
    console.print(f"✓ Loaded [green]{len(races)}[/green] races")

    # ===== STEP 2: Recovery Periods =====
    print_header("Step 2: Recovery Periods")

    as_of = date(2025, 8, 28)
    table = Table(box=box.ROUNDED)
    table.add_column("Race", style="cyan")
    table.add_column("Date")
    table.add_column("Distance")
    table.add_column("Recovery")
    table.add_column(f"Status on {as_of.isoformat()}")

    for race in races:
        recovery = derive_recovery(race)
        table.add_row(
            race.title,
            race.date.isoformat(),
            RACE_DISTANCES[race.distance].label,
            f"{recovery.start_date.isoformat()} → {recovery.end_date.isoformat()} ({recovery.intensity.value})",
            race_status(race, as_of).text,
        )
    console.print(table)

    # ===== STEP 3: Check Proposed Dates =====
    print_header("Step 3: Check Proposed Dates")

    detector = ConflictDetector(races)
    proposals = [
        RaceCreate(title="Sunday Sprint", date=date(2025, 7, 9), distance=RaceDistance.SPRINT),
        RaceCreate(title="Lakeside Sprint", date=date(2025, 7, 24), distance=RaceDistance.SPRINT),
        RaceCreate(title="Late Summer Olympic", date=date(2025, 8, 30), distance=RaceDistance.OLYMPIC),
    ]
    for proposal in proposals:
        console.print(f"\n[bold]{proposal.title}[/bold] on {proposal.date.isoformat()}")
        console.print(detector.display_conflict_summary(detector.check(proposal)))

    # ===== STEP 4: Schedule-wide Conflicts =====
    print_header("Step 4: Schedule-wide Conflicts")

    database.create_race(session, proposals[2])
    conflicts = find_schedule_conflicts(database.list_races(session))
    if not conflicts:
        console.print("[green]✓ No race falls inside another race's recovery period[/green]")
    for verdict in conflicts.values():
        color = "red" if verdict.severity.value == "error" else "yellow"
        console.print(f"[{color}]{verdict.candidate_date.isoformat()} ({verdict.severity.value})[/{color}]: {verdict.message}")

    # ===== STEP 5: Month Calendar =====
    print_header("Step 5: Month Calendar (August 2025)")

    days = build_month_view(date(2025, 8, 1), database.list_races(session))
    for week_start in range(0, len(days), 7):
        week = days[week_start:week_start + 7]
        cells = []
        for day in week:
            marker = " "
            if day.has_conflict:
                marker = "!"
            elif day.races:
                marker = "R"
            elif day.recovery_periods:
                marker = "~"
            label = f"{day.date.day:>2}{marker}"
            cells.append(label if day.is_current_month else f"[dim]{label}[/dim]")
        console.print("  ".join(cells))
    console.print("[dim]R = race, ~ = recovery, ! = race inside a recovery period[/dim]")

    session.close()
    console.print("\n[bold green]✓ Demonstration complete[/bold green]\n")


if __name__ == "__main__":
    main()
