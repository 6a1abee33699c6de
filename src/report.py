"""
Schedule report generation and export.

Builds a snapshot of the race schedule (every race, its recovery window,
its status on the report day and any conflict with other races) and
exports it to JSON or Markdown for review.
"""

import json
from datetime import date
from pathlib import Path
from typing import Sequence

from src.conflicts import find_schedule_conflicts
from src.formatting import format_display_date, format_time
from src.recovery import derive_recovery, get_recovery_config, race_status
from src.schemas import (
    ConflictSeverity,
    Race,
    ScheduleEntry,
    ScheduleReport,
)


class ScheduleReportBuilder:
    """
    Builds and exports schedule reports.

    The report shows, for every race:
    - When and where it is held
    - Which recovery window follows it
    - Where it stands relative to the report day
    - Whether it falls inside another race's recovery window
    """

    def __init__(self, races: Sequence[Race], as_of: date):
        """
        Initialize the builder and derive every report entry.

        Args:
            races: Full race list
            as_of: Reference day for status labels

        Raises:
            InvalidCategory: If any race carries an unknown distance
        """
        ordered = sorted(races, key=lambda r: (r.date, r.time or ""))
        conflicts = find_schedule_conflicts(ordered)

        self.report = ScheduleReport(
            as_of=as_of,
            entries=[
                ScheduleEntry(
                    race=race,
                    recovery=derive_recovery(race),
                    status=race_status(race, as_of),
                    conflict=conflicts.get(race.id),
                )
                for race in ordered
            ],
        )

    def export_to_json(self) -> dict:
        """
        Export report to JSON-serializable dictionary.

        Returns:
            Dictionary representation of the report
        """
        return self.report.model_dump(mode="json")

    def export_to_markdown(self) -> str:
        """
        Export report to human-readable Markdown format.

        Returns:
            Markdown-formatted schedule report
        """
        report = self.report
        lines = []

        # Header
        lines.append("# Race Schedule Report")
        lines.append("")
        lines.append(f"**Generated:** {report.timestamp.strftime('%Y-%m-%d %H:%M:%S')}")
        lines.append(f"**As of:** {format_display_date(report.as_of)}")
        lines.append(f"**Races:** {len(report.entries)}")
        lines.append(f"**Conflicts:** {report.conflict_count}")
        lines.append("")
        lines.append("---")
        lines.append("")

        # Schedule table
        lines.append("## Schedule")
        lines.append("")

        if not report.entries:
            lines.append("*No races scheduled*")
            lines.append("")
        else:
            lines.append("| Date | Race | Distance | Recovery | Status |")
            lines.append("|------|------|----------|----------|--------|")
            for entry in report.entries:
                race = entry.race
                when = format_display_date(race.date)
                if race.time:
                    when = f"{when} {format_time(race.time)}"
                config = get_recovery_config(race.distance)
                recovery = (
                    f"{entry.recovery.start_date.isoformat()} → "
                    f"{entry.recovery.end_date.isoformat()} ({entry.recovery.intensity.value})"
                )
                flag = " ⚠️" if entry.conflict else ""
                lines.append(
                    f"| {when} | {race.title}{flag} | {config.label} | {recovery} | {entry.status.text} |"
                )
            lines.append("")

        lines.append("---")
        lines.append("")

        # Conflicts
        lines.append("## Scheduling Conflicts")
        lines.append("")

        conflicted = [e for e in report.entries if e.conflict is not None]
        if not conflicted:
            lines.append("✅ **No race falls inside another race's recovery period**")
            lines.append("")
        else:
            errors = [e for e in conflicted if e.conflict.severity == ConflictSeverity.ERROR]
            warnings = [e for e in conflicted if e.conflict.severity == ConflictSeverity.WARNING]

            lines.append(f"**Conflicts:** {len(errors)} error, {len(warnings)} warning")
            lines.append("")

            if errors:
                lines.append("### ⛔ Errors (heavy recovery)")
                lines.append("")
                for i, entry in enumerate(errors, 1):
                    lines.append(f"#### {i}. {entry.race.title} ({entry.race.date.isoformat()})")
                    lines.append(f"- {entry.conflict.message}")
                    lines.append("")

            if warnings:
                lines.append("### ⚠️ Warnings")
                lines.append("")
                for i, entry in enumerate(warnings, 1):
                    lines.append(f"#### {i}. {entry.race.title} ({entry.race.date.isoformat()})")
                    lines.append(f"- {entry.conflict.message}")
                    lines.append("")

        lines.append("---")
        lines.append("")
        lines.append("*Conflicts are advisory. Races inside a recovery period can still be scheduled.*")

        return "\n".join(lines)

    def save_to_file(self, output_dir: Path, format: str = "json") -> Path:
        """
        Save report to file in specified format.

        Args:
            output_dir: Directory to save report file
            format: Output format ("json" or "markdown")

        Returns:
            Path to saved file

        Raises:
            ValueError: If format is not supported
        """
        if format not in ("json", "markdown"):
            raise ValueError(f"Unsupported format: {format}. Use 'json' or 'markdown'")

        output_dir.mkdir(parents=True, exist_ok=True)
        timestamp_str = self.report.timestamp.strftime("%Y%m%d_%H%M%S")

        if format == "json":
            filepath = output_dir / f"schedule_{timestamp_str}.json"
            with open(filepath, "w") as f:
                json.dump(self.export_to_json(), f, indent=2, default=str)
        else:
            filepath = output_dir / f"schedule_{timestamp_str}.md"
            with open(filepath, "w") as f:
                f.write(self.export_to_markdown())

        return filepath


def load_report_from_file(filepath: Path) -> ScheduleReport:
    """
    Load a schedule report from JSON file.

    Args:
        filepath: Path to report JSON file

    Returns:
        ScheduleReport object

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If JSON is invalid
    """
    if not filepath.exists():
        raise FileNotFoundError(f"Report file not found: {filepath}")

    with open(filepath, "r") as f:
        data = json.load(f)

    try:
        report = ScheduleReport(**data)
    except Exception as e:
        raise ValueError(f"Invalid report file: {e}")

    return report
