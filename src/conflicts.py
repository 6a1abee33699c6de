"""
Scheduling conflict detection.

Checks candidate race dates against the recovery windows of existing
races. A conflict is advisory: the verdict tells the caller how strongly
to warn, it never forbids saving the race.
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Union

from src.recovery import derive_recovery_periods
from src.schemas import (
    ConflictCandidate,
    ConflictSeverity,
    ConflictVerdict,
    Race,
    RecoveryIntensity,
    RecoveryInterval,
)

logger = logging.getLogger(__name__)

CONFLICT_MESSAGE_PREFIX = "This date conflicts with recovery period(s) from: "


class ConflictDetector:
    """
    Checks candidates against the recovery windows of a fixed race list.

    Recovery windows are derived once when the detector is created, so a
    single detector can check many candidates against the same schedule.
    The caller is responsible for leaving the race under edit out of
    ``existing_races``.
    """

    def __init__(self, existing_races: Sequence[Race]):
        """
        Initialize detector with the races to check against.

        Args:
            existing_races: Races whose recovery windows block candidates

        Raises:
            InvalidCategory: If any race carries an unknown distance
        """
        self.existing_races = list(existing_races)
        self.intervals = derive_recovery_periods(self.existing_races)

    def check(
        self, candidate: Union[ConflictCandidate, Race, date]
    ) -> Optional[ConflictVerdict]:
        """
        Check a candidate against every recovery window.

        Args:
            candidate: A ConflictCandidate, a Race, or a bare date

        Returns:
            ConflictVerdict if the date falls inside at least one recovery
            window, None otherwise
        """
        candidate_date = candidate if isinstance(candidate, date) else candidate.date

        matches = self._matching_intervals(candidate_date)
        if not matches:
            return None

        severity = self._classify(matches)
        verdict = ConflictVerdict(
            candidate_date=candidate_date,
            conflicts=matches,
            severity=severity,
            message=self._build_message(matches),
        )
        logger.debug(
            "Conflict on %s (%s): %s",
            candidate_date.isoformat(),
            severity.value,
            ", ".join(verdict.conflicting_titles),
        )
        return verdict

    def _matching_intervals(self, candidate_date: date) -> List[RecoveryInterval]:
        """Recovery windows containing the date, in existing-race order."""
        return [
            interval for interval in self.intervals if interval.contains(candidate_date)
        ]

    def _classify(self, matches: List[RecoveryInterval]) -> ConflictSeverity:
        """ERROR when any match is heavy, otherwise WARNING."""
        if any(m.intensity == RecoveryIntensity.HEAVY for m in matches):
            return ConflictSeverity.ERROR
        return ConflictSeverity.WARNING

    def _build_message(self, matches: List[RecoveryInterval]) -> str:
        titles = ", ".join(m.race.title for m in matches)
        return f"{CONFLICT_MESSAGE_PREFIX}{titles}"

    def display_conflict_summary(self, verdict: Optional[ConflictVerdict]) -> str:
        """
        Generate human-readable conflict summary.

        Args:
            verdict: Result of ``check`` (None for no conflict)

        Returns:
            Formatted summary string
        """
        if verdict is None:
            return "✅ No scheduling conflicts. Date is clear of all recovery periods."

        lines = []
        if verdict.severity == ConflictSeverity.ERROR:
            lines.append("⛔ SCHEDULING CONFLICT")
        else:
            lines.append("⚠️  SCHEDULING WARNING")
        lines.append(verdict.message)
        lines.append("")
        for interval in verdict.conflicts:
            lines.append(
                f"  • {interval.race.title} ({interval.race.distance.value}, "
                f"{interval.intensity.value} recovery): "
                f"{interval.start_date.isoformat()} → {interval.end_date.isoformat()}"
            )
        return "\n".join(lines)


def detect_conflict(
    candidate: Union[ConflictCandidate, Race, date],
    existing_races: Sequence[Race],
) -> Optional[ConflictVerdict]:
    """
    Check one candidate against the recovery windows of existing races.

    Args:
        candidate: Proposed race (or date) to check
        existing_races: Other races, excluding the candidate's own prior version

    Returns:
        ConflictVerdict, or None when the date is clear
    """
    return ConflictDetector(existing_races).check(candidate)


def find_schedule_conflicts(races: Iterable[Race]) -> Dict[str, ConflictVerdict]:
    """
    Check every race against all other races in the schedule.

    Args:
        races: Full race list

    Returns:
        Mapping of race id to verdict for races that conflict, in input order
    """
    races = list(races)
    conflicts: Dict[str, ConflictVerdict] = {}

    for race in races:
        others = [r for r in races if r.id != race.id]
        verdict = detect_conflict(race, others)
        if verdict is not None:
            conflicts[race.id] = verdict

    return conflicts
