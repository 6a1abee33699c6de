"""
Month calendar annotation.

Expands a month into a fixed six-week grid (Monday first) and attaches
the races and recovery windows that touch each day.
"""

from datetime import date, timedelta
from typing import List, Optional, Sequence

from src.recovery import derive_recovery_periods
from src.schemas import CalendarDayView, Race

GRID_WEEKS = 6
GRID_DAYS = GRID_WEEKS * 7


def calendar_grid_start(anchor_date: date) -> date:
    """Monday on or before the first day of *anchor_date*'s month."""
    first_of_month = anchor_date.replace(day=1)
    return first_of_month - timedelta(days=first_of_month.weekday())


def parse_month(value: Optional[str], today: Optional[date] = None) -> date:
    """
    Parse a ``YYYY-MM`` (or full ``YYYY-MM-DD``) string into an anchor date.

    Args:
        value: Month string; None falls back to *today*'s month
        today: Reference day for the fallback (defaults to date.today())

    Returns:
        First day of the requested month

    Raises:
        ValueError: If the string is not a valid month
    """
    if not value:
        return (today or date.today()).replace(day=1)

    parts = value.strip().split("-")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid month '{value}'. Expected YYYY-MM")
    try:
        if len(parts) == 3:
            return date.fromisoformat(value.strip()).replace(day=1)
        year, month = int(parts[0]), int(parts[1])
        return date(year, month, 1)
    except ValueError:
        raise ValueError(f"Invalid month '{value}'. Expected YYYY-MM") from None


def build_month_view(anchor_date: date, races: Sequence[Race]) -> List[CalendarDayView]:
    """
    Build the 42-day grid for the month containing *anchor_date*.

    Recovery windows come from every race in *races*, so a window that
    starts in the previous month still shows up on the days it covers.

    Args:
        anchor_date: Any day in the month to display
        races: Full race list

    Returns:
        42 CalendarDayView entries in increasing date order, starting on a Monday
    """
    intervals = derive_recovery_periods(races)
    start = calendar_grid_start(anchor_date)

    days = []
    for offset in range(GRID_DAYS):
        day = start + timedelta(days=offset)
        day_races = [race for race in races if race.date == day]
        day_recovery = [interval for interval in intervals if interval.contains(day)]

        days.append(
            CalendarDayView(
                date=day,
                is_current_month=(
                    day.month == anchor_date.month and day.year == anchor_date.year
                ),
                races=day_races,
                recovery_periods=day_recovery,
                has_conflict=bool(day_races) and bool(day_recovery),
            )
        )

    return days
