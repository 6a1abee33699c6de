"""
Tests for the month calendar grid.

Test scenarios:
1. Grid shape (42 days, Monday start, increasing order)
2. Recovery windows spilling over from the previous month
3. Same-day race/recovery overlap marks a conflict
4. Month string parsing
"""

from datetime import date, timedelta

import pytest

from src.calendar_view import GRID_DAYS, build_month_view, calendar_grid_start, parse_month
from src.schemas import RaceDistance


def _day(days, iso):
    """Find the grid entry for an ISO date."""
    target = date.fromisoformat(iso)
    return next(d for d in days if d.date == target)


# Grid Shape

def test_grid_has_42_days_starting_monday():
    days = build_month_view(date(2025, 7, 15), [])

    assert len(days) == GRID_DAYS == 42
    assert days[0].date == date(2025, 6, 30)
    assert days[0].date.weekday() == 0
    assert days[-1].date == date(2025, 8, 10)


def test_grid_dates_strictly_increase():
    days = build_month_view(date(2025, 8, 1), [])

    for earlier, later in zip(days, days[1:]):
        assert later.date - earlier.date == timedelta(days=1)


def test_grid_starts_on_first_when_month_begins_monday():
    assert calendar_grid_start(date(2025, 9, 20)) == date(2025, 9, 1)


def test_current_month_flags():
    days = build_month_view(date(2025, 8, 10), [])

    current = [d for d in days if d.is_current_month]
    assert len(current) == 31
    assert current[0].date == date(2025, 8, 1)
    assert not _day(days, "2025-07-28").is_current_month
    assert not _day(days, "2025-09-01").is_current_month


def test_empty_schedule_has_no_annotations():
    days = build_month_view(date(2025, 8, 1), [])

    assert all(not d.races and not d.recovery_periods and not d.has_conflict for d in days)


# Annotations

def test_recovery_from_previous_month_is_shown(make_race):
    """Olympic on 2025-08-28 recovers through 2025-09-03."""
    race = make_race("2025-08-28", RaceDistance.OLYMPIC, title="Late Olympic")

    days = build_month_view(date(2025, 9, 1), [race])

    for iso in ("2025-09-01", "2025-09-02", "2025-09-03"):
        periods = _day(days, iso).recovery_periods
        assert [p.race.title for p in periods] == ["Late Olympic"]
    assert _day(days, "2025-09-04").recovery_periods == []


def test_race_from_outside_grid_still_contributes_recovery(make_race):
    """A long-course race weeks before the grid still covers its recovery days."""
    race = make_race("2025-10-12", RaceDistance.LONG)

    days = build_month_view(date(2025, 11, 1), [race])

    assert _day(days, "2025-11-11").recovery_periods
    assert not _day(days, "2025-11-12").recovery_periods


def test_race_day_is_not_its_own_recovery(make_race):
    race = make_race("2025-08-24", RaceDistance.MIDDLE)

    day = _day(build_month_view(date(2025, 8, 1), [race]), "2025-08-24")

    assert day.races == [race]
    assert day.recovery_periods == []
    assert day.has_conflict is False


def test_race_inside_recovery_marks_conflict(make_race):
    """
    Middle race on 2025-08-24 plus two races on 2025-08-30.
    Both 08-30 races are listed and the day is flagged.
    """
    middle = make_race("2025-08-24", RaceDistance.MIDDLE, title="Half Ironman 70.3")
    sprint = make_race("2025-08-30", RaceDistance.SPRINT, title="Dawn Sprint")
    olympic = make_race("2025-08-30", RaceDistance.OLYMPIC, title="Dusk Olympic")

    days = build_month_view(date(2025, 8, 1), [middle, sprint, olympic])

    day = _day(days, "2025-08-30")
    assert [r.title for r in day.races] == ["Dawn Sprint", "Dusk Olympic"]
    assert [p.race.title for p in day.recovery_periods] == ["Half Ironman 70.3"]
    assert day.has_conflict is True

    # 08-31 sits in all three recovery windows but holds no race
    next_day = _day(days, "2025-08-31")
    assert len(next_day.recovery_periods) == 3
    assert next_day.has_conflict is False


def test_has_conflict_only_when_both_present(make_race):
    races = [
        make_race("2025-07-05", RaceDistance.SPRINT),
        make_race("2025-07-20", RaceDistance.OLYMPIC),
    ]

    days = build_month_view(date(2025, 7, 1), races)

    for day in days:
        assert day.has_conflict == (bool(day.races) and bool(day.recovery_periods))
    assert not any(d.has_conflict for d in days)


# Month Parsing

def test_parse_month_formats():
    assert parse_month("2025-08") == date(2025, 8, 1)
    assert parse_month("2025-08-19") == date(2025, 8, 1)
    assert parse_month(None, today=date(2025, 7, 14)) == date(2025, 7, 1)


@pytest.mark.parametrize(
    "value", ["August", "2025-13", "2025-xx", "2025", "2025-02-31", "2025-08-xx"]
)
def test_parse_month_rejects_bad_values(value):
    with pytest.raises(ValueError):
        parse_month(value)


def test_parse_month_accepts_full_valid_date():
    assert parse_month("2024-02-29") == date(2024, 2, 1)
