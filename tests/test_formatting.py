from datetime import date

from src.formatting import format_date, format_display_date, format_time, pluralize_days


def test_pluralize_days():
    assert pluralize_days(1) == "1 day"
    assert pluralize_days(0) == "0 days"
    assert pluralize_days(12) == "12 days"


def test_format_dates():
    assert format_date(date(2025, 7, 5)) == "2025-07-05"
    assert format_display_date(date(2025, 7, 5)) == "Jul 5, 2025"


def test_format_time():
    assert format_time("07:00") == "7:00 AM"
    assert format_time("12:15") == "12:15 PM"
    assert format_time("00:30") == "12:30 AM"
    assert format_time("18:45") == "6:45 PM"
    assert format_time(None) == ""
    assert format_time("") == ""
