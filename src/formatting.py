"""
Display formatting helpers shared by the CLI and reports.
"""

from datetime import date
from typing import Optional


def pluralize_days(count: int) -> str:
    """'1 day', '3 days'."""
    return f"{count} day{'' if count == 1 else 's'}"


def format_date(day: date) -> str:
    """ISO calendar date (YYYY-MM-DD)."""
    return day.isoformat()


def format_display_date(day: date) -> str:
    """Short display date, e.g. 'Jul 5, 2025'."""
    return f"{day.strftime('%b')} {day.day}, {day.year}"


def format_time(time: Optional[str]) -> str:
    """
    Convert a 24-hour HH:MM string to 12-hour display form.

    Args:
        time: Time string such as "07:00" or "18:30", or None

    Returns:
        Display string such as "7:00 AM" or "6:30 PM"; empty for no time
    """
    if not time:
        return ""
    hours, minutes = time.split(":")[:2]
    hour = int(hours)
    ampm = "PM" if hour >= 12 else "AM"
    display_hour = hour % 12 or 12
    return f"{display_hour}:{minutes} {ampm}"
