"""
Shared fixtures for the race scheduler tests.
"""

from datetime import date

import pytest

from src import database
from src.schemas import Race, RaceDistance


@pytest.fixture
def make_race():
    """Factory for Race values with sensible defaults."""
    counter = {"n": 0}

    def _make(
        race_date,
        distance=RaceDistance.SPRINT,
        title=None,
        race_id=None,
        time=None,
        location=None,
    ) -> Race:
        counter["n"] += 1
        if isinstance(race_date, str):
            race_date = date.fromisoformat(race_date)
        return Race(
            id=race_id or f"race-{counter['n']}",
            title=title or f"Race {counter['n']}",
            date=race_date,
            distance=distance,
            time=time,
            location=location,
        )

    return _make


@pytest.fixture
def db_session():
    """Fresh in-memory database session."""
    session = database.init_database("sqlite://")
    yield session
    session.close()
