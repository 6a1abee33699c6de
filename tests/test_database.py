"""
Tests for race persistence and queries.

Uses an in-memory SQLite database per test.
"""

from datetime import date

import pytest

from src import database
from src.schemas import InvalidCategory, RaceCreate, RaceDistance, RaceUpdate


def _create(session, title, race_date, distance="sprint", **extra):
    return database.create_race(
        session, RaceCreate(title=title, date=race_date, distance=distance, **extra)
    )


# CRUD

def test_create_assigns_id_and_timestamps(db_session):
    race = _create(db_session, "City Sprint", "2025-07-05", time="08:00", location="City Beach")

    assert race.id
    assert race.date == date(2025, 7, 5)
    assert race.distance == RaceDistance.SPRINT
    assert race.time == "08:00"
    assert race.created_at is not None
    assert race.updated_at is not None


def test_get_race(db_session):
    race = _create(db_session, "City Sprint", "2025-07-05")

    assert database.get_race(db_session, race.id) == race
    assert database.get_race(db_session, "missing") is None


def test_update_applies_only_supplied_fields(db_session):
    race = _create(db_session, "City Sprint", "2025-07-05", location="City Beach")

    updated = database.update_race(
        db_session, race.id, RaceUpdate(date="2025-07-06", distance="olympic")
    )

    assert updated.id == race.id
    assert updated.date == date(2025, 7, 6)
    assert updated.distance == RaceDistance.OLYMPIC
    assert updated.title == "City Sprint"
    assert updated.location == "City Beach"
    assert updated.updated_at >= race.updated_at


def test_update_can_clear_optional_fields(db_session):
    race = _create(db_session, "City Sprint", "2025-07-05", location="City Beach")

    updated = database.update_race(db_session, race.id, RaceUpdate(location=""))

    assert updated.location is None


def test_update_missing_race_returns_none(db_session):
    assert database.update_race(db_session, "missing", RaceUpdate(title="New")) is None


def test_delete_race(db_session):
    race = _create(db_session, "City Sprint", "2025-07-05")

    assert database.delete_race(db_session, race.id) is True
    assert database.get_race(db_session, race.id) is None
    assert database.delete_race(db_session, race.id) is False


# Queries

@pytest.fixture
def seeded(db_session):
    database.seed_sample_races(db_session)
    return db_session


def test_seed_loads_sample_season(seeded):
    races = database.list_races(seeded)

    assert len(races) == len(database.SAMPLE_RACES) == 6
    assert races[0].title == "Spring Sprint Triathlon"
    assert races[-1].title == "Ironman Full Distance"


def test_seed_replaces_existing_races(seeded):
    database.seed_sample_races(seeded)

    assert len(database.list_races(seeded)) == 6


def test_seed_can_append(seeded):
    database.seed_sample_races(seeded, replace=False)

    assert len(database.list_races(seeded)) == 12


def test_list_in_range_is_inclusive(seeded):
    races = database.list_races_in_range(seeded, date(2025, 7, 20), date(2025, 8, 24))

    assert [r.title for r in races] == [
        "Olympic Distance Championship",
        "Mid-Season Sprint",
        "Half Ironman 70.3",
    ]


def test_search_matches_title_location_and_description(seeded):
    assert [r.title for r in database.list_races(seeded, search="ironman")] == [
        "Half Ironman 70.3",
        "Ironman Full Distance",
    ]
    assert [r.title for r in database.list_races(seeded, search="lake park")] == [
        "Olympic Distance Championship"
    ]
    assert [r.title for r in database.list_races(seeded, search="season opener")] == [
        "Spring Sprint Triathlon"
    ]


def test_filter_by_distance(seeded):
    races = database.list_races(seeded, distance=RaceDistance.OLYMPIC)

    assert [r.title for r in races] == ["Olympic Distance Championship", "Late Season Olympic"]


def test_sort_by_distance_uses_category_order(seeded):
    races = database.list_races(seeded, sort_field="distance")

    assert [r.distance for r in races] == [
        RaceDistance.SPRINT,
        RaceDistance.SPRINT,
        RaceDistance.OLYMPIC,
        RaceDistance.OLYMPIC,
        RaceDistance.MIDDLE,
        RaceDistance.LONG,
    ]


def test_sort_by_title_descending(seeded):
    titles = [r.title for r in database.list_races(seeded, sort_field="title", direction="desc")]

    assert titles == sorted(titles, key=str.lower, reverse=True)


def test_sort_rejects_unknown_field(seeded):
    with pytest.raises(ValueError):
        database.list_races(seeded, sort_field="price")

    with pytest.raises(ValueError):
        database.list_races(seeded, direction="sideways")


def test_unknown_stored_distance_raises(db_session):
    """Rows written by older versions may carry categories that no longer exist."""
    db_session.add(
        database.RaceRecord(id="legacy", title="Aquabike", date=date(2025, 7, 5), distance="aquabike")
    )
    db_session.commit()

    with pytest.raises(InvalidCategory):
        database.get_race(db_session, "legacy")


def test_get_race_title_skips_distance_validation(db_session):
    db_session.add(
        database.RaceRecord(id="legacy", title="Aquabike", date=date(2025, 7, 5), distance="aquabike")
    )
    db_session.commit()

    assert database.get_race_title(db_session, "legacy") == "Aquabike"
    assert database.get_race_title(db_session, "missing") is None
