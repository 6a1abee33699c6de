"""
Tests for the command-line interface.

Each test gets its own SQLite file under tmp_path.
"""

import json
from datetime import date

import pytest
from rich.console import Console
from typer.testing import CliRunner

from src import cli, database

runner = CliRunner()


# Fixtures

@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Keep rich tables from wrapping race titles."""
    monkeypatch.setattr(cli, "console", Console(width=200))


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'races.db'}"


@pytest.fixture
def seeded_url(db_url):
    result = runner.invoke(cli.app, ["--database-url", db_url, "init-db", "--seed"])
    assert result.exit_code == 0, result.output
    return db_url


def invoke(db_url, *args, **kwargs):
    return runner.invoke(cli.app, ["--database-url", db_url, *args], **kwargs)


def stored_titles(db_url):
    session = database.init_database(db_url)
    try:
        return [race.title for race in database.list_races(session)]
    finally:
        session.close()


# Test Cases

def test_init_db_seeds_sample_season(seeded_url):
    assert len(stored_titles(seeded_url)) == 6


def test_distances():
    result = runner.invoke(cli.app, ["distances"])

    assert result.exit_code == 0
    assert "Race Distances" in result.output
    assert "12 days" in result.output


def test_list_shows_races(seeded_url):
    result = invoke(seeded_url, "list", "--today", "2025-08-28")

    assert result.exit_code == 0
    assert "Half Ironman 70.3" in result.output
    assert "Recovery: 8 days left" in result.output


def test_list_empty(db_url):
    result = invoke(db_url, "list")

    assert result.exit_code == 0
    assert "No races found." in result.output


def test_list_rejects_unknown_sort(seeded_url):
    result = invoke(seeded_url, "list", "--sort", "price")

    assert result.exit_code == 1


def test_add_clear_date(seeded_url):
    result = invoke(seeded_url, "add", "--title", "Sunday Sprint", "--date", "2025-07-09")

    assert result.exit_code == 0, result.output
    assert "No scheduling conflicts" in result.output
    assert "Saved Sunday Sprint" in result.output
    assert "Sunday Sprint" in stored_titles(seeded_url)


def test_add_warning_saves_without_prompt(seeded_url):
    result = invoke(
        seeded_url, "add", "--title", "Lakeside Sprint", "--date", "2025-07-24"
    )

    assert result.exit_code == 0, result.output
    assert "SCHEDULING WARNING" in result.output
    assert "Lakeside Sprint" in stored_titles(seeded_url)


def test_add_error_declined(seeded_url):
    result = invoke(
        seeded_url,
        "add",
        "--title", "Late Olympic",
        "--date", "2025-08-30",
        "--distance", "olympic",
        input="n\n",
    )

    assert result.exit_code == 0
    assert "SCHEDULING CONFLICT" in result.output
    assert "Race not saved." in result.output
    assert "Late Olympic" not in stored_titles(seeded_url)


def test_add_error_confirmed_with_yes(seeded_url):
    result = invoke(
        seeded_url,
        "add",
        "--title", "Late Olympic",
        "--date", "2025-08-30",
        "--distance", "olympic",
        "--yes",
    )

    assert result.exit_code == 0, result.output
    assert "Saved Late Olympic" in result.output
    assert "Late Olympic" in stored_titles(seeded_url)


def test_add_rejects_bad_date(db_url):
    result = invoke(db_url, "add", "--title", "Bad", "--date", "2025-02-30")

    assert result.exit_code == 1
    assert "Expected YYYY-MM-DD" in result.output


def test_delete(seeded_url):
    session = database.init_database(seeded_url)
    race = database.list_races(session)[0]
    session.close()

    result = invoke(seeded_url, "delete", race.id, "--yes")

    assert result.exit_code == 0
    assert race.title not in stored_titles(seeded_url)


def test_delete_missing(db_url):
    result = invoke(db_url, "delete", "missing", "--yes")

    assert result.exit_code == 1


def test_check(seeded_url):
    assert "No scheduling conflicts" in invoke(seeded_url, "check", "--date", "2025-07-09").output
    assert "SCHEDULING CONFLICT" in invoke(seeded_url, "check", "--date", "2025-08-30").output


def test_check_excludes_race_under_edit(db_url):
    invoke(db_url, "add", "--title", "Spring Sprint", "--date", "2025-07-05")
    session = database.init_database(db_url)
    race_id = database.list_races(session)[0].id
    session.close()

    result = invoke(db_url, "check", "--date", "2025-07-06", "--exclude", race_id)

    assert "No scheduling conflicts" in result.output


def test_calendar(seeded_url):
    result = invoke(seeded_url, "calendar", "--month", "2025-08")

    assert result.exit_code == 0
    assert "August 2025" in result.output


def test_calendar_rejects_bad_month(db_url):
    result = invoke(db_url, "calendar", "--month", "August")

    assert result.exit_code == 1


def test_report_json(seeded_url, tmp_path):
    output_dir = tmp_path / "reports"

    result = invoke(
        seeded_url, "report", "--format", "json", "--output", str(output_dir), "--today", "2025-07-01"
    )

    assert result.exit_code == 0, result.output
    assert "Report saved" in result.output
    files = list(output_dir.glob("schedule_*.json"))
    assert len(files) == 1
    data = json.loads(files[0].read_text())
    assert len(data["entries"]) == 6


def test_report_rejects_unknown_format(seeded_url, tmp_path):
    result = invoke(seeded_url, "report", "--format", "pdf", "--output", str(tmp_path))

    assert result.exit_code == 1


def test_delete_race_with_unknown_distance(db_url):
    """Rows with a category that no longer exists can still be removed."""
    session = database.init_database(db_url)
    session.add(
        database.RaceRecord(id="bad", title="Aquabike", date=date(2025, 7, 5), distance="ultra")
    )
    session.commit()
    session.close()

    result = invoke(db_url, "delete", "bad", "--yes")

    assert result.exit_code == 0, result.output
    assert "Deleted Aquabike" in result.output

    session = database.init_database(db_url)
    assert database.get_race_title(session, "bad") is None
    session.close()
