"""
Schedule API Routes

Endpoints for recovery configuration, conflict checks and the month
calendar view.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from src import database
from src.api.models.requests import ConflictCheckRequest
from src.api.models.responses import (
    CalendarMonthResponse,
    ConflictCheckResponse,
    DistancesResponse,
    ErrorResponse,
    ScheduleConflict,
    ScheduleConflictsResponse,
)
from src.calendar_view import build_month_view, parse_month
from src.conflicts import detect_conflict, find_schedule_conflicts
from src.database import get_db_session
from src.schemas import RACE_DISTANCES

router = APIRouter()


@router.get("/distances", response_model=DistancesResponse)
async def list_distances() -> DistancesResponse:
    """
    List the distance categories with their recovery guidance.

    Returns:
        DistancesResponse with min/max/recommended recovery days and intensity
    """
    distances = list(RACE_DISTANCES.values())
    return DistancesResponse(distances=distances, count=len(distances))


@router.post("/conflicts/check", response_model=ConflictCheckResponse)
def check_conflict(
    request: ConflictCheckRequest, db: Session = Depends(get_db_session)
) -> ConflictCheckResponse:
    """
    Check whether a proposed race date falls inside a recovery period.

    The result is advisory. When editing, pass ``exclude_race_id`` so the
    race's current version is left out of the check.

    Args:
        request: Proposed date, optional distance/title, optional race to exclude

    Returns:
        ConflictCheckResponse with severity none, warning or error
    """
    existing = [
        race for race in database.list_races(db) if race.id != request.exclude_race_id
    ]
    verdict = detect_conflict(request.to_candidate(), existing)
    return ConflictCheckResponse.from_verdict(verdict)


@router.get("/conflicts", response_model=ScheduleConflictsResponse)
def list_schedule_conflicts(db: Session = Depends(get_db_session)) -> ScheduleConflictsResponse:
    """
    List every race that falls inside another race's recovery period.

    Returns:
        ScheduleConflictsResponse in schedule order
    """
    races = database.list_races(db)
    by_id = {race.id: race for race in races}
    conflicts = [
        ScheduleConflict(race=by_id[race_id], verdict=verdict)
        for race_id, verdict in find_schedule_conflicts(races).items()
    ]
    return ScheduleConflictsResponse(conflicts=conflicts, count=len(conflicts))


@router.get(
    "/calendar",
    response_model=CalendarMonthResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid month"}},
)
def get_calendar_month(
    month: Optional[str] = Query(None, description="Month to display (YYYY-MM); defaults to the current month"),
    db: Session = Depends(get_db_session),
) -> CalendarMonthResponse:
    """
    Six-week calendar grid for a month, annotated with races and recovery periods.

    Raises:
        HTTPException: 400 if month is not YYYY-MM
    """
    try:
        anchor = parse_month(month)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    days = build_month_view(anchor, database.list_races(db))
    return CalendarMonthResponse(year=anchor.year, month=anchor.month, days=days)
