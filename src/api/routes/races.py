"""
Races API Routes

Endpoints for race CRUD, date-range queries, recovery windows and
status labels.
"""

import logging
from datetime import date
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from src import database
from src.api.models.requests import RaceCreate, RaceUpdate
from src.api.models.responses import DeleteResponse, ErrorResponse, RaceSaveResponse
from src.conflicts import detect_conflict
from src.database import get_db_session
from src.recovery import derive_recovery, race_status
from src.schemas import Race, RaceDistance, RaceStatus, RecoveryInterval

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Race not found"}}


def _get_race_or_404(db: Session, race_id: str) -> Race:
    race = database.get_race(db, race_id)
    if race is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Race '{race_id}' not found",
        )
    return race


def _advisory_conflict(db: Session, race: Race):
    """Check a saved race against every other race. Never blocks the save."""
    others = [r for r in database.list_races(db) if r.id != race.id]
    verdict = detect_conflict(race, others)
    if verdict is not None:
        logger.info(
            "Race %s saved inside a recovery period (%s): %s",
            race.id,
            verdict.severity.value,
            verdict.message,
        )
    return verdict


@router.get("/races", response_model=List[Race])
def list_races(
    search: Optional[str] = Query(None, description="Text matched against title, location and description"),
    distance: Optional[RaceDistance] = Query(None, description="Only races of this distance"),
    sort: Literal["date", "title", "distance", "location"] = Query("date", description="Sort field"),
    direction: Literal["asc", "desc"] = Query("asc", description="Sort direction"),
    db: Session = Depends(get_db_session),
) -> List[Race]:
    """
    List races.

    Args:
        search: Case-insensitive text filter
        distance: Distance category filter
        sort: Sort field (date, title, distance, location)
        direction: asc or desc

    Returns:
        Matching races
    """
    return database.list_races(
        db, search=search, distance=distance, sort_field=sort, direction=direction
    )


@router.get(
    "/races/range",
    response_model=List[Race],
    responses={400: {"model": ErrorResponse, "description": "End date before start date"}},
)
def list_races_in_range(
    start: date = Query(..., description="First day (YYYY-MM-DD)"),
    end: date = Query(..., description="Last day (YYYY-MM-DD)"),
    db: Session = Depends(get_db_session),
) -> List[Race]:
    """
    List races dated within [start, end] inclusive.

    Raises:
        HTTPException: 400 if end is before start
    """
    if end < start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="End date must be on or after start date",
        )
    return database.list_races_in_range(db, start, end)


@router.get("/races/{race_id}", response_model=Race, responses=NOT_FOUND)
def get_race(race_id: str, db: Session = Depends(get_db_session)) -> Race:
    """Get one race by id."""
    return _get_race_or_404(db, race_id)


@router.post("/races", response_model=RaceSaveResponse, status_code=status.HTTP_201_CREATED)
def create_race(payload: RaceCreate, db: Session = Depends(get_db_session)) -> RaceSaveResponse:
    """
    Create a race.

    The race is always saved. If it falls inside another race's recovery
    period the response carries the conflict verdict so the client can
    warn the athlete.

    Args:
        payload: Race fields (legacy 'type' is accepted in place of 'distance')

    Returns:
        RaceSaveResponse with the stored race and any advisory conflict
    """
    race = database.create_race(db, payload)
    return RaceSaveResponse(race=race, conflict=_advisory_conflict(db, race))


@router.put("/races/{race_id}", response_model=RaceSaveResponse, responses=NOT_FOUND)
def update_race(
    race_id: str, payload: RaceUpdate, db: Session = Depends(get_db_session)
) -> RaceSaveResponse:
    """
    Update a race.

    Only the fields present in the payload change. The race's own
    previous version is never counted as a conflict.

    Raises:
        HTTPException: 404 if the race does not exist
    """
    race = database.update_race(db, race_id, payload)
    if race is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Race '{race_id}' not found",
        )
    return RaceSaveResponse(race=race, conflict=_advisory_conflict(db, race))


@router.delete("/races/{race_id}", response_model=DeleteResponse, responses=NOT_FOUND)
def delete_race(race_id: str, db: Session = Depends(get_db_session)) -> DeleteResponse:
    """
    Delete a race.

    Raises:
        HTTPException: 404 if the race does not exist
    """
    if not database.delete_race(db, race_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Race '{race_id}' not found",
        )
    return DeleteResponse(message="Race deleted successfully")


@router.get("/races/{race_id}/recovery", response_model=RecoveryInterval, responses=NOT_FOUND)
def get_race_recovery(race_id: str, db: Session = Depends(get_db_session)) -> RecoveryInterval:
    """Recovery window that follows a race."""
    return derive_recovery(_get_race_or_404(db, race_id))


@router.get("/races/{race_id}/status", response_model=RaceStatus, responses=NOT_FOUND)
def get_race_status(
    race_id: str,
    today: Optional[date] = Query(None, description="Reference day (defaults to the server's today)"),
    db: Session = Depends(get_db_session),
) -> RaceStatus:
    """Upcoming / today / recovery / past label for a race."""
    race = _get_race_or_404(db, race_id)
    return race_status(race, today or date.today())
