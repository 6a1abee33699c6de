"""
API Response Models

Pydantic models for API responses.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from src.schemas import (
    CalendarDayView,
    ConflictSeverity,
    ConflictVerdict,
    Race,
    RecoveryConfig,
)


class RaceSaveResponse(BaseModel):
    """Response for POST /api/races and PUT /api/races/{race_id}."""

    race: Race = Field(..., description="The stored race")
    conflict: Optional[ConflictVerdict] = Field(
        None,
        description="Advisory conflict with other races' recovery periods (race is saved regardless)",
    )


class DeleteResponse(BaseModel):
    """Response for DELETE /api/races/{race_id}."""

    message: str = Field(..., description="Confirmation message")


class DistancesResponse(BaseModel):
    """Response for GET /api/distances."""

    distances: List[RecoveryConfig] = Field(
        ..., description="Recovery configuration per distance category"
    )
    count: int = Field(..., description="Number of distance categories")


class ConflictCheckResponse(BaseModel):
    """Response for POST /api/conflicts/check."""

    has_conflict: bool = Field(..., description="Whether the date hits a recovery period")
    severity: ConflictSeverity = Field(..., description="none, warning or error")
    message: Optional[str] = Field(None, description="Conflict summary")
    verdict: Optional[ConflictVerdict] = Field(None, description="Full conflict verdict")

    @classmethod
    def from_verdict(cls, verdict: Optional[ConflictVerdict]) -> "ConflictCheckResponse":
        if verdict is None:
            return cls(has_conflict=False, severity=ConflictSeverity.NONE)
        return cls(
            has_conflict=True,
            severity=verdict.severity,
            message=verdict.message,
            verdict=verdict,
        )


class ScheduleConflict(BaseModel):
    """One race that falls inside another race's recovery period."""

    race: Race = Field(..., description="The conflicting race")
    verdict: ConflictVerdict = Field(..., description="Conflict verdict for the race")


class ScheduleConflictsResponse(BaseModel):
    """Response for GET /api/conflicts."""

    conflicts: List[ScheduleConflict] = Field(..., description="Races with conflicts")
    count: int = Field(..., description="Number of conflicting races")


class CalendarMonthResponse(BaseModel):
    """Response for GET /api/calendar."""

    year: int = Field(..., description="Displayed year")
    month: int = Field(..., description="Displayed month (1-12)")
    days: List[CalendarDayView] = Field(..., description="Six-week grid, Monday first")


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional details")
