"""
API Request Models

Pydantic models for API request validation.
"""

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field

from src.schemas import ConflictCandidate, RaceCreate, RaceDistance, RaceUpdate

__all__ = ["ConflictCheckRequest", "RaceCreate", "RaceUpdate"]


class ConflictCheckRequest(BaseModel):
    """Request model for checking a proposed race date."""

    date: dt.date = Field(..., description="Proposed race date (YYYY-MM-DD)")
    distance: Optional[RaceDistance] = Field(
        None, description="Distance of the proposed race, when known"
    )
    title: Optional[str] = Field(None, description="Title of the proposed race")
    exclude_race_id: Optional[str] = Field(
        None,
        description="Race being edited; its current version is left out of the check",
    )

    def to_candidate(self) -> ConflictCandidate:
        return ConflictCandidate(date=self.date, distance=self.distance, title=self.title)
