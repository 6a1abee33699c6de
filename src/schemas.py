"""
Pydantic models for triathlon race scheduling.

This module defines the core data structures for:
- Race distance categories and their recovery configuration
- Races as loaded from the persistence layer
- Recovery intervals and conflict verdicts derived from races
- Calendar day views and schedule reports
"""

import datetime as dt
from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ============================================================================
# Enumerations
# ============================================================================

class RaceDistance(str, Enum):
    """Standard triathlon distance categories."""
    SPRINT = "sprint"
    OLYMPIC = "olympic"
    MIDDLE = "middle"
    LONG = "long"


class RecoveryIntensity(str, Enum):
    """How demanding the recovery after a race is."""
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"


class ConflictSeverity(str, Enum):
    """Advisory level of a scheduling conflict. Never blocks saving."""
    NONE = "none"
    WARNING = "warning"
    ERROR = "error"


class RaceStatusType(str, Enum):
    """Where a race sits relative to a reference day."""
    UPCOMING = "upcoming"
    TODAY = "today"
    RECOVERY = "recovery"
    PAST = "past"


class InvalidCategory(ValueError):
    """Raised when a race carries a distance outside the known categories."""

    def __init__(self, distance):
        self.distance = distance
        super().__init__(
            f"Unknown race distance category: {distance!r}. "
            f"Expected one of: {', '.join(d.value for d in RaceDistance)}"
        )


# ============================================================================
# Recovery Configuration
# ============================================================================

class RecoveryConfig(BaseModel):
    """Static recovery guidance for one distance category."""

    model_config = ConfigDict(frozen=True)

    distance: RaceDistance = Field(
        ...,
        description="Distance category this configuration applies to"
    )

    label: str = Field(
        ...,
        description="Human-readable category name"
    )

    description: str = Field(
        ...,
        description="Swim/bike/run breakdown for the category"
    )

    min_days: int = Field(
        ...,
        ge=1,
        description="Shortest advisable recovery in days"
    )

    max_days: int = Field(
        ...,
        ge=1,
        description="Longest advisable recovery in days"
    )

    recommended_days: int = Field(
        ...,
        ge=2,
        description="Recovery length used to derive recovery intervals"
    )

    intensity: RecoveryIntensity = Field(
        ...,
        description="Recovery intensity label"
    )


RACE_DISTANCES: Mapping[RaceDistance, RecoveryConfig] = MappingProxyType({
    RaceDistance.SPRINT: RecoveryConfig(
        distance=RaceDistance.SPRINT,
        label="Sprint",
        description="750m swim, 20km bike, 5km run",
        min_days=2,
        max_days=4,
        recommended_days=3,
        intensity=RecoveryIntensity.LIGHT,
    ),
    RaceDistance.OLYMPIC: RecoveryConfig(
        distance=RaceDistance.OLYMPIC,
        label="Olympic",
        description="1.5km swim, 40km bike, 10km run",
        min_days=5,
        max_days=7,
        recommended_days=6,
        intensity=RecoveryIntensity.MODERATE,
    ),
    RaceDistance.MIDDLE: RecoveryConfig(
        distance=RaceDistance.MIDDLE,
        label="Middle Distance (70.3)",
        description="1.9km swim, 90km bike, 21.1km run",
        min_days=10,
        max_days=14,
        recommended_days=12,
        intensity=RecoveryIntensity.HEAVY,
    ),
    RaceDistance.LONG: RecoveryConfig(
        distance=RaceDistance.LONG,
        label="Long Distance (Ironman)",
        description="3.8km swim, 180km bike, 42.2km run",
        min_days=25,
        max_days=35,
        recommended_days=30,
        intensity=RecoveryIntensity.HEAVY,
    ),
})


# ============================================================================
# Race
# ============================================================================

class Race(BaseModel):
    """
    A scheduled triathlon race.

    Races are owned by the persistence layer and handed to the
    recovery/conflict functions as immutable values.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str = Field(
        ...,
        description="Opaque unique identifier"
    )

    title: str = Field(
        ...,
        min_length=1,
        description="Race name"
    )

    date: dt.date = Field(
        ...,
        description="Race day (plain calendar date)"
    )

    time: Optional[str] = Field(
        default=None,
        pattern=r"^([01]\d|2[0-3]):[0-5]\d$",
        description="Optional start time in HH:MM (24-hour)"
    )

    distance: RaceDistance = Field(
        ...,
        description="Distance category"
    )

    location: Optional[str] = Field(
        default=None,
        description="Optional race venue"
    )

    description: Optional[str] = Field(
        default=None,
        description="Optional free-text notes"
    )

    created_at: Optional[dt.datetime] = Field(
        default=None,
        description="Record creation timestamp"
    )

    updated_at: Optional[dt.datetime] = Field(
        default=None,
        description="Record last update timestamp"
    )

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Race title must not be blank")
        return v


# ============================================================================
# Derived Values
# ============================================================================

class RecoveryInterval(BaseModel):
    """Inclusive date range following a race during which racing is discouraged."""

    model_config = ConfigDict(frozen=True)

    race: Race = Field(
        ...,
        description="Race this recovery window belongs to"
    )

    start_date: dt.date = Field(
        ...,
        description="First recovery day (race day + 1)"
    )

    end_date: dt.date = Field(
        ...,
        description="Last recovery day (race day + recommended days)"
    )

    intensity: RecoveryIntensity = Field(
        ...,
        description="Recovery intensity label"
    )

    def contains(self, day: dt.date) -> bool:
        """True if *day* falls within [start_date, end_date] inclusive."""
        return self.start_date <= day <= self.end_date

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days + 1


class ConflictCandidate(BaseModel):
    """A date (optionally a race being created or edited) to check for conflicts."""

    date: dt.date = Field(
        ...,
        description="Proposed race date"
    )

    distance: Optional[RaceDistance] = Field(
        default=None,
        description="Distance of the proposed race, when known"
    )

    title: Optional[str] = Field(
        default=None,
        description="Title of the proposed race, when known"
    )


class ConflictVerdict(BaseModel):
    """
    Result of checking a candidate date against existing recovery windows.

    Only produced when at least one recovery window matches, so severity
    is always WARNING or ERROR.
    """

    candidate_date: dt.date = Field(
        ...,
        description="Date that was checked"
    )

    conflicts: List[RecoveryInterval] = Field(
        default_factory=list,
        description="Matching recovery windows, in existing-race order"
    )

    severity: ConflictSeverity = Field(
        ...,
        description="ERROR when any matching window is heavy, else WARNING"
    )

    message: str = Field(
        ...,
        description="Summary naming every conflicting race"
    )

    @property
    def conflicting_titles(self) -> List[str]:
        return [interval.race.title for interval in self.conflicts]


class CalendarDayView(BaseModel):
    """One cell of the six-week month grid."""

    date: dt.date = Field(
        ...,
        description="Calendar day"
    )

    is_current_month: bool = Field(
        ...,
        description="Whether the day belongs to the displayed month"
    )

    races: List[Race] = Field(
        default_factory=list,
        description="Races held on this day"
    )

    recovery_periods: List[RecoveryInterval] = Field(
        default_factory=list,
        description="Recovery windows covering this day"
    )

    has_conflict: bool = Field(
        default=False,
        description="Day has at least one race and at least one recovery window"
    )


class RaceStatus(BaseModel):
    """Status label for a race relative to a reference day."""

    type: RaceStatusType = Field(
        ...,
        description="Status classification"
    )

    text: str = Field(
        ...,
        description="Display text (e.g. 'In 3 days', 'Recovery: 2 days left')"
    )

    days: int = Field(
        ...,
        description="Day count behind the label (0 for today)"
    )


# ============================================================================
# Schedule Report
# ============================================================================

class ScheduleEntry(BaseModel):
    """One race with everything derived from it for reporting."""

    race: Race
    recovery: RecoveryInterval
    status: RaceStatus
    conflict: Optional[ConflictVerdict] = None


class ScheduleReport(BaseModel):
    """
    Snapshot of the whole race schedule.

    Documents every race, its recovery window, its status on the report
    day and any conflict with other races.
    """

    timestamp: dt.datetime = Field(
        default_factory=dt.datetime.now,
        description="When this report was generated"
    )

    as_of: dt.date = Field(
        ...,
        description="Reference day used for status labels"
    )

    entries: List[ScheduleEntry] = Field(
        default_factory=list,
        description="Races in chronological order"
    )

    @property
    def conflict_count(self) -> int:
        return sum(1 for e in self.entries if e.conflict is not None)


# ============================================================================
# Race Payloads
# ============================================================================

def _migrate_legacy_type(data):
    """Older clients sent the category as ``type``; map it onto ``distance``."""
    if isinstance(data, dict) and "type" in data:
        data = dict(data)
        legacy = data.pop("type")
        data.setdefault("distance", legacy)
    return data


def _blank_to_none(v):
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


class RaceCreate(BaseModel):
    """Fields supplied when creating a race."""

    title: str = Field(..., min_length=1, description="Race name")
    date: dt.date = Field(..., description="Race day (YYYY-MM-DD)")
    time: Optional[str] = Field(
        default=None,
        pattern=r"^([01]\d|2[0-3]):[0-5]\d$",
        description="Optional start time in HH:MM (24-hour)"
    )
    distance: RaceDistance = Field(..., description="Distance category")
    location: Optional[str] = Field(default=None, description="Optional race venue")
    description: Optional[str] = Field(default=None, description="Optional notes")

    @model_validator(mode="before")
    @classmethod
    def migrate_legacy_type(cls, data):
        return _migrate_legacy_type(data)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Race title must not be blank")
        return v

    @field_validator("time", "location", "description", mode="before")
    @classmethod
    def empty_strings_are_none(cls, v):
        return _blank_to_none(v)


class RaceUpdate(BaseModel):
    """
    Fields supplied when updating a race.

    Only fields present in the payload are changed.
    """

    title: Optional[str] = Field(default=None, min_length=1)
    date: Optional[dt.date] = None
    time: Optional[str] = Field(default=None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    distance: Optional[RaceDistance] = None
    location: Optional[str] = None
    description: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def migrate_legacy_type(cls, data):
        return _migrate_legacy_type(data)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Race title must not be blank")
        return v

    @field_validator("time", "location", "description", mode="before")
    @classmethod
    def empty_strings_are_none(cls, v):
        return _blank_to_none(v)

    @model_validator(mode="after")
    def required_fields_not_null(self):
        for name in ("title", "date", "distance"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"'{name}' cannot be cleared")
        return self
