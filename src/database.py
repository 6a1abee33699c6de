"""
SQLAlchemy Database Models for the Triathlon Race Scheduler

Provides persistent storage for races plus the queries the API and CLI
need:
- Race CRUD
- Date-range, search, distance filter and sort queries
- Sample season seeding

Rows leave this module as immutable ``Race`` values.
"""

import logging
import uuid
from datetime import date, datetime, timezone
from functools import lru_cache
from typing import List, Optional

from sqlalchemy import Column, Date, DateTime, String, case, create_engine, func, or_
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from src.config import get_settings
from src.schemas import InvalidCategory, Race, RaceCreate, RaceDistance, RaceUpdate

logger = logging.getLogger(__name__)

Base = declarative_base()

SORT_FIELDS = ("date", "title", "distance", "location")
DISTANCE_SORT_ORDER = {distance.value: rank for rank, distance in enumerate(RaceDistance, 1)}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class RaceRecord(Base):
    """
    A stored race.

    Attributes:
        id: UUID primary key (text)
        title: Race name
        date: Race day
        time: Optional start time, HH:MM 24-hour
        distance: Distance category value ('sprint', 'olympic', 'middle', 'long')
        description: Optional notes
        location: Optional venue
        created_at: When the race was created
        updated_at: When the race was last changed
    """

    __tablename__ = "races"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String, nullable=False)
    date = Column(Date, nullable=False, index=True)
    time = Column(String, nullable=True)
    distance = Column(String, nullable=False)
    description = Column(String, nullable=True)
    location = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, nullable=False)

    def __repr__(self):
        return f"<RaceRecord(id='{self.id}', title='{self.title}', date='{self.date}', distance='{self.distance}')>"


def record_to_race(record: RaceRecord) -> Race:
    """
    Convert a stored row into an immutable Race.

    Raises:
        InvalidCategory: If the row's distance is not a known category
    """
    if record.distance not in DISTANCE_SORT_ORDER:
        raise InvalidCategory(record.distance)
    return Race.model_validate(record)


# Database connection and session management

def get_engine(database_url: str = "sqlite:///triathlon_races.db"):
    """
    Create SQLAlchemy engine.

    In-memory SQLite URLs share one connection so every session sees the
    same database.

    Args:
        database_url: Database connection string (default: SQLite file)

    Returns:
        SQLAlchemy Engine instance
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=False, **kwargs)
    return create_engine(database_url, echo=False)


def get_session_factory(engine):
    """
    Create session factory.

    Args:
        engine: SQLAlchemy Engine instance

    Returns:
        Session factory (sessionmaker)
    """
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


def init_database(database_url: str = "sqlite:///triathlon_races.db") -> Session:
    """
    Initialize database and create all tables.

    Args:
        database_url: Database connection string

    Returns:
        SQLAlchemy Session instance
    """
    engine = get_engine(database_url)
    Base.metadata.create_all(engine)
    SessionFactory = get_session_factory(engine)
    return SessionFactory()


@lru_cache
def _default_session_factory():
    settings = get_settings()
    engine = get_engine(settings.database_url)
    Base.metadata.create_all(engine)
    logger.info("Database ready: %s", settings.database_url)
    return get_session_factory(engine)


def get_db_session():
    """
    Dependency for FastAPI to get database session.

    Yields:
        SQLAlchemy Session instance

    Usage:
        @app.get("/endpoint")
        def endpoint(db: Session = Depends(get_db_session)):
            ...
    """
    db = _default_session_factory()()
    try:
        yield db
    finally:
        db.close()


# Queries

def _order_by(sort_field: str, direction: str):
    if sort_field not in SORT_FIELDS:
        raise ValueError(f"Unknown sort field '{sort_field}'. Available: {list(SORT_FIELDS)}")
    if direction not in ("asc", "desc"):
        raise ValueError(f"Unknown sort direction '{direction}'. Use 'asc' or 'desc'")

    if sort_field == "date":
        columns = [RaceRecord.date, RaceRecord.time]
    elif sort_field == "title":
        columns = [func.lower(RaceRecord.title)]
    elif sort_field == "distance":
        columns = [
            case(DISTANCE_SORT_ORDER, value=RaceRecord.distance, else_=len(DISTANCE_SORT_ORDER) + 1),
            RaceRecord.date,
        ]
    else:
        columns = [func.lower(func.coalesce(RaceRecord.location, "")), RaceRecord.date]

    if direction == "desc":
        return [column.desc() for column in columns]
    return columns


def list_races(
    session: Session,
    search: Optional[str] = None,
    distance: Optional[RaceDistance] = None,
    sort_field: str = "date",
    direction: str = "asc",
) -> List[Race]:
    """
    List races with optional search, distance filter and sorting.

    Args:
        session: Database session
        search: Case-insensitive text matched against title, location and description
        distance: Only return races of this category
        sort_field: One of 'date', 'title', 'distance', 'location'
        direction: 'asc' or 'desc'

    Returns:
        Matching races

    Raises:
        ValueError: If sort_field or direction is unknown
    """
    query = session.query(RaceRecord)

    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(
                RaceRecord.title.ilike(pattern),
                RaceRecord.location.ilike(pattern),
                RaceRecord.description.ilike(pattern),
            )
        )

    if distance is not None:
        query = query.filter(RaceRecord.distance == RaceDistance(distance).value)

    query = query.order_by(*_order_by(sort_field, direction))
    return [record_to_race(record) for record in query.all()]


def list_races_in_range(session: Session, start: date, end: date) -> List[Race]:
    """Races dated within [start, end] inclusive, ordered by date and time."""
    query = (
        session.query(RaceRecord)
        .filter(RaceRecord.date >= start, RaceRecord.date <= end)
        .order_by(RaceRecord.date, RaceRecord.time)
    )
    return [record_to_race(record) for record in query.all()]


def get_race(session: Session, race_id: str) -> Optional[Race]:
    """Fetch one race by id, or None."""
    record = session.get(RaceRecord, race_id)
    return record_to_race(record) if record is not None else None


def get_race_title(session: Session, race_id: str) -> Optional[str]:
    """Title of a stored race, or None. Reads the row without validating its distance."""
    record = session.get(RaceRecord, race_id)
    return record.title if record is not None else None


def create_race(session: Session, data: RaceCreate) -> Race:
    """
    Insert a new race.

    Args:
        session: Database session
        data: Validated race fields

    Returns:
        The stored race with generated id and timestamps
    """
    now = _utcnow()
    record = RaceRecord(
        id=str(uuid.uuid4()),
        title=data.title,
        date=data.date,
        time=data.time,
        distance=data.distance.value,
        description=data.description,
        location=data.location,
        created_at=now,
        updated_at=now,
    )
    session.add(record)
    session.commit()
    session.refresh(record)

    logger.info("Created race %s '%s' on %s (%s)", record.id, record.title, record.date, record.distance)
    return record_to_race(record)


def update_race(session: Session, race_id: str, data: RaceUpdate) -> Optional[Race]:
    """
    Apply a partial update to a race.

    Args:
        session: Database session
        race_id: Race to change
        data: Fields to change (only fields present in the payload are applied)

    Returns:
        The updated race, or None if no race has this id
    """
    record = session.get(RaceRecord, race_id)
    if record is None:
        return None

    changes = data.model_dump(exclude_unset=True)
    for field_name, value in changes.items():
        if field_name == "distance":
            value = RaceDistance(value).value
        setattr(record, field_name, value)
    record.updated_at = _utcnow()

    session.commit()
    session.refresh(record)

    logger.info("Updated race %s (%s)", race_id, ", ".join(sorted(changes)) or "no fields")
    return record_to_race(record)


def delete_race(session: Session, race_id: str) -> bool:
    """Delete a race. Returns False if no race has this id."""
    record = session.get(RaceRecord, race_id)
    if record is None:
        return False

    session.delete(record)
    session.commit()

    logger.info("Deleted race %s '%s'", race_id, record.title)
    return True


# Sample data

SAMPLE_RACES = [
    {
        "title": "Spring Sprint Triathlon",
        "date": "2025-07-05",
        "time": "08:00",
        "distance": "sprint",
        "description": "Season opener - 750m swim, 20km bike, 5km run",
        "location": "City Beach",
    },
    {
        "title": "Olympic Distance Championship",
        "date": "2025-07-20",
        "time": "07:00",
        "distance": "olympic",
        "description": "Regional championship - 1.5km swim, 40km bike, 10km run",
        "location": "Lake Park",
    },
    {
        "title": "Mid-Season Sprint",
        "date": "2025-08-02",
        "time": "08:30",
        "distance": "sprint",
        "description": "Fast and fun sprint race",
        "location": "River Course",
    },
    {
        "title": "Half Ironman 70.3",
        "date": "2025-08-24",
        "time": "06:30",
        "distance": "middle",
        "description": "Challenge yourself - 1.9km swim, 90km bike, 21.1km run",
        "location": "Mountain Resort",
    },
    {
        "title": "Late Season Olympic",
        "date": "2025-09-15",
        "time": "07:30",
        "distance": "olympic",
        "description": "Perfect weather for a fast race",
        "location": "Coastal Course",
    },
    {
        "title": "Ironman Full Distance",
        "date": "2025-10-12",
        "time": "06:00",
        "distance": "long",
        "description": "The ultimate challenge - 3.8km swim, 180km bike, 42.2km run",
        "location": "Ironman Village",
    },
]


def seed_sample_races(session: Session, replace: bool = True) -> List[Race]:
    """
    Load the sample race season.

    Args:
        session: Database session
        replace: Delete all existing races first

    Returns:
        The inserted races, in date order
    """
    if replace:
        removed = session.query(RaceRecord).delete()
        session.commit()
        if removed:
            logger.info("Cleared %d existing race(s)", removed)

    races = [create_race(session, RaceCreate(**payload)) for payload in SAMPLE_RACES]
    return sorted(races, key=lambda r: (r.date, r.time or ""))
