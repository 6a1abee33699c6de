"""
Recovery period derivation.

Maps a race's distance category to its post-race recovery window and
classifies races relative to a reference day. Every function here is
pure: the result depends only on the arguments.
"""

from datetime import date, timedelta
from typing import Iterable, List, Union

from src.formatting import pluralize_days
from src.schemas import (
    RACE_DISTANCES,
    InvalidCategory,
    Race,
    RaceDistance,
    RaceStatus,
    RaceStatusType,
    RecoveryConfig,
    RecoveryIntensity,
    RecoveryInterval,
)


def get_recovery_config(distance: Union[RaceDistance, str]) -> RecoveryConfig:
    """
    Look up the recovery configuration for a distance category.

    Args:
        distance: A RaceDistance or its string value

    Returns:
        RecoveryConfig for the category

    Raises:
        InvalidCategory: If distance is not one of the four categories
    """
    try:
        category = RaceDistance(distance)
    except ValueError:
        raise InvalidCategory(distance) from None
    return RACE_DISTANCES[category]


def recommended_days(distance: Union[RaceDistance, str]) -> int:
    """Recommended recovery length in days for a distance category."""
    return get_recovery_config(distance).recommended_days


def intensity_for(distance: Union[RaceDistance, str]) -> RecoveryIntensity:
    """Recovery intensity label for a distance category."""
    return get_recovery_config(distance).intensity


def derive_recovery(race: Race) -> RecoveryInterval:
    """
    Derive the recovery window that follows a race.

    The window starts the day after the race and ends after the
    category's recommended number of days (inclusive).

    Args:
        race: The race to derive recovery for

    Returns:
        RecoveryInterval owned by the race

    Raises:
        InvalidCategory: If the race carries an unknown distance
    """
    config = get_recovery_config(race.distance)
    return RecoveryInterval(
        race=race,
        start_date=race.date + timedelta(days=1),
        end_date=race.date + timedelta(days=config.recommended_days),
        intensity=config.intensity,
    )


def derive_recovery_periods(races: Iterable[Race]) -> List[RecoveryInterval]:
    """Derive one recovery window per race, preserving input order."""
    return [derive_recovery(race) for race in races]


def race_status(race: Race, today: date) -> RaceStatus:
    """
    Classify a race relative to *today*.

    Future races count down, races held today are flagged, past races
    still inside their recovery window report the days left, and older
    races report how long ago they were.

    Args:
        race: The race to classify
        today: Reference day (callers pass the current date)

    Returns:
        RaceStatus with type, display text and the day count behind it
    """
    days_until = (race.date - today).days

    if days_until > 0:
        return RaceStatus(
            type=RaceStatusType.UPCOMING,
            text=f"In {pluralize_days(days_until)}",
            days=days_until,
        )

    if days_until == 0:
        return RaceStatus(type=RaceStatusType.TODAY, text="Today", days=0)

    recovery_days_left = (derive_recovery(race).end_date - today).days
    if recovery_days_left > 0:
        return RaceStatus(
            type=RaceStatusType.RECOVERY,
            text=f"Recovery: {pluralize_days(recovery_days_left)} left",
            days=recovery_days_left,
        )

    return RaceStatus(
        type=RaceStatusType.PAST,
        text=f"{pluralize_days(-days_until)} ago",
        days=-days_until,
    )
