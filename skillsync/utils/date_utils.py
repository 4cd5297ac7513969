"""Date utilities for consistent week numbering across SkillSync Brain."""

from datetime import date, datetime, timezone
from typing import Callable, Tuple, Union

Clock = Callable[[], datetime]

TRENDING_WINDOW_WEEKS = 4


def utc_now() -> datetime:
    """Get the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _utc_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def iso_week(value: Union[date, datetime]) -> Tuple[int, int]:
    """Get the ISO-8601 (year, week) of a date.

    The year is the ISO year, so December 29-31 may belong to week 1 of the
    following year and January 1-3 to week 52/53 of the previous one.

    Args:
        value: A date or datetime; aware datetimes are converted to UTC first.

    Returns:
        Tuple of (iso_year, iso_week)
    """
    iso_year, week, _ = _utc_date(value).isocalendar()
    return iso_year, week


def trending_window(value: Union[date, datetime]) -> Tuple[int, int, int]:
    """Get the trending window ending at the week of ``value``.

    Returns:
        Tuple of (iso_year, first_week, last_week). The first week is clamped
        at 1, so the window never reaches back into the previous ISO year.
    """
    iso_year, week = iso_week(value)
    return iso_year, max(1, week - (TRENDING_WINDOW_WEEKS - 1)), week


def epoch_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)
