from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

DateLike = Union[date, datetime, str]


class TripStatus(str, Enum):
    upcoming = "upcoming"
    ongoing = "ongoing"
    completed = "completed"


def to_date(value: DateLike) -> date:
    """Normalize a date, datetime or ISO string (``YYYY-MM-DD...``) to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def compute_status(start: DateLike, end: DateLike, today: Optional[DateLike] = None) -> TripStatus:
    """Status is derived, never stored: compare today with the trip's calendar days."""
    now = to_date(today) if today is not None else date.today()
    if now < to_date(start):
        return TripStatus.upcoming
    if now > to_date(end):
        return TripStatus.completed
    return TripStatus.ongoing
