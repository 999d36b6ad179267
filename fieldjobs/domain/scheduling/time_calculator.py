"""Time window arithmetic shared by the availability, conflict and suggestion engines"""

from datetime import datetime, timedelta
from typing import Optional, Tuple

from dateutil.relativedelta import relativedelta

Window = Tuple[datetime, datetime]

CADENCE_STEPS = {
    "weekly": relativedelta(days=7),
    "biweekly": relativedelta(days=14),
    "monthly": relativedelta(months=1),
    "quarterly": relativedelta(months=3),
}


def windows_overlap(start1: datetime, end1: datetime, start2: datetime, end2: datetime) -> bool:
    """Half-open windows [start1, end1) and [start2, end2) overlap."""
    return start1 < end2 and start2 < end1


def window_for(start: datetime, duration_minutes: int) -> Window:
    return start, start + timedelta(minutes=duration_minutes)


def commitment_window(job) -> Optional[Window]:
    """
    The window a job occupies for its resources.

    A job without a scheduled date or an estimated duration is not a commitment.
    """
    if job.scheduled_date is None or job.estimated_duration is None:
        return None
    return window_for(job.scheduled_date, job.estimated_duration)


def advance_by_cadence(current: datetime, cadence: str) -> datetime:
    """Next occurrence date. Month steps clamp to the last day of shorter months."""
    return current + CADENCE_STEPS[cadence]


def is_weekend(value: datetime) -> bool:
    return value.weekday() >= 5


def day_distance(a: datetime, b: datetime) -> float:
    """Absolute distance in fractional days."""
    return abs((a - b).total_seconds()) / 86400
