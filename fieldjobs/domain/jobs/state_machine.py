"""
Job status state machine.

Statuses: pending → scheduled → in_progress → completed
          on_hold pauses in_progress work, cancelled is reachable from every live status.
completed and cancelled are terminal.

The lifecycle helpers below mutate a Job in memory only; persisting the change is the
caller's job.
"""

from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Optional

from .exceptions import AlreadyTerminal, InvalidState, InvalidTransition, NotDeletable


class JobStatus(str, Enum):
    PENDING = "pending"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses that occupy a resource's time window
OCCUPYING_STATUSES = frozenset({JobStatus.SCHEDULED.value, JobStatus.IN_PROGRESS.value})

TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED.value, JobStatus.CANCELLED.value})

VALID_TRANSITIONS = MappingProxyType(
    {
        JobStatus.PENDING.value: frozenset(
            {JobStatus.SCHEDULED.value, JobStatus.IN_PROGRESS.value, JobStatus.CANCELLED.value}
        ),
        JobStatus.SCHEDULED.value: frozenset(
            {JobStatus.IN_PROGRESS.value, JobStatus.PENDING.value, JobStatus.CANCELLED.value}
        ),
        JobStatus.IN_PROGRESS.value: frozenset(
            {JobStatus.COMPLETED.value, JobStatus.ON_HOLD.value, JobStatus.CANCELLED.value}
        ),
        JobStatus.ON_HOLD.value: frozenset({JobStatus.IN_PROGRESS.value, JobStatus.CANCELLED.value}),
        JobStatus.COMPLETED.value: frozenset(),
        JobStatus.CANCELLED.value: frozenset(),
    }
)

# Only these may be started; a stricter subset of the edges into in_progress
STARTABLE_STATUSES = frozenset({JobStatus.PENDING.value, JobStatus.SCHEDULED.value})

DELETED_NOTE = "Job deleted by user"


def _value(status) -> str:
    return status.value if isinstance(status, JobStatus) else status


def is_valid_transition(current, requested) -> bool:
    return _value(requested) in VALID_TRANSITIONS.get(_value(current), frozenset())


def validate_transition(current, requested) -> None:
    """
    Validate a status change.

    Raises:
        InvalidTransition: if ``requested`` is not a legal edge from ``current``
    """
    current, requested = _value(current), _value(requested)
    if current not in VALID_TRANSITIONS:
        raise InvalidTransition(current, requested, f"invalid current status: {current}")
    if requested not in VALID_TRANSITIONS[current]:
        raise InvalidTransition(current, requested)


def change_status(job, requested, timestamp: datetime):
    """
    Apply a validated status change. Entering in_progress without a recorded start stamps
    ``timestamp`` as the start so a later completion always has one.
    """
    validate_transition(job.status, requested)
    job.status = _value(requested)
    if job.status == JobStatus.IN_PROGRESS.value and job.actual_start_time is None:
        job.actual_start_time = timestamp
    return job


def append_note(existing: Optional[str], note: str) -> str:
    """Notes are append-only; entries are separated by a blank line."""
    if existing:
        return f"{existing}\n\n{note}"
    return note


def _gps_stamp(location, timestamp: datetime) -> dict:
    return {
        "latitude": location.latitude,
        "longitude": location.longitude,
        "address": location.address,
        "timestamp": timestamp.isoformat(),
    }


def start_job(job, start_time: datetime, gps_location=None, notes: Optional[str] = None):
    """Move a pending or scheduled job to in_progress and record the check-in."""
    if job.status not in STARTABLE_STATUSES:
        raise InvalidState("job must be in scheduled or pending status to start")

    job.status = JobStatus.IN_PROGRESS.value
    job.actual_start_time = start_time
    if gps_location is not None:
        job.gps_check_in = _gps_stamp(gps_location, start_time)
    if notes:
        job.notes = append_note(job.notes, f"Job started: {notes}")
    return job


def complete_job(
    job,
    end_time: datetime,
    gps_location=None,
    completion_notes: Optional[str] = None,
    photos: Optional[list[str]] = None,
):
    """Move an in_progress job to completed. Photo references accumulate."""
    if job.status != JobStatus.IN_PROGRESS.value:
        raise InvalidState("job must be in progress to complete")
    if job.actual_start_time is None:
        raise InvalidState("job has no recorded start time")
    if end_time < job.actual_start_time:
        raise InvalidState("job cannot end before it started")

    job.status = JobStatus.COMPLETED.value
    job.actual_end_time = end_time
    if gps_location is not None:
        job.gps_check_out = _gps_stamp(gps_location, end_time)
    if photos:
        # Reassign so SQLAlchemy notices the JSON change
        job.completion_photos = list(job.completion_photos or []) + list(photos)
    if completion_notes:
        job.notes = append_note(job.notes, f"Job completed: {completion_notes}")
    return job


def cancel_job(job, reason: str):
    """Cancel from any live status; the reason is appended to the notes."""
    if job.status in TERMINAL_STATUSES:
        raise AlreadyTerminal(job.status)

    job.status = JobStatus.CANCELLED.value
    job.notes = append_note(job.notes, f"Job cancelled: {reason}")
    return job


def soft_delete_job(job):
    """Jobs are never removed; deleting a pending job cancels it."""
    if job.status != JobStatus.PENDING.value:
        raise NotDeletable(job.status)

    job.status = JobStatus.CANCELLED.value
    job.notes = append_note(job.notes, DELETED_NOTE)
    return job
