"""
Resource availability and conflict detection.

Both engines work over commitments already fetched by the caller: jobs bound to one
resource (a user, a crew or an equipment item). Only jobs in an occupying status with a
scheduled date and an estimated duration count as commitments.
"""

from datetime import datetime
from typing import Iterable, Optional

from ..jobs.state_machine import OCCUPYING_STATUSES
from .schemas import ResourceType, SchedulingConflict, TimeRange
from .time_calculator import commitment_window, window_for, windows_overlap

CONFLICT_SEVERITY = "high"

_RESOURCE_LABELS = {
    "user": "User is already assigned to",
    "crew": "Crew is already assigned to",
    "equipment": "Equipment is already reserved for",
}


def _occupying_windows(commitments: Iterable, exclude_job_id=None):
    for job in commitments:
        if exclude_job_id is not None and job.id == exclude_job_id:
            continue
        if job.status not in OCCUPYING_STATUSES:
            continue
        window = commitment_window(job)
        if window is None:
            continue
        yield job, window


class ConflictDetector:
    """Lists the commitments of a resource that overlap a proposed placement"""

    def check_conflicts(
        self,
        job_id,
        resource_id,
        proposed_start: datetime,
        duration_minutes: int,
        existing_commitments: Iterable,
        resource_type: ResourceType = "user",
    ) -> list[SchedulingConflict]:
        """
        Args:
            job_id: Job being placed; never reported against itself
            resource_id: User, crew or equipment id the commitments belong to
            proposed_start: Start of the proposed placement
            duration_minutes: Length of the proposed placement
            existing_commitments: Jobs currently bound to ``resource_id``
            resource_type: Label used in the conflict type and message

        Returns:
            One high-severity conflict per overlapping commitment, in input order
        """
        start, end = window_for(proposed_start, duration_minutes)
        conflicts = []

        for job, (job_start, job_end) in _occupying_windows(existing_commitments, job_id):
            if not windows_overlap(start, end, job_start, job_end):
                continue
            conflicts.append(
                SchedulingConflict(
                    type=f"{resource_type}_conflict",
                    conflicting_job_id=job.id,
                    conflicting_job_title=job.title,
                    conflict_time=TimeRange(start=job_start, end=job_end),
                    severity=CONFLICT_SEVERITY,
                    message=f"{_RESOURCE_LABELS[resource_type]} job '{job.title}' during this time",
                )
            )

        return conflicts


class AvailabilityChecker:
    """Boolean availability gate used before a schedule or assignment is committed"""

    def check_availability(
        self,
        resource_id,
        start: datetime,
        end: datetime,
        existing_commitments: Iterable,
        exclude_job_id=None,
    ) -> bool:
        for _job, (job_start, job_end) in _occupying_windows(existing_commitments, exclude_job_id):
            if windows_overlap(start, end, job_start, job_end):
                return False
        return True

    def check_many(
        self,
        commitments_by_resource: dict,
        start: datetime,
        end: datetime,
        exclude_job_id: Optional[int] = None,
    ) -> dict:
        """Availability per resource id, e.g. for every equipment item a job requires."""
        return {
            resource_id: self.check_availability(
                resource_id, start, end, commitments, exclude_job_id
            )
            for resource_id, commitments in commitments_by_resource.items()
        }
