"""
Recurring job series generation.

Expands a base job into future pending instances at a fixed cadence. Each instance is
persisted independently. A failed instance is logged and its date is tried again on the
next iteration; earlier instances stay.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from ... import config
from ...models import Job, RecurringJobSeries
from ..jobs.exceptions import InvalidCadence
from ..jobs.state_machine import JobStatus
from .time_calculator import CADENCE_STEPS, advance_by_cadence

logger = logging.getLogger(__name__)

SUPPORTED_CADENCES = tuple(CADENCE_STEPS)

# Descriptive fields copied from the base job onto every instance
CLONED_FIELDS = (
    "tenant_id",
    "customer_id",
    "property_id",
    "assigned_user_id",
    "crew_id",
    "title",
    "description",
    "priority",
    "scheduled_time",
    "estimated_duration",
    "crew_size",
    "weather_dependent",
)


def validate_cadence(cadence: str) -> str:
    if cadence not in SUPPORTED_CADENCES:
        raise InvalidCadence(cadence)
    return cadence


def clone_for_occurrence(base_job: Job, scheduled_date: datetime, cadence: str) -> Job:
    job = Job(**{field: getattr(base_job, field) for field in CLONED_FIELDS})
    job.required_equipment = list(base_job.required_equipment or [])
    job.status = JobStatus.PENDING.value
    job.scheduled_date = scheduled_date
    job.parent_job_id = base_job.id
    job.recurring_schedule = cadence
    return job


class RecurringSeriesGenerator:
    def __init__(self, default_cap: int = config.RECURRING_MAX_OCCURRENCES):
        self.default_cap = default_cap

    def occurrence_cap(self, max_occurrences: Optional[int]) -> int:
        if max_occurrences is not None and max_occurrences < self.default_cap:
            return max_occurrences
        return self.default_cap

    def generate(
        self,
        base_job: Job,
        cadence: str,
        start_date: datetime,
        persist_job: Callable[[Job], Job],
        end_date: Optional[datetime] = None,
        max_occurrences: Optional[int] = None,
        series: Optional[RecurringJobSeries] = None,
    ) -> RecurringJobSeries:
        """
        Make up to ``min(default_cap, max_occurrences)`` persistence attempts, never past
        ``end_date``. ``next_occurrence`` ends one step past the last created instance.

        Args:
            base_job: Job whose descriptive fields are cloned
            cadence: weekly, biweekly, monthly or quarterly
            start_date: Date of the first instance
            persist_job: Stores one instance and returns it with its id assigned
            end_date: Last date an instance may fall on
            max_occurrences: Caller cap, the smaller cap wins
            series: Existing series record to fill; a transient one is built otherwise

        Raises:
            InvalidCadence: before any instance is created
        """
        validate_cadence(cadence)

        if series is None:
            series = RecurringJobSeries(
                tenant_id=base_job.tenant_id, base_job_id=base_job.id, frequency=cadence
            )
        jobs_created = series.jobs_created or 0
        upcoming = list(series.upcoming_job_ids or [])

        next_date = start_date
        for iteration in range(self.occurrence_cap(max_occurrences)):
            if end_date is not None and next_date > end_date:
                break

            instance = clone_for_occurrence(base_job, next_date, cadence)
            try:
                created = persist_job(instance)
            except Exception as e:
                logger.warning(
                    f"⚠️ Failed to create recurring instance {iteration + 1} of job "
                    f"{base_job.id} for {next_date.date()}: {e}"
                )
            else:
                upcoming.append(created.id)
                jobs_created += 1
                # A failed date is retried by the next iteration
                next_date = advance_by_cadence(next_date, cadence)

        series.jobs_created = jobs_created
        series.upcoming_job_ids = upcoming
        series.next_occurrence = next_date

        logger.info(
            f"✅ Recurring series for job {base_job.id}: {series.jobs_created} {cadence} jobs created"
        )
        return series
