"""Tests for recurring series generation"""

from datetime import datetime
from unittest.mock import MagicMock

import pytest

from fieldjobs.domain.jobs.exceptions import InvalidCadence
from fieldjobs.domain.scheduling.recurrence import RecurringSeriesGenerator, clone_for_occurrence
from fieldjobs.domain.scheduling.time_calculator import advance_by_cadence
from fieldjobs.models import Job


@pytest.fixture
def base_job():
    return Job(
        id=500,
        tenant_id=1,
        customer_id=10,
        property_id=3,
        title="Weekly mow",
        description="Front and back",
        priority="high",
        status="completed",
        scheduled_time="09:00",
        estimated_duration=90,
        assigned_user_id=42,
        crew_id=7,
        crew_size=2,
        weather_dependent=True,
        required_equipment=[11, 12],
        notes="Job completed: done",
    )


def id_assigning_persist():
    """Persist double that hands out ids 1, 2, 3, ..."""
    persisted = []

    def _persist(job):
        job.id = len(persisted) + 1
        persisted.append(job)
        return job

    return MagicMock(side_effect=_persist), persisted


class TestCloneForOccurrence:
    def test_copies_descriptive_fields(self, base_job):
        instance = clone_for_occurrence(base_job, datetime(2024, 1, 8), "weekly")

        assert instance.title == "Weekly mow"
        assert instance.priority == "high"
        assert instance.assigned_user_id == 42
        assert instance.crew_id == 7
        assert instance.required_equipment == [11, 12]
        assert instance.required_equipment is not base_job.required_equipment

    def test_instance_is_fresh_pending_child(self, base_job):
        instance = clone_for_occurrence(base_job, datetime(2024, 1, 8), "weekly")

        assert instance.status == "pending"
        assert instance.scheduled_date == datetime(2024, 1, 8)
        assert instance.parent_job_id == 500
        assert instance.recurring_schedule == "weekly"
        assert instance.id is None
        assert instance.notes is None
        assert instance.actual_start_time is None


class TestRecurringSeriesGenerator:
    def test_weekly_example(self, base_job):
        persist, persisted = id_assigning_persist()

        series = RecurringSeriesGenerator().generate(
            base_job, "weekly", datetime(2024, 1, 1), persist, max_occurrences=3
        )

        assert [job.scheduled_date for job in persisted] == [
            datetime(2024, 1, 1),
            datetime(2024, 1, 8),
            datetime(2024, 1, 15),
        ]
        assert series.jobs_created == 3
        assert series.upcoming_job_ids == [1, 2, 3]
        assert series.next_occurrence == datetime(2024, 1, 22)
        assert series.base_job_id == 500
        assert series.frequency == "weekly"

    @pytest.mark.parametrize("max_occurrences", [None, 12, 50])
    def test_never_more_than_twelve(self, base_job, max_occurrences):
        persist, persisted = id_assigning_persist()

        series = RecurringSeriesGenerator().generate(
            base_job, "biweekly", datetime(2024, 1, 1), persist, max_occurrences=max_occurrences
        )

        assert len(persisted) == 12
        assert series.jobs_created == 12

    def test_end_date_stops_generation(self, base_job):
        persist, persisted = id_assigning_persist()

        series = RecurringSeriesGenerator().generate(
            base_job, "weekly", datetime(2024, 1, 1), persist, end_date=datetime(2024, 1, 20)
        )

        assert len(persisted) == 3
        assert series.next_occurrence == datetime(2024, 1, 22)

    def test_end_date_is_inclusive(self, base_job):
        persist, persisted = id_assigning_persist()

        RecurringSeriesGenerator().generate(
            base_job, "weekly", datetime(2024, 1, 1), persist, end_date=datetime(2024, 1, 15)
        )

        assert persisted[-1].scheduled_date == datetime(2024, 1, 15)

    def test_failed_date_is_retried(self, base_job):
        persisted = []
        failures = []

        def flaky_persist(job):
            if job.scheduled_date == datetime(2024, 1, 8) and not failures:
                failures.append(job.scheduled_date)
                raise RuntimeError("database unavailable")
            job.id = len(persisted) + 100
            persisted.append(job)
            return job

        series = RecurringSeriesGenerator().generate(
            base_job, "weekly", datetime(2024, 1, 1), flaky_persist, max_occurrences=3
        )

        assert series.jobs_created == 2
        assert series.upcoming_job_ids == [100, 101]
        assert [job.scheduled_date for job in persisted] == [
            datetime(2024, 1, 1),
            datetime(2024, 1, 8),
        ]
        assert series.next_occurrence == datetime(2024, 1, 15)

    def test_failing_final_instance_leaves_next_occurrence_on_it(self, base_job):
        persisted = []

        def persist(job):
            if job.scheduled_date == datetime(2024, 1, 15):
                raise RuntimeError("constraint violation")
            job.id = len(persisted) + 1
            persisted.append(job)
            return job

        series = RecurringSeriesGenerator().generate(
            base_job, "weekly", datetime(2024, 1, 1), persist, max_occurrences=3
        )

        assert series.jobs_created == 2
        assert persisted[-1].scheduled_date == datetime(2024, 1, 8)
        assert series.next_occurrence == datetime(2024, 1, 15)

    def test_every_attempt_counts_toward_the_cap(self, base_job):
        persist = MagicMock(side_effect=RuntimeError("database unavailable"))

        series = RecurringSeriesGenerator().generate(
            base_job, "weekly", datetime(2024, 1, 1), persist, max_occurrences=3
        )

        assert persist.call_count == 3
        assert series.jobs_created == 0
        assert series.upcoming_job_ids == []
        assert series.next_occurrence == datetime(2024, 1, 1)

    def test_invalid_cadence_creates_nothing(self, base_job):
        persist = MagicMock()

        with pytest.raises(InvalidCadence, match="unsupported frequency: daily"):
            RecurringSeriesGenerator().generate(base_job, "daily", datetime(2024, 1, 1), persist)

        persist.assert_not_called()

    def test_existing_series_is_extended(self, base_job):
        persist, _ = id_assigning_persist()
        existing = MagicMock(jobs_created=0, upcoming_job_ids=[])

        series = RecurringSeriesGenerator().generate(
            base_job, "quarterly", datetime(2024, 1, 1), persist, max_occurrences=2, series=existing
        )

        assert series is existing
        assert series.upcoming_job_ids == [1, 2]
        assert series.next_occurrence == datetime(2024, 7, 1)

    def test_custom_default_cap(self, base_job):
        persist, persisted = id_assigning_persist()
        RecurringSeriesGenerator(default_cap=4).generate(
            base_job, "weekly", datetime(2024, 1, 1), persist
        )
        assert len(persisted) == 4


class TestAdvanceByCadence:
    @pytest.mark.parametrize(
        "cadence,expected",
        [
            ("weekly", datetime(2024, 1, 8, 9, 0)),
            ("biweekly", datetime(2024, 1, 15, 9, 0)),
            ("monthly", datetime(2024, 2, 1, 9, 0)),
            ("quarterly", datetime(2024, 4, 1, 9, 0)),
        ],
    )
    def test_steps(self, cadence, expected):
        assert advance_by_cadence(datetime(2024, 1, 1, 9, 0), cadence) == expected

    def test_month_step_clamps_to_month_end(self):
        assert advance_by_cadence(datetime(2024, 1, 31), "monthly") == datetime(2024, 2, 29)
