"""Job service - lifecycle and scheduling facade over the job engines"""

import logging
import time
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ... import config
from ...models import Job, RecurringJobSeries
from ..scheduling.availability_service import AvailabilityChecker, ConflictDetector
from ..scheduling.geo import within_radius
from ..scheduling.recurrence import RecurringSeriesGenerator, validate_cadence
from ..scheduling.route_optimizer import RouteOptimizer
from ..scheduling.schemas import (
    GeoStop,
    Location,
    RecurringJobRequest,
    RouteResult,
    SchedulingConflict,
    SchedulingConstraints,
    SchedulingSuggestion,
)
from ..scheduling.suggester import SchedulingSuggester
from ..scheduling.time_calculator import commitment_window
from . import state_machine
from .exceptions import JobNotFound, JobValidationError, SchedulingConflictError
from .repository import JobRepository, PropertyRepository
from .schemas import (
    ConflictCheckRequest,
    JobCompleteRequest,
    JobCreate,
    JobListResponse,
    JobResponse,
    JobStartRequest,
    JobUpdate,
    ScheduledJob,
)
from .state_machine import OCCUPYING_STATUSES, JobStatus

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100
VALID_STATUSES = frozenset(status.value for status in JobStatus)

JobEventHook = Callable[[str, Job], None]


def log_job_event(event: str, job: Job) -> None:
    """Default event hook. Notification and audit adapters replace it."""
    logger.info(f"📣 {event}: job {job.id} ({job.job_number}) status={job.status}")


def _parse_statuses(status: Optional[str]) -> Optional[list[str]]:
    if not status:
        return None
    statuses = [part.strip() for part in status.split(",") if part.strip()]
    for value in statuses:
        if value not in VALID_STATUSES:
            raise JobValidationError(f"invalid status: {value}")
    return statuses


def default_origin() -> Location:
    return Location(
        latitude=config.ROUTE_ORIGIN_LATITUDE,
        longitude=config.ROUTE_ORIGIN_LONGITUDE,
        address=config.ROUTE_ORIGIN_ADDRESS,
    )


class JobService:
    """Service layer for job business logic"""

    def __init__(self, db: Session, on_event: Optional[JobEventHook] = None):
        self.db = db
        self.repo = JobRepository()
        self.properties = PropertyRepository()
        self.on_event = on_event or log_job_event
        self.conflict_detector = ConflictDetector()
        self.availability = AvailabilityChecker()
        self.route_optimizer = RouteOptimizer()
        self.series_generator = RecurringSeriesGenerator()
        self.suggester = SchedulingSuggester(self.conflict_detector)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def get_job(self, tenant_id: int, job_id: int) -> Job:
        job = self.repo.get_job_by_id(self.db, tenant_id, job_id)
        if not job:
            raise JobNotFound()
        return job

    def create_job(self, tenant_id: int, data: JobCreate) -> Job:
        """Create a pending job after checking its property and resource availability"""
        logger.info(f"📥 Creating job for tenant {tenant_id}: {data.title}")

        prop = self.properties.get_property_by_id(self.db, tenant_id, data.property_id)
        if not prop:
            raise JobNotFound("property")
        if prop.customer_id != data.customer_id:
            raise JobValidationError("property does not belong to the specified customer")

        job = Job(
            tenant_id=tenant_id,
            customer_id=data.customer_id,
            property_id=data.property_id,
            title=data.title,
            description=data.description,
            priority=data.priority,
            status=JobStatus.PENDING.value,
            scheduled_date=data.scheduled_date,
            scheduled_time=data.scheduled_time,
            estimated_duration=data.estimated_duration,
            assigned_user_id=data.assigned_user_id,
            crew_id=data.crew_id,
            crew_size=data.crew_size,
            weather_dependent=data.weather_dependent,
            required_equipment=list(data.required_equipment),
            completion_photos=[],
        )
        self._ensure_resources_available(tenant_id, job)
        job.job_number = self._job_number(tenant_id)

        job = self.repo.create_job(self.db, job)
        logger.info(f"✅ Job {job.id} created ({job.job_number}) for tenant {tenant_id}")
        self.on_event("job.created", job)
        return job

    def update_job(self, tenant_id: int, job_id: int, data: JobUpdate) -> Job:
        job = self.get_job(tenant_id, job_id)

        if data.status is not None and data.status.value != job.status:
            state_machine.change_status(job, data.status, datetime.now())

        reschedule = False
        for field in ("title", "description", "priority", "scheduled_time", "crew_size"):
            value = getattr(data, field)
            if value is not None:
                setattr(job, field, value)
        if data.notes:
            job.notes = state_machine.append_note(job.notes, data.notes)
        if data.scheduled_date is not None:
            job.scheduled_date = data.scheduled_date
            reschedule = True
        if data.estimated_duration is not None:
            job.estimated_duration = data.estimated_duration
            reschedule = True

        if reschedule:
            self._ensure_resources_available(tenant_id, job)
            self._warn_user_conflicts(tenant_id, job)

        job = self._save(job)
        self.on_event("job.updated", job)
        return job

    def delete_job(self, tenant_id: int, job_id: int) -> Job:
        job = self.get_job(tenant_id, job_id)
        state_machine.soft_delete_job(job)
        job = self._save(job)
        logger.info(f"✅ Job {job_id} deleted (cancelled) for tenant {tenant_id}")
        self.on_event("job.deleted", job)
        return job

    def list_jobs(
        self,
        tenant_id: int,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        assigned_user_id: Optional[int] = None,
        customer_id: Optional[int] = None,
        property_id: Optional[int] = None,
        scheduled_start: Optional[datetime] = None,
        scheduled_end: Optional[datetime] = None,
        page: int = 1,
        per_page: int = DEFAULT_PAGE_SIZE,
    ) -> JobListResponse:
        """
        Filtered, paginated job listing.

        ``status`` accepts a comma-separated list. Out-of-range paging falls back to page 1
        and the default page size; page size is capped at 100.
        """
        if page <= 0:
            page = 1
        if per_page <= 0:
            per_page = DEFAULT_PAGE_SIZE
        per_page = min(per_page, MAX_PAGE_SIZE)

        jobs, total = self.repo.list_jobs(
            self.db,
            tenant_id,
            statuses=_parse_statuses(status),
            priority=priority,
            assigned_user_id=assigned_user_id,
            customer_id=customer_id,
            property_id=property_id,
            scheduled_start=scheduled_start,
            scheduled_end=scheduled_end,
            page=page,
            per_page=per_page,
        )
        return JobListResponse(
            items=[JobResponse.model_validate(job) for job in jobs],
            total=total,
            page=page,
            per_page=per_page,
            total_pages=(total + per_page - 1) // per_page,
        )

    def get_job_schedule(
        self,
        tenant_id: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        assigned_user_id: Optional[int] = None,
    ) -> list[ScheduledJob]:
        """
        Scheduled and in-progress jobs in date order.

        The date range applies only when both ends are given.
        """
        if start_date is None or end_date is None:
            start_date = end_date = None

        jobs, _ = self.repo.list_jobs(
            self.db,
            tenant_id,
            statuses=OCCUPYING_STATUSES,
            assigned_user_id=assigned_user_id,
            scheduled_start=start_date,
            scheduled_end=end_date,
            per_page=None,
        )
        properties = self.properties.get_properties_by_ids(
            self.db, tenant_id, list({job.property_id for job in jobs})
        )

        schedule = []
        for job in jobs:
            if job.scheduled_date is None:
                continue
            prop = properties.get(job.property_id)
            if prop is None:
                logger.warning(f"⚠️ Property {job.property_id} for scheduled job {job.id} not found")
                continue
            schedule.append(
                ScheduledJob(
                    job_id=job.id,
                    title=job.title,
                    customer_id=job.customer_id,
                    property_address=prop.address,
                    scheduled_date=job.scheduled_date,
                    scheduled_time=job.scheduled_time,
                    duration=job.estimated_duration,
                    status=job.status,
                    assigned_user_id=job.assigned_user_id,
                    priority=job.priority,
                )
            )
        schedule.sort(key=lambda entry: (entry.scheduled_date, entry.job_id))
        return schedule

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_job(self, tenant_id: int, job_id: int, details: JobStartRequest) -> Job:
        job = self.get_job(tenant_id, job_id)
        state_machine.start_job(
            job,
            start_time=details.start_time or datetime.now(),
            gps_location=details.gps_location,
            notes=details.notes,
        )
        job = self._save(job)
        logger.info(f"✅ Job {job_id} started")
        self.on_event("job.started", job)
        return job

    def complete_job(self, tenant_id: int, job_id: int, details: JobCompleteRequest) -> Job:
        job = self.get_job(tenant_id, job_id)
        state_machine.complete_job(
            job,
            end_time=details.end_time or datetime.now(),
            gps_location=details.gps_location,
            completion_notes=details.completion_notes,
            photos=details.photos,
        )
        job = self._save(job)
        logger.info(f"✅ Job {job_id} completed")
        self.on_event("job.completed", job)
        return job

    def cancel_job(self, tenant_id: int, job_id: int, reason: str) -> Job:
        job = self.get_job(tenant_id, job_id)
        old_status = job.status
        state_machine.cancel_job(job, reason)
        job = self._save(job)
        logger.info(f"✅ Job {job_id} cancelled ({old_status} → cancelled): {reason}")
        self.on_event("job.cancelled", job)
        return job

    # ------------------------------------------------------------------
    # Assignment
    # ------------------------------------------------------------------

    def assign_job(
        self, tenant_id: int, job_id: int, user_id: int
    ) -> tuple[Job, list[SchedulingConflict]]:
        """Assign a user. Overlapping commitments are reported, not enforced."""
        job = self.get_job(tenant_id, job_id)

        conflicts = []
        if job.scheduled_date is not None and job.estimated_duration is not None:
            conflicts = self.check_scheduling_conflicts(
                tenant_id,
                job_id,
                ConflictCheckRequest(
                    scheduled_date=job.scheduled_date,
                    estimated_duration=job.estimated_duration,
                    resource_id=user_id,
                ),
            )
            if conflicts:
                logger.warning(
                    f"⚠️ Assigning job {job_id} to user {user_id} with {len(conflicts)} conflict(s)"
                )

        job.assigned_user_id = user_id
        job = self._save(job)
        self.on_event("job.assigned", job)
        return job, conflicts

    def unassign_job(self, tenant_id: int, job_id: int) -> Job:
        job = self.get_job(tenant_id, job_id)
        job.assigned_user_id = None
        job = self._save(job)
        self.on_event("job.unassigned", job)
        return job

    def assign_crew(self, tenant_id: int, job_id: int, crew_id: int) -> Job:
        """Assign a crew; a crew already committed during the job's window is rejected"""
        job = self.get_job(tenant_id, job_id)

        window = commitment_window(job)
        if window is not None:
            commitments = self.repo.get_jobs_for_resource(self.db, tenant_id, "crew", crew_id)
            if not self.availability.check_availability(crew_id, *window, commitments, job.id):
                raise SchedulingConflictError("crew is not available at the scheduled time")

        job.crew_id = crew_id
        job = self._save(job)
        logger.info(f"✅ Job {job_id} assigned to crew {crew_id}")
        self.on_event("job.crew_assigned", job)
        return job

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def check_scheduling_conflicts(
        self, tenant_id: int, job_id: int, request: ConflictCheckRequest
    ) -> list[SchedulingConflict]:
        """
        Conflicts for placing ``job_id`` at the requested window.

        Without an explicit resource the job's assigned user is checked; a job with no
        assigned user has nothing to conflict with.
        """
        resource_id = request.resource_id
        if resource_id is None:
            job = self.get_job(tenant_id, job_id)
            resource_id = {
                "user": job.assigned_user_id,
                "crew": job.crew_id,
            }.get(request.resource_type)
            if resource_id is None:
                return []

        commitments = self.repo.get_jobs_for_resource(
            self.db, tenant_id, request.resource_type, resource_id
        )
        return self.conflict_detector.check_conflicts(
            job_id,
            resource_id,
            request.scheduled_date,
            request.estimated_duration,
            commitments,
            resource_type=request.resource_type,
        )

    def suggest_schedule(
        self,
        tenant_id: int,
        job_id: int,
        preferred_date: Optional[datetime],
        constraints: SchedulingConstraints,
    ) -> SchedulingSuggestion:
        job = self.get_job(tenant_id, job_id)
        commitments = []
        if job.assigned_user_id is not None:
            commitments = self.repo.get_jobs_for_resource(
                self.db, tenant_id, "user", job.assigned_user_id
            )
        return self.suggester.suggest(job, commitments, preferred_date, constraints)

    def optimize_route(
        self,
        tenant_id: int,
        job_ids: list[int],
        origin: Optional[Location] = None,
        departure_time: Optional[datetime] = None,
    ) -> RouteResult:
        jobs = self.repo.get_jobs_by_ids(self.db, tenant_id, job_ids)
        if not jobs:
            raise JobNotFound(message="no valid jobs found for route optimization")
        missing = set(job_ids) - {job.id for job in jobs}
        if missing:
            logger.warning(f"⚠️ Skipping unknown jobs in route optimization: {sorted(missing)}")

        stops = self._geo_stops(tenant_id, jobs)
        return self.route_optimizer.optimize(stops, origin or default_origin(), departure_time)

    def optimize_route_for_user(self, tenant_id: int, user_id: int, date: datetime) -> RouteResult:
        """Route the user's scheduled and in-progress jobs for the given day"""
        start_of_day = date.replace(hour=0, minute=0, second=0, microsecond=0)
        jobs = self.repo.get_jobs_by_date_range(
            self.db,
            tenant_id,
            start_of_day,
            start_of_day + timedelta(days=1),
            assigned_user_id=user_id,
            statuses=OCCUPYING_STATUSES,
        )
        if len(jobs) <= 1:
            return RouteResult()

        stops = self._geo_stops(tenant_id, jobs)
        return self.route_optimizer.optimize(stops, default_origin(), jobs[0].scheduled_date)

    def get_jobs_by_location(
        self, tenant_id: int, center_lat: float, center_lng: float, radius_miles: float, date: datetime
    ) -> list[Job]:
        """Jobs scheduled on ``date`` whose property lies within the radius"""
        start_of_day = date.replace(hour=0, minute=0, second=0, microsecond=0)
        jobs = self.repo.get_jobs_by_date_range(
            self.db, tenant_id, start_of_day, start_of_day + timedelta(days=1)
        )
        properties = self.properties.get_properties_by_ids(
            self.db, tenant_id, list({job.property_id for job in jobs})
        )

        nearby = []
        for job in jobs:
            prop = properties.get(job.property_id)
            if prop and prop.is_geocoded and within_radius(
                center_lat, center_lng, prop.latitude, prop.longitude, radius_miles
            ):
                nearby.append(job)
        return nearby

    def create_recurring_series(
        self, tenant_id: int, request: RecurringJobRequest
    ) -> RecurringJobSeries:
        base_job = self.get_job(tenant_id, request.base_job_id)
        validate_cadence(request.frequency)

        series = self.repo.save_series(
            self.db,
            RecurringJobSeries(
                tenant_id=tenant_id,
                base_job_id=base_job.id,
                frequency=request.frequency,
                next_occurrence=request.start_date,
                jobs_created=0,
                upcoming_job_ids=[],
            ),
        )

        def persist_instance(instance: Job) -> Job:
            instance.job_number = self._job_number(tenant_id)
            instance.completion_photos = []
            return self.repo.create_job(self.db, instance)

        series = self.series_generator.generate(
            base_job,
            request.frequency,
            request.start_date,
            persist_instance,
            end_date=request.end_date,
            max_occurrences=request.max_occurrences,
            series=series,
        )
        return self.repo.save_series(self.db, series)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _save(self, job: Job) -> Job:
        return self.repo.update_job(self.db, job)

    def _job_number(self, tenant_id: int) -> str:
        try:
            return self.repo.next_job_number(self.db, tenant_id)
        except Exception as e:
            logger.warning(f"⚠️ Failed to generate job number for tenant {tenant_id}: {e}")
            return f"JOB-{int(time.time())}"

    def _ensure_resources_available(self, tenant_id: int, job: Job) -> None:
        """Crew and equipment cannot be double-booked; raises SchedulingConflictError"""
        window = commitment_window(job)
        if window is None:
            return

        if job.crew_id is not None:
            commitments = self.repo.get_jobs_for_resource(self.db, tenant_id, "crew", job.crew_id)
            if not self.availability.check_availability(job.crew_id, *window, commitments, job.id):
                raise SchedulingConflictError("crew is not available at the scheduled time")

        equipment_ids = job.required_equipment or []
        if equipment_ids:
            commitments_by_equipment = {
                equipment_id: self.repo.get_jobs_for_resource(
                    self.db, tenant_id, "equipment", equipment_id
                )
                for equipment_id in equipment_ids
            }
            availability = self.availability.check_many(commitments_by_equipment, *window, job.id)
            for equipment_id, available in availability.items():
                if not available:
                    raise SchedulingConflictError(
                        f"equipment {equipment_id} is not available at the scheduled time"
                    )

    def _warn_user_conflicts(self, tenant_id: int, job: Job) -> None:
        if job.assigned_user_id is None or commitment_window(job) is None:
            return
        commitments = self.repo.get_jobs_for_resource(
            self.db, tenant_id, "user", job.assigned_user_id
        )
        conflicts = self.conflict_detector.check_conflicts(
            job.id, job.assigned_user_id, job.scheduled_date, job.estimated_duration, commitments
        )
        for conflict in conflicts:
            logger.warning(f"⚠️ Job {job.id} rescheduled into a conflict: {conflict.message}")

    def _geo_stops(self, tenant_id: int, jobs: list[Job]) -> list[GeoStop]:
        properties = self.properties.get_properties_by_ids(
            self.db, tenant_id, list({job.property_id for job in jobs})
        )
        stops = []
        for job in jobs:
            prop = properties.get(job.property_id)
            if prop is None:
                logger.warning(f"⚠️ Property {job.property_id} for job {job.id} not found")
                continue
            if not prop.is_geocoded:
                logger.info(f"📍 Job {job.id} skipped in routing, property {prop.id} is not geocoded")
                continue
            stops.append(
                GeoStop(
                    job_id=job.id,
                    address=prop.address,
                    latitude=prop.latitude,
                    longitude=prop.longitude,
                )
            )
        return stops
