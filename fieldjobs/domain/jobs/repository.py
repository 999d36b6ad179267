"""Job repository - Database operations for jobs, properties and recurring series"""

from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Job, Property, RecurringJobSeries
from .state_machine import OCCUPYING_STATUSES


class JobRepository:
    """Repository for job database operations"""

    @staticmethod
    def get_job_by_id(db: Session, tenant_id: int, job_id: int) -> Optional[Job]:
        return db.query(Job).filter(Job.id == job_id, Job.tenant_id == tenant_id).first()

    @staticmethod
    def get_jobs_by_ids(db: Session, tenant_id: int, job_ids: list[int]) -> list[Job]:
        """Jobs in the order of ``job_ids``; unknown ids are skipped"""
        if not job_ids:
            return []
        found = {
            job.id: job
            for job in db.query(Job).filter(Job.tenant_id == tenant_id, Job.id.in_(job_ids)).all()
        }
        return [found[job_id] for job_id in job_ids if job_id in found]

    @staticmethod
    def get_jobs_for_resource(
        db: Session,
        tenant_id: int,
        resource_type: str,
        resource_id: int,
        statuses: Iterable[str] = OCCUPYING_STATUSES,
    ) -> list[Job]:
        """Jobs bound to a user, crew or equipment item, filtered by status"""
        query = db.query(Job).filter(Job.tenant_id == tenant_id, Job.status.in_(list(statuses)))

        if resource_type == "user":
            return query.filter(Job.assigned_user_id == resource_id).all()
        if resource_type == "crew":
            return query.filter(Job.crew_id == resource_id).all()
        if resource_type == "equipment":
            # JSON containment is backend specific; filter the list here
            return [job for job in query.all() if resource_id in (job.required_equipment or [])]

        raise ValueError(f"Unknown resource type: {resource_type}")

    @staticmethod
    def get_jobs_by_date_range(
        db: Session,
        tenant_id: int,
        start: datetime,
        end: datetime,
        assigned_user_id: Optional[int] = None,
        statuses: Optional[Iterable[str]] = None,
    ) -> list[Job]:
        query = db.query(Job).filter(
            Job.tenant_id == tenant_id,
            Job.scheduled_date >= start,
            Job.scheduled_date < end,
        )
        if assigned_user_id is not None:
            query = query.filter(Job.assigned_user_id == assigned_user_id)
        if statuses is not None:
            query = query.filter(Job.status.in_(list(statuses)))
        return query.order_by(Job.scheduled_date, Job.id).all()

    @staticmethod
    def list_jobs(
        db: Session,
        tenant_id: int,
        statuses: Optional[Iterable[str]] = None,
        priority: Optional[str] = None,
        assigned_user_id: Optional[int] = None,
        customer_id: Optional[int] = None,
        property_id: Optional[int] = None,
        scheduled_start: Optional[datetime] = None,
        scheduled_end: Optional[datetime] = None,
        page: int = 1,
        per_page: Optional[int] = 50,
    ) -> tuple[list[Job], int]:
        """One page of matching jobs, newest schedule first, plus the total match count.

        ``per_page=None`` returns every match.
        """
        query = db.query(Job).filter(Job.tenant_id == tenant_id)

        if statuses:
            query = query.filter(Job.status.in_(list(statuses)))
        if priority:
            query = query.filter(Job.priority == priority)
        if assigned_user_id is not None:
            query = query.filter(Job.assigned_user_id == assigned_user_id)
        if customer_id is not None:
            query = query.filter(Job.customer_id == customer_id)
        if property_id is not None:
            query = query.filter(Job.property_id == property_id)
        if scheduled_start is not None:
            query = query.filter(Job.scheduled_date >= scheduled_start)
        if scheduled_end is not None:
            query = query.filter(Job.scheduled_date <= scheduled_end)

        total = query.count()
        query = query.order_by(Job.scheduled_date.desc(), Job.id.desc())
        if per_page is not None:
            query = query.offset((page - 1) * per_page).limit(per_page)
        return query.all(), total

    @staticmethod
    def next_job_number(db: Session, tenant_id: int) -> str:
        count = db.query(func.count(Job.id)).filter(Job.tenant_id == tenant_id).scalar() or 0
        return f"JOB-{count + 1:05d}"

    @staticmethod
    def create_job(db: Session, job: Job) -> Job:
        try:
            db.add(job)
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(job)
        return job

    @staticmethod
    def update_job(db: Session, job: Job) -> Job:
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(job)
        return job

    @staticmethod
    def save_series(db: Session, series: RecurringJobSeries) -> RecurringJobSeries:
        try:
            db.add(series)
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(series)
        return series


class PropertyRepository:
    """Repository for property lookups"""

    @staticmethod
    def get_property_by_id(db: Session, tenant_id: int, property_id: int) -> Optional[Property]:
        return (
            db.query(Property)
            .filter(Property.id == property_id, Property.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def get_properties_by_ids(db: Session, tenant_id: int, property_ids: list[int]) -> dict:
        if not property_ids:
            return {}
        properties = (
            db.query(Property)
            .filter(Property.tenant_id == tenant_id, Property.id.in_(property_ids))
            .all()
        )
        return {prop.id: prop for prop in properties}
