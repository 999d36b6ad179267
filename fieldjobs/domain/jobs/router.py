"""Job router - FastAPI endpoints for job lifecycle and assignment"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...tenancy import get_tenant_id
from ..scheduling.schemas import SchedulingConflict
from .schemas import (
    AssignCrewRequest,
    AssignJobRequest,
    AssignmentResponse,
    CancelJobRequest,
    ConflictCheckRequest,
    JobCompleteRequest,
    JobCreate,
    JobListResponse,
    JobResponse,
    JobStartRequest,
    JobUpdate,
    ScheduledJob,
)
from .service import JobService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["Jobs"])


def get_job_service(db: Session = Depends(get_db)) -> JobService:
    """Dependency injection for JobService"""
    return JobService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(
    data: JobCreate,
    tenant_id: int = Depends(get_tenant_id),
    service: JobService = Depends(get_job_service),
):
    """Create a new pending job"""
    return service.create_job(tenant_id, data)


@router.get("", response_model=JobListResponse)
async def list_jobs(
    tenant_id: int = Depends(get_tenant_id),
    service: JobService = Depends(get_job_service),
    status: Optional[str] = Query(None, description="Comma-separated statuses"),
    priority: Optional[str] = Query(None),
    assigned_user_id: Optional[int] = Query(None),
    customer_id: Optional[int] = Query(None),
    property_id: Optional[int] = Query(None),
    scheduled_start: Optional[datetime] = Query(None),
    scheduled_end: Optional[datetime] = Query(None),
    page: int = Query(1),
    per_page: int = Query(50),
):
    """List jobs with filters and pagination"""
    return service.list_jobs(
        tenant_id,
        status=status,
        priority=priority,
        assigned_user_id=assigned_user_id,
        customer_id=customer_id,
        property_id=property_id,
        scheduled_start=scheduled_start,
        scheduled_end=scheduled_end,
        page=page,
        per_page=per_page,
    )


@router.get("/schedule", response_model=list[ScheduledJob])
async def get_job_schedule(
    tenant_id: int = Depends(get_tenant_id),
    service: JobService = Depends(get_job_service),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    assigned_user_id: Optional[int] = Query(None),
):
    """Scheduled and in-progress jobs for a calendar view"""
    return service.get_job_schedule(tenant_id, start_date, end_date, assigned_user_id)


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: int,
    tenant_id: int = Depends(get_tenant_id),
    service: JobService = Depends(get_job_service),
):
    return service.get_job(tenant_id, job_id)


@router.patch("/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: int,
    data: JobUpdate,
    tenant_id: int = Depends(get_tenant_id),
    service: JobService = Depends(get_job_service),
):
    """Update job fields; a status change must be a legal transition"""
    return service.update_job(tenant_id, job_id, data)


@router.delete("/{job_id}", response_model=JobResponse)
async def delete_job(
    job_id: int,
    tenant_id: int = Depends(get_tenant_id),
    service: JobService = Depends(get_job_service),
):
    """Soft delete: pending jobs are cancelled, never removed"""
    return service.delete_job(tenant_id, job_id)


# ============================================================================
# LIFECYCLE
# ============================================================================


@router.post("/{job_id}/start", response_model=JobResponse)
async def start_job(
    job_id: int,
    data: JobStartRequest,
    tenant_id: int = Depends(get_tenant_id),
    service: JobService = Depends(get_job_service),
):
    return service.start_job(tenant_id, job_id, data)


@router.post("/{job_id}/complete", response_model=JobResponse)
async def complete_job(
    job_id: int,
    data: JobCompleteRequest,
    tenant_id: int = Depends(get_tenant_id),
    service: JobService = Depends(get_job_service),
):
    return service.complete_job(tenant_id, job_id, data)


@router.post("/{job_id}/cancel", response_model=JobResponse)
async def cancel_job(
    job_id: int,
    data: CancelJobRequest,
    tenant_id: int = Depends(get_tenant_id),
    service: JobService = Depends(get_job_service),
):
    return service.cancel_job(tenant_id, job_id, data.reason)


# ============================================================================
# ASSIGNMENT
# ============================================================================


@router.post("/{job_id}/assign", response_model=AssignmentResponse)
async def assign_job(
    job_id: int,
    data: AssignJobRequest,
    tenant_id: int = Depends(get_tenant_id),
    service: JobService = Depends(get_job_service),
):
    """Assign a user; overlapping commitments come back as warnings"""
    job, conflicts = service.assign_job(tenant_id, job_id, data.user_id)
    return AssignmentResponse(job=JobResponse.model_validate(job), conflicts=conflicts)


@router.post("/{job_id}/unassign", response_model=JobResponse)
async def unassign_job(
    job_id: int,
    tenant_id: int = Depends(get_tenant_id),
    service: JobService = Depends(get_job_service),
):
    return service.unassign_job(tenant_id, job_id)


@router.post("/{job_id}/assign-crew", response_model=JobResponse)
async def assign_crew(
    job_id: int,
    data: AssignCrewRequest,
    tenant_id: int = Depends(get_tenant_id),
    service: JobService = Depends(get_job_service),
):
    return service.assign_crew(tenant_id, job_id, data.crew_id)


@router.post("/{job_id}/conflicts", response_model=list[SchedulingConflict])
async def check_conflicts(
    job_id: int,
    data: ConflictCheckRequest,
    tenant_id: int = Depends(get_tenant_id),
    service: JobService = Depends(get_job_service),
):
    return service.check_scheduling_conflicts(tenant_id, job_id, data)
