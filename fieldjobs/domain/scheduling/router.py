"""Scheduling router - slot suggestions, route optimization and recurring series"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...tenancy import get_tenant_id
from ..jobs.schemas import JobResponse
from ..jobs.service import JobService
from .schemas import (
    RecurringJobRequest,
    RecurringJobSeriesResponse,
    RouteOptimizeRequest,
    RouteResult,
    SchedulingSuggestion,
    SuggestionRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scheduling", tags=["Scheduling"])


def get_job_service(db: Session = Depends(get_db)) -> JobService:
    """Dependency injection for JobService"""
    return JobService(db)


@router.post("/jobs/{job_id}/suggestions", response_model=SchedulingSuggestion)
async def suggest_schedule(
    job_id: int,
    data: SuggestionRequest,
    tenant_id: int = Depends(get_tenant_id),
    service: JobService = Depends(get_job_service),
):
    """Top ranked open slots for a job over the next 30 days"""
    return service.suggest_schedule(tenant_id, job_id, data.preferred_date, data.constraints)


@router.post("/routes/optimize", response_model=RouteResult)
async def optimize_route(
    data: RouteOptimizeRequest,
    tenant_id: int = Depends(get_tenant_id),
    service: JobService = Depends(get_job_service),
):
    return service.optimize_route(tenant_id, data.job_ids, data.origin, data.departure_time)


@router.get("/routes/users/{user_id}", response_model=RouteResult)
async def optimize_user_route(
    user_id: int,
    date: datetime = Query(..., description="Day to route"),
    tenant_id: int = Depends(get_tenant_id),
    service: JobService = Depends(get_job_service),
):
    """Route a user's scheduled and in-progress jobs for one day"""
    return service.optimize_route_for_user(tenant_id, user_id, date)


@router.get("/jobs/nearby", response_model=list[JobResponse])
async def get_nearby_jobs(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius: float = Query(10.0, gt=0, description="Radius in miles"),
    date: datetime = Query(..., description="Day the jobs are scheduled on"),
    tenant_id: int = Depends(get_tenant_id),
    service: JobService = Depends(get_job_service),
):
    return service.get_jobs_by_location(tenant_id, lat, lng, radius, date)


@router.post("/recurring", response_model=RecurringJobSeriesResponse, status_code=201)
async def create_recurring_series(
    data: RecurringJobRequest,
    tenant_id: int = Depends(get_tenant_id),
    service: JobService = Depends(get_job_service),
):
    """Expand a base job into pending instances at a weekly to quarterly cadence"""
    series = service.create_recurring_series(tenant_id, data)
    logger.info(f"📅 Series {series.id} created from job {data.base_job_id}")
    return series
