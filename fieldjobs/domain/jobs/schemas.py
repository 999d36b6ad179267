"""Job domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_positive, validate_priority
from ..scheduling.schemas import Location, SchedulingConflict
from .state_machine import JobStatus


class JobCreate(BaseModel):
    """Schema for creating a new job"""

    customer_id: int
    property_id: int
    title: str
    description: Optional[str] = None
    priority: str = "medium"
    scheduled_date: Optional[datetime] = None
    scheduled_time: Optional[str] = None
    estimated_duration: Optional[int] = None
    assigned_user_id: Optional[int] = None
    crew_id: Optional[int] = None
    crew_size: int = 1
    weather_dependent: bool = False
    required_equipment: list[int] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v or not v.strip():
            raise ValueError("job title is required")
        return v.strip()

    @field_validator("priority")
    @classmethod
    def check_priority(cls, v):
        return validate_priority(v)

    @field_validator("crew_size")
    @classmethod
    def check_crew_size(cls, v):
        return validate_positive(v, "crew size")

    @field_validator("estimated_duration")
    @classmethod
    def check_duration(cls, v):
        return validate_positive(v, "estimated duration")


class JobUpdate(BaseModel):
    """Schema for updating an existing job; status changes go through the state machine"""

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[JobStatus] = None
    priority: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    scheduled_time: Optional[str] = None
    estimated_duration: Optional[int] = None
    crew_size: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("priority")
    @classmethod
    def check_priority(cls, v):
        return validate_priority(v)

    @field_validator("crew_size")
    @classmethod
    def check_crew_size(cls, v):
        return validate_positive(v, "crew size")

    @field_validator("estimated_duration")
    @classmethod
    def check_duration(cls, v):
        return validate_positive(v, "estimated duration")


class JobResponse(BaseModel):
    """Schema for job response"""

    id: int
    tenant_id: int
    job_number: Optional[str]
    customer_id: int
    property_id: int
    title: str
    description: Optional[str]
    status: str
    priority: str
    scheduled_date: Optional[datetime]
    scheduled_time: Optional[str]
    estimated_duration: Optional[int]
    actual_start_time: Optional[datetime]
    actual_end_time: Optional[datetime]
    assigned_user_id: Optional[int]
    crew_id: Optional[int]
    crew_size: int
    weather_dependent: bool
    required_equipment: Optional[list[int]]
    parent_job_id: Optional[int]
    recurring_schedule: Optional[str]
    notes: Optional[str]
    gps_check_in: Optional[dict]
    gps_check_out: Optional[dict]
    completion_photos: Optional[list[str]]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class JobStartRequest(BaseModel):
    start_time: Optional[datetime] = None
    gps_location: Optional[Location] = None
    notes: Optional[str] = None


class JobCompleteRequest(BaseModel):
    end_time: Optional[datetime] = None
    gps_location: Optional[Location] = None
    completion_notes: Optional[str] = None
    photos: list[str] = Field(default_factory=list)


class CancelJobRequest(BaseModel):
    reason: str = Field(..., min_length=1)


class AssignJobRequest(BaseModel):
    user_id: int


class AssignCrewRequest(BaseModel):
    crew_id: int


class AssignmentResponse(BaseModel):
    """Assignment result; conflicts are advisory and do not block the assignment"""

    job: JobResponse
    conflicts: list[SchedulingConflict] = Field(default_factory=list)


class ConflictCheckRequest(BaseModel):
    scheduled_date: datetime
    estimated_duration: int = Field(..., gt=0)
    resource_id: Optional[int] = None
    resource_type: Literal["user", "crew", "equipment"] = "user"


class JobListResponse(BaseModel):
    """Paginated job listing"""

    items: list[JobResponse]
    total: int
    page: int
    per_page: int
    total_pages: int


class ScheduledJob(BaseModel):
    """Calendar view of a scheduled or in-progress job"""

    job_id: int
    title: str
    customer_id: int
    property_address: str
    scheduled_date: datetime
    scheduled_time: Optional[str] = None
    duration: Optional[int] = None
    status: str
    assigned_user_id: Optional[int] = None
    priority: str
