"""Scheduling domain schemas - Pydantic models for engine inputs and outputs"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...shared.validators import validate_hour, validate_latitude, validate_longitude

ResourceType = Literal["user", "crew", "equipment"]


class Location(BaseModel):
    latitude: float
    longitude: float
    address: str = ""

    @field_validator("latitude")
    @classmethod
    def check_latitude(cls, v):
        return validate_latitude(v)

    @field_validator("longitude")
    @classmethod
    def check_longitude(cls, v):
        return validate_longitude(v)


class GeoStop(BaseModel):
    """A job location to visit. Stops without both coordinates are not routable."""

    job_id: int
    address: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def is_routable(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class RouteStop(BaseModel):
    job_id: int
    address: str
    sequence: int
    arrival_time: datetime
    duration_minutes: int
    distance_from_previous: float


class RouteResult(BaseModel):
    optimized_route: list[RouteStop] = Field(default_factory=list)
    total_distance: float = 0.0
    total_duration_minutes: int = 0
    savings_percent: float = 0.0


class TimeRange(BaseModel):
    start: datetime
    end: datetime


class SchedulingConflict(BaseModel):
    type: str
    conflicting_job_id: int
    conflicting_job_title: str
    conflict_time: TimeRange
    severity: str
    message: str


class SchedulingConstraints(BaseModel):
    weekdays_only: bool = False
    earliest_start: int = 8  # Hour (0-23)
    latest_start: int = 16  # Hour (0-23)

    @field_validator("earliest_start", "latest_start")
    @classmethod
    def check_hour(cls, v):
        return validate_hour(v)

    @model_validator(mode="after")
    def check_range(self):
        if self.earliest_start > self.latest_start:
            raise ValueError("earliest_start must not be after latest_start")
        return self


class TimeSlot(BaseModel):
    start_time: datetime
    end_time: datetime
    score: float
    available: bool = True


class SchedulingSuggestion(BaseModel):
    job_id: int
    suggestions: list[TimeSlot] = Field(default_factory=list)
    constraints: SchedulingConstraints


# Request / response models for the scheduling router


class SuggestionRequest(BaseModel):
    preferred_date: Optional[datetime] = None
    constraints: SchedulingConstraints = Field(default_factory=SchedulingConstraints)


class RouteOptimizeRequest(BaseModel):
    job_ids: list[int] = Field(..., min_length=1)
    origin: Optional[Location] = None
    departure_time: Optional[datetime] = None


class RecurringJobRequest(BaseModel):
    base_job_id: int
    frequency: str
    start_date: datetime
    end_date: Optional[datetime] = None
    max_occurrences: Optional[int] = Field(None, ge=1)


class RecurringJobSeriesResponse(BaseModel):
    id: int
    base_job_id: int
    frequency: str
    next_occurrence: Optional[datetime]
    jobs_created: int
    upcoming_job_ids: list[int]

    class Config:
        from_attributes = True
