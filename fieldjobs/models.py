from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Property(Base):
    """Service location of a customer. Coordinates are optional until geocoded."""

    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, nullable=False, index=True)
    customer_id = Column(Integer, nullable=False, index=True)

    address_line1 = Column(String(255), nullable=False)
    city = Column(String(100), nullable=True)
    state = Column(String(50), nullable=True)
    postal_code = Column(String(20), nullable=True)

    # A property without both coordinates cannot be routed
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    jobs = relationship("Job", back_populates="property")

    @property
    def address(self) -> str:
        return ", ".join(part for part in (self.address_line1, self.city, self.state) if part)

    @property
    def is_geocoded(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class Job(Base):
    """A unit of scheduled field work"""

    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, nullable=False, index=True)
    job_number = Column(String(50), nullable=True, index=True)  # JOB-00001, per tenant

    customer_id = Column(Integer, nullable=False, index=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(String(20), default="medium", nullable=False)  # low, medium, high, urgent

    # Status workflow: pending → scheduled → in_progress → completed
    # on_hold pauses in_progress work; completed and cancelled are terminal
    status = Column(String(50), default="pending", nullable=False, index=True)

    # Scheduling
    scheduled_date = Column(DateTime, nullable=True, index=True)
    scheduled_time = Column(String(10), nullable=True)  # HH:MM format
    estimated_duration = Column(Integer, nullable=True)  # minutes

    # Actual execution times
    actual_start_time = Column(DateTime, nullable=True)
    actual_end_time = Column(DateTime, nullable=True)

    # Assignment
    assigned_user_id = Column(Integer, nullable=True, index=True)
    crew_id = Column(Integer, nullable=True, index=True)
    crew_size = Column(Integer, default=1, nullable=False)
    required_equipment = Column(JSON, default=list, nullable=True)  # equipment ids
    weather_dependent = Column(Boolean, default=False, nullable=False)

    # Recurring series lineage
    parent_job_id = Column(Integer, ForeignKey("jobs.id"), nullable=True)
    recurring_schedule = Column(String(20), nullable=True)  # weekly, biweekly, monthly, quarterly

    # Field execution record
    notes = Column(Text, nullable=True)
    gps_check_in = Column(JSON, nullable=True)  # {latitude, longitude, address, timestamp}
    gps_check_out = Column(JSON, nullable=True)
    completion_photos = Column(JSON, default=list, nullable=True)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    property = relationship("Property", back_populates="jobs")


class RecurringJobSeries(Base):
    """Generator record binding a base job to a cadence"""

    __tablename__ = "recurring_job_series"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, nullable=False, index=True)
    base_job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False)
    frequency = Column(String(20), nullable=False)
    next_occurrence = Column(DateTime, nullable=True)
    jobs_created = Column(Integer, default=0, nullable=False)
    upcoming_job_ids = Column(JSON, default=list, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
