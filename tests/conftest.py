"""
Shared test fixtures.

Provides: in-memory SQLite session, seeded properties, JobService, FastAPI TestClient
"""

import os
from datetime import datetime

# Must be set before fieldjobs.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DB_SLOW_QUERY_THRESHOLD", "0")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fieldjobs.database import Base, get_db
from fieldjobs.domain.jobs.service import JobService
from fieldjobs.main import app
from fieldjobs.models import Job, Property

TENANT_ID = 1


@pytest.fixture
def db_session():
    """In-memory database with all tables, torn down per test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def properties(db_session):
    """Two geocoded properties and one without coordinates, all for customer 10"""
    props = [
        Property(
            tenant_id=TENANT_ID,
            customer_id=10,
            address_line1="1 Main St",
            city="Springfield",
            state="IL",
            latitude=0.0,
            longitude=1.0,
        ),
        Property(
            tenant_id=TENANT_ID,
            customer_id=10,
            address_line1="2 Oak Ave",
            city="Springfield",
            state="IL",
            latitude=0.0,
            longitude=2.0,
        ),
        Property(tenant_id=TENANT_ID, customer_id=10, address_line1="3 Unmapped Rd"),
    ]
    db_session.add_all(props)
    db_session.commit()
    for prop in props:
        db_session.refresh(prop)
    return props


@pytest.fixture
def make_job(db_session, properties):
    """Factory persisting a job with sensible defaults"""

    def _make_job(**overrides):
        values = {
            "tenant_id": TENANT_ID,
            "job_number": None,
            "customer_id": 10,
            "property_id": properties[0].id,
            "title": "Lawn service",
            "status": "pending",
            "priority": "medium",
            "crew_size": 1,
            "required_equipment": [],
            "completion_photos": [],
        }
        values.update(overrides)
        job = Job(**values)
        db_session.add(job)
        db_session.commit()
        db_session.refresh(job)
        return job

    return _make_job


@pytest.fixture
def events():
    return []


@pytest.fixture
def job_service(db_session, events):
    """JobService recording emitted events instead of logging them"""
    return JobService(db_session, on_event=lambda event, job: events.append((event, job.id)))


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def tenant_headers():
    return {"X-Tenant-ID": str(TENANT_ID)}


def at(day: int, hour: int = 9, minute: int = 0, month: int = 1) -> datetime:
    """Naive 2024 datetime shorthand"""
    return datetime(2024, month, day, hour, minute)
