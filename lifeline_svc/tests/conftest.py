"""
Shared pytest fixtures for API tests.

Key patterns:

1. Database Isolation: Each test gets a fresh temporary SQLite database
   with the development schema
2. DI Override: app.dependency_overrides swaps get_database for the test
   database; the real repository and service wiring runs on top of it
3. Seed helpers insert rows with explicit dates so ordering is deterministic

Fixture Hierarchy:
    temp_db → repositories → services → test_app → client
"""
import os
import tempfile
from typing import Any, Dict, Optional

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import text

# Point settings at an in-memory database before importing config modules
# This must happen before any config imports
os.environ.setdefault("DB_URL", "sqlite://")

from repositories.base import Database
from repositories import PatientRepository, LabTestRepository, StatsRepository
from services import PatientService, LabTestService
from core.exceptions import setup_exception_handlers
from core import dependencies as deps


@pytest.fixture
def temp_db():
    """
    Create a temporary database for testing.

    This fixture creates a fresh SQLite database in a temp file,
    ensuring complete isolation between tests.
    """
    fd, db_path = tempfile.mkstemp(suffix='.db')
    os.close(fd)

    db = Database(url=f"sqlite:///{db_path}", init_schema=True)
    yield db

    # Cleanup
    db.dispose()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def patient_repo(temp_db):
    return PatientRepository(db=temp_db)


@pytest.fixture
def lab_test_repo(temp_db):
    return LabTestRepository(db=temp_db)


@pytest.fixture
def stats_repo(temp_db):
    return StatsRepository(db=temp_db)


@pytest.fixture
def patient_service(patient_repo):
    """Create a PatientService with the test repository."""
    return PatientService(patient_repository=patient_repo)


@pytest.fixture
def lab_test_service(lab_test_repo):
    """Create a LabTestService with the test repository."""
    return LabTestService(lab_test_repository=lab_test_repo)


@pytest.fixture
def test_app(temp_db):
    """
    Create a FastAPI test app with dependency overrides.

    Uses the real routers and the real repository/service dependency
    chain; only the Database at the bottom is replaced.
    """
    from api.routers import (
        health_router,
        patients_router,
        lab_tests_router,
        staff_router,
        stats_router,
    )

    app = FastAPI(title="Lifeline Records API Test")

    # Register exception handlers (same as production)
    setup_exception_handlers(app)

    app.dependency_overrides[deps.get_database] = lambda: temp_db

    app.include_router(health_router)
    app.include_router(patients_router)
    app.include_router(lab_tests_router)
    app.include_router(staff_router)
    app.include_router(stats_router)

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
def client(test_app):
    """Create a test client for the API."""
    return TestClient(test_app)


# =============================================================================
# SEED HELPERS
# =============================================================================

def insert_row(db: Database, table: str, values: Dict[str, Any]) -> int:
    """Insert one row into a table and return its generated key."""
    columns = ", ".join(values)
    placeholders = ", ".join(f":{name}" for name in values)
    with db.transaction() as conn:
        result = conn.execute(
            text(f"INSERT INTO {table} ({columns}) VALUES ({placeholders})"),
            values
        )
        return result.lastrowid


def add_patient(
    db: Database,
    first_name: str = "Asha",
    last_name: str = "Rao",
    contact_number: str = "555-0101",
    email: Optional[str] = None,
    registration_date: str = "2024-01-01 09:00:00",
) -> int:
    return insert_row(db, "Patient", {
        "first_name": first_name,
        "last_name": last_name,
        "contact_number": contact_number,
        "email": email,
        "registration_date": registration_date,
    })


def add_department(db: Database, name: str = "Pathology") -> int:
    return insert_row(db, "Department", {"department_name": name})


def add_doctor(db: Database, first_name: str = "Meera", last_name: str = "Iyer",
               department_id: Optional[int] = None) -> int:
    return insert_row(db, "Doctor", {
        "first_name": first_name,
        "last_name": last_name,
        "specialization": "Hematology",
        "department_id": department_id,
    })


def add_reviewer(db: Database, first_name: str = "Ravi", last_name: str = "Nair",
                 role: str = "Senior Reviewer", department_id: Optional[int] = None) -> int:
    return insert_row(db, "Reviewer", {
        "first_name": first_name,
        "last_name": last_name,
        "role": role,
        "department_id": department_id,
    })


def add_test(db: Database, patient_id: int, doctor_id: int, test_name: str = "CBC",
             test_date: str = "2024-01-02", status: str = "Pending") -> int:
    return insert_row(db, "Test", {
        "patient_id": patient_id,
        "doctor_id": doctor_id,
        "test_name": test_name,
        "test_date": test_date,
        "status": status,
    })


@pytest.fixture
def doctor_id(temp_db):
    """A doctor to book tests with."""
    return add_doctor(temp_db)


@pytest.fixture
def patient_id(temp_db):
    """A registered patient."""
    return add_patient(temp_db)
