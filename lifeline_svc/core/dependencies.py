"""
FastAPI Dependency Injection configuration for Lifeline Records API.

This module provides the dependency injection (DI) infrastructure:
- Clean separation between API, Service, and Repository layers
- Easy testing with fake dependencies via app.dependency_overrides
- One shared Database (connection pool) handed down explicitly

Architecture Flow:
    API Layer (Routers)
         ↓ Depends()
    Service Layer (Business Logic)
         ↓ Injected
    Repository Layer (Data Access)
         ↓ Injected
    Database (SQLAlchemy engine + pool)

Testing:
    # Override dependencies in tests
    app.dependency_overrides[get_database] = lambda: test_database
"""
import logging
from typing import Any, Dict, Optional

from fastapi import Depends, Request
from starlette.datastructures import UploadFile

from core.config import settings
from core.exceptions import InvalidPayloadError
from repositories import (
    Database,
    PatientRepository,
    LabTestRepository,
    StaffRepository,
    StatsRepository,
)
from services import PatientService, LabTestService, StaffService, DashboardService

logger = logging.getLogger(__name__)


# =============================================================================
# DATABASE DEPENDENCY
# =============================================================================

_database_instance: Optional[Database] = None


def get_database() -> Database:
    """
    Get the database instance.

    Created on first use (normally during app startup) and reused by every
    request, so all requests share one connection pool.

    Returns:
        Database: The configured database instance.
    """
    global _database_instance

    if _database_instance is None:
        _database_instance = Database(
            url=settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=settings.db_pool_recycle,
            use_stored_procedures=settings.db_use_stored_procedures,
        )
        logger.info("Database initialized successfully")

    return _database_instance


def reset_database() -> None:
    """
    Dispose of the database instance.

    Called on shutdown; tests use it to start from a fresh instance.
    """
    global _database_instance
    if _database_instance is not None:
        _database_instance.dispose()
    _database_instance = None


# =============================================================================
# REPOSITORY DEPENDENCIES
# =============================================================================

def get_patient_repository(db: Database = Depends(get_database)) -> PatientRepository:
    """Get a PatientRepository instance with database injected."""
    return PatientRepository(db=db)


def get_lab_test_repository(db: Database = Depends(get_database)) -> LabTestRepository:
    """Get a LabTestRepository instance with database injected."""
    return LabTestRepository(db=db)


def get_staff_repository(db: Database = Depends(get_database)) -> StaffRepository:
    """Get a StaffRepository instance with database injected."""
    return StaffRepository(db=db)


def get_stats_repository(db: Database = Depends(get_database)) -> StatsRepository:
    """Get a StatsRepository instance with database injected."""
    return StatsRepository(db=db)


# =============================================================================
# SERVICE DEPENDENCIES
# =============================================================================

def get_patient_service(
    patient_repo: PatientRepository = Depends(get_patient_repository),
) -> PatientService:
    """Get a PatientService instance with repository injected."""
    return PatientService(patient_repository=patient_repo)


def get_lab_test_service(
    lab_test_repo: LabTestRepository = Depends(get_lab_test_repository),
) -> LabTestService:
    """Get a LabTestService instance with repository injected."""
    return LabTestService(lab_test_repository=lab_test_repo)


def get_staff_service(
    staff_repo: StaffRepository = Depends(get_staff_repository),
) -> StaffService:
    """Get a StaffService instance with repository injected."""
    return StaffService(staff_repository=staff_repo)


def get_dashboard_service(
    stats_repo: StatsRepository = Depends(get_stats_repository),
) -> DashboardService:
    """Get a DashboardService instance with repository injected."""
    return DashboardService(stats_repository=stats_repo)


# =============================================================================
# REQUEST PAYLOAD
# =============================================================================

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def get_request_payload(request: Request) -> Dict[str, Any]:
    """
    Read a write request's body as a flat dict.

    Accepts JSON and HTML form bodies. An empty body yields an empty dict so
    the service's presence check reports the missing fields.

    Raises:
        InvalidPayloadError: If the body is not valid JSON or not a JSON object.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    if content_type in FORM_CONTENT_TYPES:
        form = await request.form()
        return {
            key: value for key, value in form.items()
            if not isinstance(value, UploadFile)
        }

    body = await request.body()
    if not body.strip():
        return {}

    try:
        payload = await request.json()
    except ValueError as e:
        raise InvalidPayloadError(detail="Request body is not valid JSON") from e

    if not isinstance(payload, dict):
        raise InvalidPayloadError(detail="Request body must be a JSON object")
    return payload
