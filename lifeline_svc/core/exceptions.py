"""
Shared exception classes and error handling utilities for Lifeline Records API.

This module provides:
- Custom exception hierarchy for domain-specific errors
- Consistent error response formatting
- Exception handlers for FastAPI integration

Usage:
    from core.exceptions import PatientNotFoundError, DuplicatePatientError

    # In service layer - raise domain exceptions
    raise PatientNotFoundError(patient_id=42)

    # In FastAPI - register handlers via setup_exception_handlers(app)
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# =============================================================================
# BASE EXCEPTION CLASSES
# =============================================================================

class LifelineError(Exception):
    """
    Base exception for all Lifeline domain errors.

    All custom exceptions should inherit from this class.
    Provides consistent error structure with status code and detail message.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "An unexpected error occurred"

    def __init__(
        self,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any
    ):
        """
        Initialize the exception.

        Args:
            detail: Human-readable error message. Uses class default if not provided.
            status_code: HTTP status code. Uses class default if not provided.
            **kwargs: Additional context, written to the log only.
        """
        self.detail = detail or self.__class__.detail
        self.status_code = status_code or self.__class__.status_code
        self.context = kwargs
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        return {"error": self.detail}


# =============================================================================
# REQUEST EXCEPTIONS
# =============================================================================

class MissingFieldsError(LifelineError):
    """Raised when a write request lacks one or more required fields."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Missing required fields"

    def __init__(self, missing: List[str], **kwargs: Any):
        self.missing = list(missing)
        detail = f"Missing required fields: {', '.join(self.missing)}"
        super().__init__(detail=detail, missing=self.missing, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["missing"] = self.missing
        return result


class InvalidPayloadError(LifelineError):
    """Raised when a request body cannot be parsed or coerced."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid request body"


# =============================================================================
# PATIENT EXCEPTIONS
# =============================================================================

class PatientNotFoundError(LifelineError):
    """Raised when a patient is not found in the database."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Patient not found"

    def __init__(self, patient_id: Optional[int] = None, **kwargs: Any):
        detail = f"Patient {patient_id} not found" if patient_id is not None else self.detail
        super().__init__(detail=detail, patient_id=patient_id, **kwargs)


class DuplicatePatientError(LifelineError):
    """Raised when a write collides with a unique contact number or email."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "A patient with this contact number or email already exists"


# =============================================================================
# TEST EXCEPTIONS
# =============================================================================

class LabTestNotFoundError(LifelineError):
    """Raised when a diagnostic test is not found."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Test not found"

    def __init__(self, test_id: Optional[int] = None, **kwargs: Any):
        detail = f"Test {test_id} not found" if test_id is not None else self.detail
        super().__init__(detail=detail, test_id=test_id, **kwargs)


# =============================================================================
# DATABASE EXCEPTIONS
# =============================================================================

class DatabaseError(LifelineError):
    """
    Raised when a database operation fails.

    The response body is always the generic "Database error"; the operation
    name travels in the log context only.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Database error"

    def __init__(self, operation: Optional[str] = None, **kwargs: Any):
        super().__init__(operation=operation, **kwargs)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

async def lifeline_exception_handler(
    request: Request,
    exc: LifelineError
) -> JSONResponse:
    """
    Handle LifelineError exceptions and return consistent JSON responses.

    Server-side failures are logged at ERROR, client errors at WARNING.
    """
    log_level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        log_level,
        f"{type(exc).__name__}: {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
            "context": exc.context
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle unexpected exceptions with a generic error response.

    Logs the full exception; the body is the one DatabaseError uses.
    """
    logger.exception(
        f"Unhandled exception: {exc}",
        extra={
            "path": request.url.path,
            "method": request.method
        }
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=DatabaseError().to_dict()
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(LifelineError, lifeline_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
