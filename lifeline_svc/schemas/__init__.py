"""
Pydantic schemas for API request/response validation.

This module contains all Pydantic models used at API boundaries.
"""
from schemas.common import ActionResponse, ErrorResponse, WritePayload
from schemas.patient import PatientPayload, PatientResponse, PatientRegisteredResponse
from schemas.lab_test import ScheduleTestPayload, LabTestUpdatePayload, LabTestResponse
from schemas.staff import ReviewerResponse
from schemas.stats import CountResponse, TestBreakdownResponse, ActivityResponse

__all__ = [
    # Shared schemas
    "ActionResponse",
    "ErrorResponse",
    "WritePayload",
    # Patient schemas
    "PatientPayload",
    "PatientResponse",
    "PatientRegisteredResponse",
    # Test schemas
    "ScheduleTestPayload",
    "LabTestUpdatePayload",
    "LabTestResponse",
    # Staff schemas
    "ReviewerResponse",
    # Stats schemas
    "CountResponse",
    "TestBreakdownResponse",
    "ActivityResponse",
]
