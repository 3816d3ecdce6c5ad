"""
Service layer for business logic.

This module contains all business logic and orchestration services.
"""
from services.patient_service import PatientService
from services.lab_test_service import LabTestService
from services.staff_service import StaffService
from services.dashboard_service import DashboardService

__all__ = [
    "PatientService",
    "LabTestService",
    "StaffService",
    "DashboardService",
]
