"""
Repository layer for database access.

This module contains all database access operations, encapsulating SQL and data persistence logic.
"""
from repositories.base import Database
from repositories.patient_repository import PatientRepository
from repositories.lab_test_repository import LabTestRepository
from repositories.staff_repository import StaffRepository
from repositories.stats_repository import StatsRepository

__all__ = [
    "Database",
    "PatientRepository",
    "LabTestRepository",
    "StaffRepository",
    "StatsRepository",
]
