"""
Domain models for the records service.

This module contains internal domain models that are not tied to the API
boundary.
"""
from models.activity import Activity, ActivityCategory, ActivityStyle, ACTIVITY_STYLES, category_for_status
from models.lab_test import LabTestStatus

__all__ = [
    "Activity",
    "ActivityCategory",
    "ActivityStyle",
    "ACTIVITY_STYLES",
    "category_for_status",
    "LabTestStatus",
]
