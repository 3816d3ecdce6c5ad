"""
API routers module.

This module contains all API route definitions organized by domain.
"""
from api.routers.health import router as health_router
from api.routers.patients import router as patients_router
from api.routers.lab_tests import router as lab_tests_router
from api.routers.staff import router as staff_router
from api.routers.stats import router as stats_router

__all__ = ["health_router", "patients_router", "lab_tests_router", "staff_router", "stats_router"]
