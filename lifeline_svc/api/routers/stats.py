"""
Stats router - read-only aggregates for the dashboard.
"""
from typing import List

from fastapi import APIRouter, Depends

from core.dependencies import get_dashboard_service
from schemas import ActivityResponse, CountResponse, TestBreakdownResponse
from services import DashboardService

router = APIRouter(prefix="/api/stats", tags=["Dashboard"])


@router.get("/total-patients", response_model=CountResponse, summary="Number of patients")
def total_patients(dashboard: DashboardService = Depends(get_dashboard_service)):
    return dashboard.total_patients()


@router.get("/pending-tests", response_model=CountResponse, summary="Number of pending tests")
def pending_tests(dashboard: DashboardService = Depends(get_dashboard_service)):
    return dashboard.pending_tests()


@router.get("/total-staff", response_model=CountResponse, summary="Doctors plus reviewers")
def total_staff(dashboard: DashboardService = Depends(get_dashboard_service)):
    return dashboard.total_staff()


@router.get(
    "/test-breakdown",
    response_model=TestBreakdownResponse,
    summary="Tests by status group",
    description="pending: Pending; inProgress: Scheduled or In Progress; "
                "completed: Completed; today: tests dated today.",
)
def test_breakdown(dashboard: DashboardService = Depends(get_dashboard_service)):
    return dashboard.test_breakdown()


@router.get(
    "/recent-activity",
    response_model=List[ActivityResponse],
    summary="Latest registrations and tests",
    description="Up to 5 entries merged from the 3 newest patients and the 3 newest tests, newest first.",
)
def recent_activity(dashboard: DashboardService = Depends(get_dashboard_service)):
    return dashboard.recent_activity()
