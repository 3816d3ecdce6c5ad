"""
Staff router - doctor and reviewer listings for the staff page.
"""
from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from core.dependencies import get_staff_service
from schemas import ReviewerResponse
from services import StaffService

router = APIRouter(prefix="/api", tags=["Staff"])


@router.get(
    "/doctors",
    response_model=List[Dict[str, Any]],
    summary="List all doctors",
)
def list_doctors(
    staff_service: StaffService = Depends(get_staff_service)
):
    return staff_service.get_doctors()


@router.get(
    "/reviewers",
    response_model=List[ReviewerResponse],
    summary="List all reviewers",
    description="Reviewers with their department name; department_name is null "
                "for reviewers without a department.",
)
def list_reviewers(
    staff_service: StaffService = Depends(get_staff_service)
):
    return staff_service.get_reviewers()
