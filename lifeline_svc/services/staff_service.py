"""
Service layer for staff listings.
"""
import logging
from typing import Any, Dict, List

from repositories import StaffRepository
from schemas import ReviewerResponse

logger = logging.getLogger(__name__)


class StaffService:
    """Read-only access to doctors and reviewers."""

    def __init__(self, staff_repository: StaffRepository):
        self._repo = staff_repository

    def get_doctors(self) -> List[Dict[str, Any]]:
        """Get all doctors with every column the store holds for them."""
        return self._repo.get_doctors()

    def get_reviewers(self) -> List[ReviewerResponse]:
        """Get all reviewers with their department name."""
        return [ReviewerResponse(**row) for row in self._repo.get_reviewers()]
