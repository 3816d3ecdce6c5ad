"""
Service layer for diagnostic test operations.

Architecture:
    API Layer (routers) → LabTestService → LabTestRepository → Database

Dependency Injection:
    LabTestService receives its repository via constructor injection.
    Use core.dependencies.get_lab_test_service() in routers with Depends().
"""
import logging
from typing import List

from core.exceptions import LabTestNotFoundError, MissingFieldsError
from models import LabTestStatus
from repositories import LabTestRepository
from schemas import LabTestResponse, LabTestUpdatePayload, ScheduleTestPayload

logger = logging.getLogger(__name__)


class LabTestService:
    """Service layer for scheduling, updating and removing tests."""

    def __init__(self, lab_test_repository: LabTestRepository):
        """
        Initialize the test service.

        Args:
            lab_test_repository: LabTestRepository instance for data access.
        """
        self._repo = lab_test_repository

    def get_tests(self) -> List[LabTestResponse]:
        """Get all tests, including cancelled ones."""
        return [LabTestResponse(**row) for row in self._repo.get_all()]

    def get_test(self, test_id: int) -> LabTestResponse:
        """
        Get a test by ID.

        Raises:
            LabTestNotFoundError: If no test with this ID exists.
        """
        row = self._repo.get_by_id(test_id)
        if row is None:
            raise LabTestNotFoundError(test_id=test_id)
        return LabTestResponse(**row)

    def schedule_test(self, payload: ScheduleTestPayload) -> None:
        """
        Book a new test.

        Raises:
            MissingFieldsError: If patient_id, doctor_id, test_name or test_date is absent.
        """
        missing = payload.missing_fields()
        if missing:
            raise MissingFieldsError(missing)

        self._repo.schedule(
            patient_id=payload.patient_id,
            doctor_id=payload.doctor_id,
            test_name=payload.test_name,
            test_date=payload.test_date,
        )

    def update_test(self, test_id: int, payload: LabTestUpdatePayload) -> None:
        """
        Record a test's status and report.

        Unknown status strings are stored as given.
        """
        if payload.status is not None and not LabTestStatus.is_known(payload.status):
            logger.warning(
                f"Storing unrecognized test status '{payload.status}'",
                extra={"test_id": test_id}
            )

        matched = self._repo.update_result(test_id, payload.status, payload.report_details)
        if not matched:
            logger.warning(f"Update matched no test (id={test_id})")

    def cancel_test(self, test_id: int) -> None:
        """Soft delete a test by marking it Cancelled."""
        matched = self._repo.cancel(test_id)
        if not matched:
            logger.warning(f"Cancel matched no test (id={test_id})")
        else:
            logger.info(f"Test cancelled (id={test_id})")

    def delete_test(self, test_id: int) -> None:
        """Remove a test permanently."""
        self._repo.delete(test_id)
