"""
Repository for diagnostic test database operations.

Architecture:
    LabTestRepository is the data access layer for rows of the Test table.
    It should be injected via core.dependencies.get_lab_test_repository().

All SQL is encapsulated in this repository - no SQL in service or API layers.
"""
import logging
from typing import Optional, List, Dict, Any

from sqlalchemy import text

from repositories.base import Database, database_errors

logger = logging.getLogger(__name__)

# Status written by the scheduling fallback, matching what ScheduleNewTest stores
DEFAULT_SCHEDULED_STATUS = "Pending"
CANCELLED_STATUS = "Cancelled"


class LabTestRepository:
    """
    Repository for diagnostic test CRUD operations.

    Scheduling and permanent deletion go through the ScheduleNewTest and
    DeleteTest stored procedures when the store has them.
    """

    def __init__(self, db: Database):
        """
        Initialize the test repository.

        Args:
            db: Database instance for data access.
                Injected via core.dependencies.get_lab_test_repository().
        """
        self._db = db

    def get_all(self) -> List[Dict[str, Any]]:
        """Get every test row."""
        with database_errors("fetch tests"):
            return self._db.fetch_all("SELECT * FROM Test")

    def get_by_id(self, test_id: int) -> Optional[Dict[str, Any]]:
        """Get a test by ID, or None if not found."""
        with database_errors("fetch test", test_id=test_id):
            return self._db.fetch_one(
                "SELECT * FROM Test WHERE test_id = :test_id",
                {"test_id": test_id}
            )

    def schedule(self, patient_id: int, doctor_id: int, test_name: str, test_date: str) -> None:
        """
        Book a test for a patient with a doctor.

        Raises:
            DatabaseError: On store failure, including unknown patient or doctor IDs.
        """
        params = {
            "patient_id": patient_id,
            "doctor_id": doctor_id,
            "test_name": test_name,
            "test_date": test_date,
        }

        with database_errors("schedule test", patient_id=patient_id, doctor_id=doctor_id):
            with self._db.transaction() as conn:
                if self._db.use_stored_procedures:
                    conn.execute(text(
                        "CALL ScheduleNewTest(:patient_id, :doctor_id, :test_name, :test_date)"
                    ), params)
                else:
                    conn.execute(text("""
                        INSERT INTO Test (patient_id, doctor_id, test_name, test_date, status)
                        VALUES (:patient_id, :doctor_id, :test_name, :test_date, :status)
                    """), {**params, "status": DEFAULT_SCHEDULED_STATUS})

        logger.info("Test scheduled", extra={"patient_id": patient_id, "test_name": test_name})

    def update_result(self, test_id: int, status: Optional[str], report_details: Optional[str]) -> int:
        """
        Set a test's status and report details.

        Returns:
            int: Number of rows matched.
        """
        with database_errors("update test", test_id=test_id):
            return self._db.execute("""
                UPDATE Test
                SET status = :status, report_details = :report_details
                WHERE test_id = :test_id
            """, {"status": status, "report_details": report_details, "test_id": test_id})

    def cancel(self, test_id: int) -> int:
        """Soft delete: flip status to Cancelled, keeping the row."""
        with database_errors("cancel test", test_id=test_id):
            return self._db.execute(
                "UPDATE Test SET status = :status WHERE test_id = :test_id",
                {"status": CANCELLED_STATUS, "test_id": test_id}
            )

    def delete(self, test_id: int) -> None:
        """Hard delete a test row."""
        params = {"test_id": test_id}

        with database_errors("delete test", test_id=test_id):
            with self._db.transaction() as conn:
                if self._db.use_stored_procedures:
                    conn.execute(text("CALL DeleteTest(:test_id)"), params)
                else:
                    conn.execute(text("DELETE FROM Test WHERE test_id = :test_id"), params)

        logger.info("Test deleted", extra={"test_id": test_id})
