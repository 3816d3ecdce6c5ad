"""
Repository for patient database operations.

Architecture:
    PatientRepository is the data access layer for patients.
    It should be injected via core.dependencies.get_patient_repository().

All SQL is encapsulated in this repository - no SQL in service or API layers.
Every statement is parameterized; request values never reach the SQL text.
"""
import logging
from typing import Optional, List, Dict, Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from core.exceptions import DatabaseError, DuplicatePatientError
from repositories.base import Database, database_errors, is_unique_violation

logger = logging.getLogger(__name__)

PATIENT_FIELDS = (
    "first_name",
    "last_name",
    "date_of_birth",
    "gender",
    "contact_number",
    "email",
    "address",
)


class PatientRepository:
    """
    Repository for patient CRUD operations.

    Registration and deletion go through the RegisterNewPatient and
    DeletePatient stored procedures when the store has them; otherwise the
    same statements run inside one transaction.
    """

    def __init__(self, db: Database):
        """
        Initialize the patient repository.

        Args:
            db: Database instance for data access.
                Injected via core.dependencies.get_patient_repository().
        """
        self._db = db

    def get_all(self) -> List[Dict[str, Any]]:
        """Get every patient row."""
        with database_errors("fetch patients"):
            return self._db.fetch_all("SELECT * FROM Patient")

    def get_by_id(self, patient_id: int) -> Optional[Dict[str, Any]]:
        """
        Get a patient by ID.

        Returns:
            Optional[dict]: Patient row or None if not found.
        """
        with database_errors("fetch patient", patient_id=patient_id):
            return self._db.fetch_one(
                "SELECT * FROM Patient WHERE patient_id = :patient_id",
                {"patient_id": patient_id}
            )

    def register(self, fields: Dict[str, Any]) -> int:
        """
        Register a new patient and return the generated patient_id.

        Args:
            fields: Values for every column in PATIENT_FIELDS (missing keys are NULL).

        Returns:
            int: The new patient's ID.

        Raises:
            DuplicatePatientError: If contact_number or email is already taken.
            DatabaseError: On any other store failure.
        """
        params = {name: fields.get(name) for name in PATIENT_FIELDS}

        with database_errors("register patient"):
            try:
                with self._db.transaction() as conn:
                    if self._db.use_stored_procedures:
                        # The OUT parameter lands in a session variable, so the
                        # follow-up SELECT must reuse the same connection
                        conn.execute(text("""
                            CALL RegisterNewPatient(
                                :first_name, :last_name, :date_of_birth, :gender,
                                :contact_number, :email, :address, @patient_id
                            )
                        """), params)
                        patient_id = conn.execute(text("SELECT @patient_id")).scalar()
                    else:
                        result = conn.execute(text("""
                            INSERT INTO Patient
                            (first_name, last_name, date_of_birth, gender,
                             contact_number, email, address, registration_date)
                            VALUES (:first_name, :last_name, :date_of_birth, :gender,
                                    :contact_number, :email, :address, CURRENT_TIMESTAMP)
                        """), params)
                        patient_id = result.lastrowid
            except IntegrityError as e:
                if is_unique_violation(e):
                    raise DuplicatePatientError(contact_number=params["contact_number"]) from e
                raise

        if patient_id is None:
            logger.error("Patient registration returned no patient_id")
            raise DatabaseError(operation="register patient")

        logger.info("Patient registered", extra={"patient_id": patient_id})
        return int(patient_id)

    def update(self, patient_id: int, fields: Dict[str, Any]) -> int:
        """
        Overwrite every mutable column of a patient.

        Returns:
            int: Number of rows matched.

        Raises:
            DuplicatePatientError: If the new contact_number or email is taken.
        """
        params = {name: fields.get(name) for name in PATIENT_FIELDS}
        params["patient_id"] = patient_id

        with database_errors("update patient", patient_id=patient_id):
            try:
                return self._db.execute("""
                    UPDATE Patient
                    SET first_name = :first_name,
                        last_name = :last_name,
                        date_of_birth = :date_of_birth,
                        gender = :gender,
                        contact_number = :contact_number,
                        email = :email,
                        address = :address
                    WHERE patient_id = :patient_id
                """, params)
            except IntegrityError as e:
                if is_unique_violation(e):
                    raise DuplicatePatientError(patient_id=patient_id) from e
                raise

    def delete(self, patient_id: int) -> None:
        """Delete a patient and, with it, every test booked for them."""
        params = {"patient_id": patient_id}

        with database_errors("delete patient", patient_id=patient_id):
            with self._db.transaction() as conn:
                if self._db.use_stored_procedures:
                    conn.execute(text("CALL DeletePatient(:patient_id)"), params)
                else:
                    conn.execute(text("DELETE FROM Test WHERE patient_id = :patient_id"), params)
                    conn.execute(text("DELETE FROM Patient WHERE patient_id = :patient_id"), params)

        logger.info("Patient deleted", extra={"patient_id": patient_id})
