"""
Service layer for patient operations.

This service contains business logic for patient management
and orchestrates calls to repositories.

Architecture:
    API Layer (routers) → PatientService → PatientRepository → Database

Dependency Injection:
    PatientService receives its repository via constructor injection.
    Use core.dependencies.get_patient_service() in routers with Depends().
"""
import logging
from typing import List

from core.exceptions import MissingFieldsError, PatientNotFoundError
from repositories import PatientRepository
from schemas import PatientPayload, PatientResponse

logger = logging.getLogger(__name__)


class PatientService:
    """
    Service layer for patient operations.

    Handles presence validation, not-found detection and coordination with
    the repository layer. Uniqueness is left to the store.
    """

    def __init__(self, patient_repository: PatientRepository):
        """
        Initialize the patient service.

        Args:
            patient_repository: PatientRepository instance for data access.
                               Injected via core.dependencies.get_patient_service().
        """
        self._repo = patient_repository

    def get_patients(self) -> List[PatientResponse]:
        """Get all patients."""
        return [PatientResponse(**row) for row in self._repo.get_all()]

    def get_patient(self, patient_id: int) -> PatientResponse:
        """
        Get a patient by ID.

        Raises:
            PatientNotFoundError: If no patient with this ID exists.
        """
        row = self._repo.get_by_id(patient_id)
        if row is None:
            raise PatientNotFoundError(patient_id=patient_id)
        return PatientResponse(**row)

    def register_patient(self, payload: PatientPayload) -> int:
        """
        Register a new patient.

        Returns:
            int: The generated patient ID.

        Raises:
            MissingFieldsError: If first_name, last_name or contact_number is absent.
            DuplicatePatientError: If contact_number or email is already registered.
        """
        missing = payload.missing_fields()
        if missing:
            raise MissingFieldsError(missing)

        logger.info(f"Registering patient: {payload.first_name} {payload.last_name}")
        return self._repo.register(payload.model_dump())

    def update_patient(self, patient_id: int, payload: PatientPayload) -> None:
        """
        Overwrite a patient's details.

        Raises:
            DuplicatePatientError: If the new contact_number or email is taken.
        """
        matched = self._repo.update(patient_id, payload.model_dump())
        if not matched:
            logger.warning(f"Update matched no patient (id={patient_id})")
        else:
            logger.info(f"Patient updated (id={patient_id})")

    def delete_patient(self, patient_id: int) -> None:
        """Delete a patient together with their tests."""
        logger.info(f"Deleting patient (id={patient_id})")
        self._repo.delete(patient_id)
