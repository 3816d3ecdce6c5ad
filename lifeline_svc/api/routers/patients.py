"""
Patients router - patient management endpoints.

Architecture:
    HTTP Request → Router (this file) → PatientService → PatientRepository → Database

Handlers that touch the database are plain ``def`` functions: FastAPI runs
them in its threadpool, so a slow query never blocks the event loop. Bodies
(JSON or form) are read by the async get_request_payload dependency.

Error mapping (core/exceptions.py):
    MissingFieldsError / DuplicatePatientError / InvalidPayloadError → 400
    PatientNotFoundError → 404
    DatabaseError → 500
"""
import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from core.dependencies import get_patient_service, get_request_payload
from schemas import ActionResponse, PatientPayload, PatientRegisteredResponse, PatientResponse
from services import PatientService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/patients",
    tags=["Patients"],
)


@router.get(
    "",
    response_model=List[PatientResponse],
    summary="List all patients",
)
def list_patients(
    patient_service: PatientService = Depends(get_patient_service)
):
    """Get every patient row."""
    return patient_service.get_patients()


@router.post(
    "/register",
    response_model=PatientRegisteredResponse,
    summary="Register a new patient",
    description="Registers a patient through the RegisterNewPatient procedure. "
                "first_name, last_name and contact_number are required; "
                "contact_number and email must be unique.",
)
def register_patient(
    data: Dict[str, Any] = Depends(get_request_payload),
    patient_service: PatientService = Depends(get_patient_service)
):
    """
    Register a new patient.

    Returns the generated patient_id. Raises 400 when a required field is
    missing or the contact number / email is already registered.
    """
    payload = PatientPayload.from_request(data)
    patient_id = patient_service.register_patient(payload)
    return PatientRegisteredResponse(
        success=True,
        message="Patient registered successfully",
        patient_id=patient_id,
    )


@router.get(
    "/{patient_id}",
    response_model=PatientResponse,
    summary="Get a patient",
)
def get_patient(
    patient_id: int,
    patient_service: PatientService = Depends(get_patient_service)
):
    """Get one patient by ID; 404 if absent."""
    return patient_service.get_patient(patient_id)


@router.put(
    "/{patient_id}",
    response_model=ActionResponse,
    summary="Update a patient",
    description="Overwrites every mutable field of the patient. Fields left out are cleared.",
)
def update_patient(
    patient_id: int,
    data: Dict[str, Any] = Depends(get_request_payload),
    patient_service: PatientService = Depends(get_patient_service)
):
    payload = PatientPayload.from_request(data)
    patient_service.update_patient(patient_id, payload)
    return ActionResponse(success=True, message="Patient updated successfully")


@router.delete(
    "/{patient_id}",
    response_model=ActionResponse,
    summary="Delete a patient",
    description="Deletes the patient and every test booked for them.",
)
def delete_patient(
    patient_id: int,
    patient_service: PatientService = Depends(get_patient_service)
):
    patient_service.delete_patient(patient_id)
    return ActionResponse(success=True, message="Patient deleted successfully")
