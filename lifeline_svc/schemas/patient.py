"""
Pydantic schemas for patient-related API operations.
"""
from typing import Optional

from pydantic import BaseModel, Field

from schemas.common import ActionResponse, WritePayload


class PatientPayload(WritePayload):
    """Schema for registering or overwriting a patient.

    Registration requires first_name, last_name and contact_number; updates
    write every field as given, NULL for the ones left out.
    """

    REQUIRED_FIELDS = ("first_name", "last_name", "contact_number")

    first_name: Optional[str] = Field(None, description="Given name")
    last_name: Optional[str] = Field(None, description="Family name")
    date_of_birth: Optional[str] = Field(None, description="Date of birth (YYYY-MM-DD)")
    gender: Optional[str] = Field(None, description="Gender")
    contact_number: Optional[str] = Field(None, description="Phone number (unique)")
    email: Optional[str] = Field(None, description="Email address (unique)")
    address: Optional[str] = Field(None, description="Postal address")

    class Config:
        json_schema_extra = {
            "example": {
                "first_name": "Asha",
                "last_name": "Rao",
                "date_of_birth": "1990-04-12",
                "gender": "Female",
                "contact_number": "555-0101",
                "email": "asha.rao@example.com",
                "address": "12 Lake Road"
            }
        }


class PatientResponse(BaseModel):
    """Schema for a Patient row."""
    patient_id: int = Field(..., description="Unique patient identifier")
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    contact_number: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    registration_date: Optional[str] = Field(None, description="When the patient was registered")

    class Config:
        from_attributes = True


class PatientRegisteredResponse(ActionResponse):
    """Schema for a successful registration."""
    patient_id: int = Field(..., description="ID generated for the new patient")
