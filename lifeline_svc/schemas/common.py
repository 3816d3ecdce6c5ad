"""
Pydantic schemas shared by several endpoints.
"""
from typing import Any, ClassVar, Dict, List, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator

from core.exceptions import InvalidPayloadError


class WritePayload(BaseModel):
    """
    Base class for write-endpoint bodies.

    Every field is optional so that absent fields reach the service's
    presence check (400) instead of FastAPI's schema validation (422).
    Empty strings, as sent by HTML forms, count as absent.
    """

    REQUIRED_FIELDS: ClassVar[Tuple[str, ...]] = ()

    class Config:
        extra = "ignore"
        coerce_numbers_to_str = True

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def from_request(cls, data: Dict[str, Any]):
        """
        Build the payload from a parsed request body.

        Raises:
            InvalidPayloadError: If a field cannot be coerced to its type.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            raise InvalidPayloadError(
                detail=f"Invalid value for: {', '.join(fields)}" if fields else None
            ) from e

    def missing_fields(self) -> List[str]:
        """Names of required fields that are absent or falsy."""
        return [name for name in self.REQUIRED_FIELDS if not getattr(self, name)]


class ActionResponse(BaseModel):
    """Schema for the outcome of a write operation."""
    success: bool = Field(..., description="Whether the operation succeeded")
    message: str = Field(..., description="Human-readable outcome")

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "message": "Test scheduled successfully"
            }
        }


class ErrorResponse(BaseModel):
    """Schema for error bodies produced by the exception handlers."""
    error: str = Field(..., description="Error message")
