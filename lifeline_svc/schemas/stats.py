"""
Pydantic schemas for dashboard statistics.

Field names follow the dashboard's camelCase keys through aliases.
"""
from typing import Optional

from pydantic import BaseModel, Field


class CountResponse(BaseModel):
    """Schema for a single count."""
    total: int = Field(..., ge=0, description="Number of matching rows")


class TestBreakdownResponse(BaseModel):
    """Schema for test counts grouped by status."""
    pending: int = Field(..., ge=0, description="Tests with status Pending")
    in_progress: int = Field(..., ge=0, alias="inProgress", description="Tests Scheduled or In Progress")
    completed: int = Field(..., ge=0, description="Tests with status Completed")
    today: int = Field(..., ge=0, description="Tests dated today, any status")

    class Config:
        populate_by_name = True


class ActivityResponse(BaseModel):
    """Schema for one recent-activity entry."""
    type: str = Field(..., description="Activity type tag, e.g. patient_registered")
    title: str
    description: str
    timestamp: Optional[str] = Field(None, description="ISO 8601 UTC timestamp; null when the row has no usable date")
    icon: str
    icon_color: str = Field(..., alias="iconColor")

    class Config:
        populate_by_name = True
