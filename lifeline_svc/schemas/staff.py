"""
Pydantic schemas for staff listings.
"""
from typing import Optional

from pydantic import BaseModel, Field


class ReviewerResponse(BaseModel):
    """Schema for a reviewer joined with their department name."""
    reviewer_id: int = Field(..., description="Unique reviewer identifier")
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = None
    department_name: Optional[str] = Field(None, description="None when the reviewer has no department")
