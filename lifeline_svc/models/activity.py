"""
Domain model for the dashboard's recent-activity feed.

Each feed entry belongs to one display category; the category decides the
entry's type tag, title and icon through a fixed lookup table.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from core.datetime_utils import format_iso
from models.lab_test import LabTestStatus


class ActivityCategory(Enum):
    """Display categories of the recent-activity feed."""

    PATIENT_REGISTERED = "patient_registered"
    TEST_COMPLETED = "test_completed"
    TEST_SCHEDULED = "test_scheduled"
    TEST_IN_PROGRESS = "test_in_progress"


@dataclass(frozen=True)
class ActivityStyle:
    """Fixed presentation of one activity category."""
    title: str
    icon: str
    icon_color: str


ACTIVITY_STYLES: Dict[ActivityCategory, ActivityStyle] = {
    ActivityCategory.PATIENT_REGISTERED: ActivityStyle(
        title="New patient registered", icon="fa-user-plus", icon_color="purple"
    ),
    ActivityCategory.TEST_COMPLETED: ActivityStyle(
        title="Test completed", icon="fa-check-circle", icon_color="green"
    ),
    ActivityCategory.TEST_SCHEDULED: ActivityStyle(
        title="Test scheduled", icon="fa-calendar", icon_color="orange"
    ),
    ActivityCategory.TEST_IN_PROGRESS: ActivityStyle(
        title="Test in progress", icon="fa-flask", icon_color="blue"
    ),
}

# Statuses not listed here (Scheduled, In Progress, Cancelled, anything
# unknown) fall into TEST_IN_PROGRESS
_STATUS_CATEGORIES: Dict[str, ActivityCategory] = {
    LabTestStatus.COMPLETED.value: ActivityCategory.TEST_COMPLETED,
    LabTestStatus.PENDING.value: ActivityCategory.TEST_SCHEDULED,
}


def category_for_status(status: str) -> ActivityCategory:
    """Map a raw test status to its feed category."""
    return _STATUS_CATEGORIES.get(status, ActivityCategory.TEST_IN_PROGRESS)


@dataclass
class Activity:
    """One entry of the recent-activity feed."""

    category: ActivityCategory
    description: str
    timestamp: Optional[datetime]

    @property
    def style(self) -> ActivityStyle:
        return ACTIVITY_STYLES[self.category]

    def to_dict(self) -> Dict[str, Any]:
        """Convert activity to the dictionary shape the dashboard expects."""
        return {
            "type": self.category.value,
            "title": self.style.title,
            "description": self.description,
            "timestamp": format_iso(self.timestamp) if self.timestamp else None,
            "icon": self.style.icon,
            "iconColor": self.style.icon_color,
        }
