"""
Service layer for the dashboard: aggregate counts and the activity feed.

Architecture:
    API Layer (routers/stats.py) → DashboardService → StatsRepository → Database

Recent activity:
    The newest patients and the newest tests are fetched separately, each
    turned into Activity entries, merged into one list and sorted newest
    first. Both inputs are tiny (RECENT_FETCH_LIMIT rows each), so a plain
    sort over the concatenation is all the merge needs.
"""
import logging
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List

from core.datetime_utils import parse_datetime_safe
from models import Activity, ActivityCategory, LabTestStatus, category_for_status
from repositories import StatsRepository
from schemas import ActivityResponse, CountResponse, TestBreakdownResponse

logger = logging.getLogger(__name__)

RECENT_FETCH_LIMIT = 3
RECENT_ACTIVITY_LIMIT = 5

# Rows with a missing or unparseable date sort last
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _sort_key(activity: Activity) -> datetime:
    return activity.timestamp or _OLDEST


def patient_activity(row: Dict[str, Any]) -> Activity:
    """Build the feed entry for a newly registered patient."""
    return Activity(
        category=ActivityCategory.PATIENT_REGISTERED,
        description=f"{row['first_name']} {row['last_name']} - ID: {row['patient_id']}",
        timestamp=parse_datetime_safe(row.get("registration_date")),
    )


def lab_test_activity(row: Dict[str, Any]) -> Activity:
    """Build the feed entry for a test; its status picks the category."""
    return Activity(
        category=category_for_status(row.get("status")),
        description=f"{row['test_name']} for {row['first_name']} {row['last_name']}",
        timestamp=parse_datetime_safe(row.get("test_date")),
    )


def merge_activities(*feeds: List[Activity], limit: int = RECENT_ACTIVITY_LIMIT) -> List[Activity]:
    """
    Merge activity lists newest first and keep the first ``limit``.

    Entries with equal timestamps keep their input order (list.sort is stable).
    """
    merged = [activity for feed in feeds for activity in feed]
    merged.sort(key=_sort_key, reverse=True)
    return merged[:limit]


class DashboardService:
    """Read-only statistics for the dashboard."""

    def __init__(
        self,
        stats_repository: StatsRepository,
        today: Callable[[], date] = date.today,
    ):
        """
        Initialize the dashboard service.

        Args:
            stats_repository: StatsRepository instance for data access.
            today: Returns the current calendar day; replaceable in tests.
        """
        self._repo = stats_repository
        self._today = today

    def total_patients(self) -> CountResponse:
        return CountResponse(total=self._repo.count_patients())

    def pending_tests(self) -> CountResponse:
        return CountResponse(total=self._repo.count_tests_with_status([LabTestStatus.PENDING.value]))

    def total_staff(self) -> CountResponse:
        """Doctors and reviewers together."""
        return CountResponse(total=self._repo.count_doctors() + self._repo.count_reviewers())

    def test_breakdown(self) -> TestBreakdownResponse:
        """
        Count tests per dashboard group.

        Scheduled and In Progress share one group; "today" counts every test
        dated on the current day regardless of status.
        """
        return TestBreakdownResponse(
            pending=self._repo.count_tests_with_status([LabTestStatus.PENDING.value]),
            in_progress=self._repo.count_tests_with_status([
                LabTestStatus.SCHEDULED.value,
                LabTestStatus.IN_PROGRESS.value,
            ]),
            completed=self._repo.count_tests_with_status([LabTestStatus.COMPLETED.value]),
            today=self._repo.count_tests_on(self._today()),
        )

    def recent_activity(self) -> List[ActivityResponse]:
        """Get the newest registrations and tests as one feed, newest first."""
        patients = [patient_activity(row) for row in self._repo.get_recent_patients(RECENT_FETCH_LIMIT)]
        tests = [lab_test_activity(row) for row in self._repo.get_recent_tests(RECENT_FETCH_LIMIT)]

        feed = merge_activities(patients, tests)
        logger.debug(
            "Recent activity assembled",
            extra={"patients": len(patients), "tests": len(tests), "returned": len(feed)}
        )
        return [ActivityResponse(**activity.to_dict()) for activity in feed]
