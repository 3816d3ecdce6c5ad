"""
Repository for dashboard aggregate queries.

Counts and "most recent" reads backing the /api/stats endpoints.
"""
import logging
from datetime import date
from typing import List, Dict, Any, Sequence

from sqlalchemy import bindparam, text

from repositories.base import Database, database_errors

logger = logging.getLogger(__name__)


class StatsRepository:
    """Repository for read-only dashboard statistics."""

    def __init__(self, db: Database):
        """
        Initialize the stats repository.

        Args:
            db: Database instance for data access.
                Injected via core.dependencies.get_stats_repository().
        """
        self._db = db

    def count_patients(self) -> int:
        """Count every patient."""
        with database_errors("count patients"):
            return int(self._db.scalar("SELECT COUNT(*) FROM Patient"))

    def count_doctors(self) -> int:
        """Count every doctor."""
        with database_errors("count doctors"):
            return int(self._db.scalar("SELECT COUNT(*) FROM Doctor"))

    def count_reviewers(self) -> int:
        """Count every reviewer."""
        with database_errors("count reviewers"):
            return int(self._db.scalar("SELECT COUNT(*) FROM Reviewer"))

    def count_tests_with_status(self, statuses: Sequence[str]) -> int:
        """
        Count tests whose status is any of the given values.

        Args:
            statuses: One or more status strings, matched exactly.
        """
        stmt = text(
            "SELECT COUNT(*) FROM Test WHERE status IN :statuses"
        ).bindparams(bindparam("statuses", expanding=True))

        with database_errors("count tests by status", statuses=list(statuses)):
            with self._db.connect() as conn:
                return int(conn.execute(stmt, {"statuses": list(statuses)}).scalar())

    def count_tests_on(self, day: date) -> int:
        """Count tests whose test_date falls on the given calendar day."""
        with database_errors("count tests on day", day=day.isoformat()):
            return int(self._db.scalar(
                "SELECT COUNT(*) FROM Test WHERE DATE(test_date) = :day",
                {"day": day.isoformat()}
            ))

    def get_recent_patients(self, limit: int) -> List[Dict[str, Any]]:
        """Get the most recently registered patients, newest first."""
        with database_errors("fetch recent patients"):
            return self._db.fetch_all("""
                SELECT patient_id, first_name, last_name, registration_date
                FROM Patient
                ORDER BY registration_date DESC
                LIMIT :limit
            """, {"limit": limit})

    def get_recent_tests(self, limit: int) -> List[Dict[str, Any]]:
        """Get the most recently dated tests with their patient's name, newest first."""
        with database_errors("fetch recent tests"):
            return self._db.fetch_all("""
                SELECT t.test_id, t.test_name, t.test_date, t.status,
                       p.first_name, p.last_name
                FROM Test t
                JOIN Patient p ON t.patient_id = p.patient_id
                ORDER BY t.test_date DESC
                LIMIT :limit
            """, {"limit": limit})
