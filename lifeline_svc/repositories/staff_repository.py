"""
Repository for staff (doctor and reviewer) reads.

Doctors and reviewers are read-only from this service's point of view.
"""
import logging
from typing import List, Dict, Any

from repositories.base import Database, database_errors

logger = logging.getLogger(__name__)


class StaffRepository:
    """Repository for doctor and reviewer queries."""

    def __init__(self, db: Database):
        self._db = db

    def get_doctors(self) -> List[Dict[str, Any]]:
        """Get every doctor row."""
        with database_errors("fetch doctors"):
            return self._db.fetch_all("SELECT * FROM Doctor")

    def get_reviewers(self) -> List[Dict[str, Any]]:
        """
        Get every reviewer with their department name.

        LEFT JOIN keeps reviewers without a department; their
        department_name is None.
        """
        with database_errors("fetch reviewers"):
            return self._db.fetch_all("""
                SELECT
                    r.reviewer_id,
                    r.first_name,
                    r.last_name,
                    r.role,
                    d.department_name
                FROM Reviewer r
                LEFT JOIN Department d ON r.department_id = d.department_id
            """)
