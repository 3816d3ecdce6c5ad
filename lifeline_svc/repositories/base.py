"""
Base database connection and schema helpers.

This module wraps a SQLAlchemy engine whose QueuePool is the one connection
pool shared by every in-flight request. Repositories receive a Database
through their constructors; nothing here is a module-level singleton.

IMPORTANT: Database instantiation should be done through the DI layer.
Use core.dependencies.get_database() instead of instantiating directly.
"""
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection, Engine, make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.datetime_utils import serialize_db_value
from core.exceptions import DatabaseError

logger = logging.getLogger(__name__)

# MySQL ER_DUP_ENTRY
MYSQL_DUPLICATE_ENTRY = 1062


# =============================================================================
# DEVELOPMENT SCHEMA
# =============================================================================
# The production schema (and its stored procedures) lives in MySQL and is
# owned elsewhere. These statements mirror its tables closely enough for
# SQLite-backed development databases and the test suite.

SQLITE_SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS Department (
        department_id INTEGER PRIMARY KEY AUTOINCREMENT,
        department_name TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS Patient (
        patient_id INTEGER PRIMARY KEY AUTOINCREMENT,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        date_of_birth DATE,
        gender TEXT,
        contact_number TEXT NOT NULL UNIQUE,
        email TEXT UNIQUE,
        address TEXT,
        registration_date DATETIME DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS Doctor (
        doctor_id INTEGER PRIMARY KEY AUTOINCREMENT,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        specialization TEXT,
        contact_number TEXT,
        email TEXT,
        department_id INTEGER REFERENCES Department(department_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS Reviewer (
        reviewer_id INTEGER PRIMARY KEY AUTOINCREMENT,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        role TEXT,
        department_id INTEGER REFERENCES Department(department_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS Test (
        test_id INTEGER PRIMARY KEY AUTOINCREMENT,
        patient_id INTEGER NOT NULL REFERENCES Patient(patient_id),
        doctor_id INTEGER NOT NULL REFERENCES Doctor(doctor_id),
        test_name TEXT NOT NULL,
        test_date DATE NOT NULL,
        status TEXT NOT NULL DEFAULT 'Pending',
        report_details TEXT
    )
    """,
]


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """SQLite ignores REFERENCES clauses unless asked per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def is_unique_violation(exc: IntegrityError) -> bool:
    """
    Tell a unique-constraint violation apart from other integrity errors.

    MySQL reports error code 1062; SQLite only says so in the message.
    """
    orig = getattr(exc, "orig", None)
    args = getattr(orig, "args", ())
    if args and args[0] == MYSQL_DUPLICATE_ENTRY:
        return True
    return "UNIQUE constraint failed" in str(orig)


@contextmanager
def database_errors(operation: str, **context: Any) -> Iterator[None]:
    """
    Translate driver failures into DatabaseError.

    Domain exceptions raised inside the block pass through untouched, so
    repositories can map specific integrity errors before this catches
    the rest.

    Usage:
        with database_errors("fetch patients"):
            return self._db.fetch_all("SELECT * FROM Patient")
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(
            f"Database error during {operation}: {e}",
            exc_info=True,
            extra={"operation": operation, **context}
        )
        raise DatabaseError(operation=operation, **context) from e


class Database:
    """
    Connection pool manager for the relational store.

    Features:
    - Bounded QueuePool shared across requests (pool_size + max_overflow)
    - pool_pre_ping to transparently replace dropped connections
    - Foreign key enforcement on SQLite
    - Rows returned as plain dicts with JSON-friendly date values

    Usage:
        # Via dependency injection (recommended):
        from core.dependencies import get_database
        db = get_database()

        # Direct instantiation (for testing):
        db = Database(url="sqlite:////tmp/test.db", init_schema=True)
    """

    def __init__(
        self,
        url: str,
        pool_size: int = 10,
        max_overflow: int = 5,
        pool_recycle: int = 300,
        use_stored_procedures: bool = True,
        init_schema: bool = False,
    ):
        """
        Initialize the engine.

        Args:
            url: SQLAlchemy database URL.
            pool_size: Connections kept open in the pool.
            max_overflow: Extra connections allowed under burst load.
            pool_recycle: Seconds before a connection is replaced.
            use_stored_procedures: Call the store's procedures for register,
                schedule and delete. Ignored on engines without procedures.
            init_schema: Create the development tables (SQLite only).
        """
        self.url = make_url(url)
        self.backend = self.url.get_backend_name()

        engine_kwargs: Dict[str, Any] = {"pool_pre_ping": True}
        if self.backend == "sqlite":
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        else:
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=pool_recycle,
            )

        self.engine: Engine = create_engine(self.url, **engine_kwargs)

        if self.backend == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self.use_stored_procedures = use_stored_procedures and self.supports_procedures

        if init_schema:
            self._init_schema()

        logger.info(
            f"Database engine created: {self.url.render_as_string(hide_password=True)} "
            f"(stored_procedures={self.use_stored_procedures})"
        )

    @property
    def supports_procedures(self) -> bool:
        """Whether the backend understands CALL statements."""
        return self.backend in ("mysql", "mariadb")

    def _init_schema(self) -> None:
        """Create the development tables if they don't exist."""
        if self.backend != "sqlite":
            raise ValueError(
                f"init_schema is only supported on SQLite, not {self.backend}"
            )
        with self.engine.begin() as conn:
            for statement in SQLITE_SCHEMA:
                conn.execute(text(statement))
        logger.info("Development schema initialized")

    # =========================================================================
    # CONNECTION HELPERS
    # =========================================================================

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        """Borrow a pooled connection; returned to the pool on exit."""
        with self.engine.connect() as conn:
            yield conn

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Borrow a connection inside a transaction; commits on success, rolls back on error."""
        with self.engine.begin() as conn:
            yield conn

    def fetch_all(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """Run a SELECT and return every row as a dict."""
        with self.connect() as conn:
            result = conn.execute(text(sql), params or {})
            return [row_to_dict(row) for row in result.mappings()]

    def fetch_one(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """Run a SELECT and return the first row as a dict, or None."""
        with self.connect() as conn:
            row = conn.execute(text(sql), params or {}).mappings().first()
            return row_to_dict(row) if row is not None else None

    def scalar(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Run a SELECT and return the first column of the first row."""
        with self.connect() as conn:
            return conn.execute(text(sql), params or {}).scalar()

    def execute(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> int:
        """Run a single write statement in its own transaction; return the affected row count."""
        with self.transaction() as conn:
            return conn.execute(text(sql), params or {}).rowcount

    def ping(self) -> None:
        """Round-trip a trivial query; raises if the store is unreachable."""
        with self.connect() as conn:
            conn.execute(text("SELECT 1"))

    def dispose(self) -> None:
        """Close every pooled connection."""
        self.engine.dispose()


def row_to_dict(row: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert a result row to a dict, serializing date and datetime values."""
    return {key: serialize_db_value(value) for key, value in row.items()}
