"""Database layer for SkillSync Brain with parameterized queries and safe connection management."""
from typing import Any, Dict, Iterable, List, Optional, Sequence
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
import sqlite3

from loguru import logger


SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        email TEXT UNIQUE NOT NULL,
        password TEXT NOT NULL,
        full_name TEXT NOT NULL,
        role TEXT DEFAULT 'student' CHECK(role IN ('student', 'admin')),
        university TEXT,
        department TEXT,
        academic_year TEXT,
        student_id TEXT,
        phone TEXT,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        last_login DATETIME
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS skill_gaps (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER,
        student_id TEXT NOT NULL,
        student_name TEXT,
        department TEXT,
        academic_year TEXT,
        job_role TEXT NOT NULL,
        company_name TEXT,
        match_percentage REAL NOT NULL,
        missing_skills TEXT,
        matched_skills TEXT,
        skill_priority TEXT,
        recommendations TEXT,
        timestamp DATETIME DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (user_id) REFERENCES users(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS skill_analytics (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        skill_name TEXT NOT NULL,
        category TEXT,
        total_missing INTEGER DEFAULT 1,
        department TEXT,
        last_seen DATETIME DEFAULT CURRENT_TIMESTAMP,
        UNIQUE(skill_name, department)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS trends (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        skill_name TEXT NOT NULL,
        week_number INTEGER,
        year INTEGER,
        count INTEGER DEFAULT 1,
        UNIQUE(skill_name, week_number, year)
    )
    """,
)

USER_COLUMNS = (
    "id, email, password, full_name, role, university, department, "
    "academic_year, student_id, phone, created_at, last_login"
)


class PersistenceError(RuntimeError):
    """Raised when a primary write cannot be committed."""


def format_timestamp(value: Optional[datetime] = None) -> str:
    """Render a UTC timestamp the way it is stored in DATETIME columns."""
    value = value or datetime.now(timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def serialize_timestamp(value: Any) -> Optional[str]:
    """Make a DATETIME column value JSON friendly (pyodbc returns datetimes, SQLite strings)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    return str(value)


def rows_to_dicts(cursor: Any, rows: Iterable[Sequence[Any]]) -> List[Dict[str, Any]]:
    """Map DB-API rows to dicts keyed by column name."""
    columns = [col[0] for col in cursor.description]
    return [dict(zip(columns, row)) for row in rows]


def fetch_one_dict(cursor: Any) -> Optional[Dict[str, Any]]:
    row = cursor.fetchone()
    if not row:
        return None
    return rows_to_dicts(cursor, [row])[0]


class Database:
    """Connection handle shared by every component of the service.

    With ``db_conn`` set, connections go through pyodbc and the tables are
    expected to be provisioned already. Otherwise a SQLite file at ``db_path``
    is used and :meth:`init_schema` bootstraps it.
    """

    def __init__(self, db_conn: Optional[str] = None, db_path: Optional[str] = None) -> None:
        if not db_conn and not db_path:
            raise RuntimeError("Either DB_CONN or DB_PATH must be configured")
        self.db_conn = db_conn
        self.db_path = db_path

    @classmethod
    def from_settings(cls, app_settings: Any) -> "Database":
        return cls(db_conn=app_settings.db_conn, db_path=app_settings.db_path)

    @property
    def backend(self) -> str:
        return "ODBC" if self.db_conn else "SQLite"

    def _connect(self) -> Any:
        if self.db_conn:
            import pyodbc

            return pyodbc.connect(self.db_conn)
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(self.db_path, timeout=30)

    @contextmanager
    def connection(self):
        """Context manager for database connections with automatic cleanup."""
        conn = self._connect()
        try:
            yield conn
        except Exception as e:
            logger.error("Database error: {}", e)
            conn.rollback()
            raise
        finally:
            conn.close()

    def init_schema(self) -> None:
        if self.db_conn:
            logger.info("Skipping schema bootstrap for ODBC connection; tables are provisioned externally")
            return
        with self.connection() as conn:
            cursor = conn.cursor()
            for statement in SCHEMA_STATEMENTS:
                cursor.execute(statement)
            conn.commit()
        logger.info("SQLite database initialized at {}", self.db_path)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def create_user(
        self,
        email: str,
        password_hash: str,
        full_name: str,
        role: str = "student",
        university: Optional[str] = None,
        department: Optional[str] = None,
        academic_year: Optional[str] = None,
        student_id: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Insert a user and return the stored row."""
        query = (
            "INSERT INTO users (email, password, full_name, role, university, department, "
            "academic_year, student_id, phone, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)"
        )
        params = (
            email,
            password_hash,
            full_name,
            role,
            university,
            department,
            academic_year,
            student_id,
            phone,
            format_timestamp(),
        )
        try:
            with self.connection() as conn:
                cursor = conn.cursor()
                cursor.execute(query, params)
                conn.commit()
                cursor.execute(f"SELECT {USER_COLUMNS} FROM users WHERE email = ?", (email,))
                user = fetch_one_dict(cursor)
        except Exception as e:
            logger.error("Failed to create user email={}: {}", email, e)
            raise PersistenceError("Failed to create user") from e
        logger.info("Created user id={} role={}", user["id"], role)
        return user

    def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {USER_COLUMNS} FROM users WHERE email = ?", (email,))
            return fetch_one_dict(cursor)

    def get_user_by_id(self, user_id: int) -> Optional[Dict[str, Any]]:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,))
            return fetch_one_dict(cursor)

    def touch_last_login(self, user_id: int) -> None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE users SET last_login = ? WHERE id = ?",
                (format_timestamp(), user_id),
            )
            conn.commit()

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    def list_departments(self) -> List[Dict[str, Any]]:
        """Departments seen in submissions, most frequent first."""
        query = (
            "SELECT department, COUNT(*) AS count FROM skill_gaps "
            "WHERE department <> 'Unknown' "
            "GROUP BY department ORDER BY COUNT(*) DESC, department"
        )
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query)
            return rows_to_dicts(cursor, cursor.fetchall())

    def list_academic_years(self) -> List[Dict[str, Any]]:
        """Academic years seen in submissions, latest first."""
        query = (
            "SELECT academic_year, COUNT(*) AS count FROM skill_gaps "
            "WHERE academic_year <> 'Not Specified' "
            "GROUP BY academic_year ORDER BY academic_year DESC"
        )
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query)
            return rows_to_dicts(cursor, cursor.fetchall())
