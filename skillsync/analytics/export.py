"""Export of the filtered skill gap log as CSV or JSON."""
import csv
import io
import json
from typing import Any, Dict, List, Optional, Sequence

from skillsync.core.database import Database, rows_to_dicts, serialize_timestamp
from skillsync.core.schemas import AnalyticsFilter

from .aggregator import build_where

EXPORT_COLUMNS = (
    "student_name",
    "department",
    "academic_year",
    "job_role",
    "company_name",
    "match_percentage",
    "missing_skills",
    "matched_skills",
    "timestamp",
)


def fetch_export_rows(db: Database, filters: Optional[AnalyticsFilter] = None) -> List[Dict[str, Any]]:
    """Filtered submissions, newest first, with timestamps rendered as strings."""
    where, params = build_where(filters or AnalyticsFilter())
    with db.connection() as conn:
        cursor = conn.cursor()
        cursor.execute(
            f"SELECT {', '.join(EXPORT_COLUMNS)} FROM skill_gaps WHERE {where} "
            "ORDER BY timestamp DESC, id DESC",
            params,
        )
        rows = rows_to_dicts(cursor, cursor.fetchall())
    for row in rows:
        row["timestamp"] = serialize_timestamp(row["timestamp"])
    return rows


def _csv_value(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return value


def rows_to_csv(rows: Sequence[Dict[str, Any]]) -> str:
    """Render rows as CSV: a header line, strings quoted with embedded quotes doubled.

    No rows yields an empty string.
    """
    if not rows:
        return ""
    headers = list(rows[0].keys())
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    buffer.write(",".join(headers) + "\n")
    for row in rows:
        writer.writerow([_csv_value(row.get(header)) for header in headers])
    return buffer.getvalue().rstrip("\n")
