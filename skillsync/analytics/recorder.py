"""Ingestion recorder: persists one analysis and bumps the aggregate counters."""
import json
import re
from datetime import datetime
from typing import Any, Optional

from loguru import logger

from skillsync.core.database import Database, PersistenceError, format_timestamp
from skillsync.core.schemas import Submission
from skillsync.utils.date_utils import Clock, epoch_millis, iso_week, utc_now

INSERT_SKILL_GAP = (
    "INSERT INTO skill_gaps ("
    "user_id, student_id, student_name, department, academic_year, job_role, company_name, "
    "match_percentage, missing_skills, matched_skills, skill_priority, recommendations, timestamp"
    ") VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)"
)

BUMP_SKILL_COUNTER = (
    "UPDATE skill_analytics SET total_missing = total_missing + 1, last_seen = ? "
    "WHERE skill_name = ? AND department = ?"
)
INSERT_SKILL_COUNTER = (
    "INSERT INTO skill_analytics (skill_name, department, total_missing, last_seen) "
    "VALUES (?, ?, 1, ?)"
)

BUMP_TREND_COUNTER = (
    "UPDATE trends SET count = count + 1 "
    "WHERE skill_name = ? AND week_number = ? AND year = ?"
)
INSERT_TREND_COUNTER = (
    "INSERT INTO trends (skill_name, week_number, year, count) VALUES (?, ?, ?, 1)"
)


def generate_student_id(name: Optional[str], now: Optional[datetime] = None) -> str:
    """Build a submission-scoped student identifier from the display name."""
    millis = epoch_millis(now or utc_now())
    if name and name.strip():
        slug = re.sub(r"\s+", "_", name.strip()).upper()
        return f"STU_{slug}_{millis}"
    return f"STU_ANON_{millis}"


class SkillGapRecorder:
    """Writes the append-only skill gap log and keeps the counters in step.

    The primary record is committed on its own. Every counter upsert after it
    is an independent unit: a failure is rolled back, logged and skipped.
    """

    def __init__(self, db: Database, clock: Clock = utc_now) -> None:
        self.db = db
        self.clock = clock

    def record(self, submission: Submission) -> int:
        """Persist ``submission`` and return the id of the new skill gap row."""
        now = self.clock()
        stamp = format_timestamp(now)
        result = submission.result
        params = (
            submission.user_id,
            submission.student_id,
            submission.student_name or "Anonymous",
            submission.department or "Unknown",
            submission.academic_year or "Not Specified",
            submission.job_role,
            submission.company_name or "Unknown",
            result.match_percentage,
            json.dumps(result.missing_skills, ensure_ascii=False),
            json.dumps(result.matched_skills, ensure_ascii=False),
            json.dumps(result.skill_priority.model_dump(), ensure_ascii=False),
            json.dumps([r.model_dump(mode="json") for r in result.recommendations], ensure_ascii=False),
            stamp,
        )

        with self.db.connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(INSERT_SKILL_GAP, params)
                conn.commit()
                cursor.execute(
                    "SELECT MAX(id) FROM skill_gaps WHERE student_id = ?",
                    (submission.student_id,),
                )
                record_id = cursor.fetchone()[0]
            except Exception as e:
                logger.error("Failed to insert skill gap record student_id={}: {}", submission.student_id, e)
                conn.rollback()
                raise PersistenceError("Failed to store analysis result") from e

            logger.info(
                "Inserted skill gap record id={} department={} match={}",
                record_id,
                submission.department,
                result.match_percentage,
            )

            department = submission.department or "Unknown"
            year, week = iso_week(now)
            for skill in result.missing_skills:
                self._bump(
                    conn,
                    BUMP_SKILL_COUNTER,
                    (stamp, skill, department),
                    INSERT_SKILL_COUNTER,
                    (skill, department, stamp),
                    f"skill counter {skill!r}/{department!r}",
                )
                self._bump(
                    conn,
                    BUMP_TREND_COUNTER,
                    (skill, week, year),
                    INSERT_TREND_COUNTER,
                    (skill, week, year),
                    f"trend counter {skill!r} {year}-W{week:02d}",
                )
        return record_id

    @staticmethod
    def _bump(conn: Any, update_sql: str, update_params: tuple, insert_sql: str, insert_params: tuple, label: str) -> bool:
        """Increment a counter row, creating it at 1 when it does not exist yet."""
        try:
            cursor = conn.cursor()
            cursor.execute(update_sql, update_params)
            if cursor.rowcount == 0:
                cursor.execute(insert_sql, insert_params)
            conn.commit()
            return True
        except Exception as e:
            logger.warning("Skipping {} update: {}", label, e)
            try:
                conn.rollback()
            except Exception as rollback_error:
                logger.error("Rollback after failed {} update failed: {}", label, rollback_error)
            return False
