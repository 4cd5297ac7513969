import json
from datetime import datetime, timezone

import pytest

from skillsync.analytics.recorder import SkillGapRecorder, generate_student_id
from skillsync.core.database import PersistenceError

from conftest import FixedClock


def _scalar(db, query, params=()):
    with db.connection() as conn:
        cursor = conn.cursor()
        cursor.execute(query, params)
        row = cursor.fetchone()
        return row[0] if row else None


def _skill_counter(db, skill, department):
    return _scalar(
        db,
        "SELECT total_missing FROM skill_analytics WHERE skill_name = ? AND department = ?",
        (skill, department),
    )


def _trend_counter(db, skill, week, year):
    return _scalar(
        db,
        "SELECT count FROM trends WHERE skill_name = ? AND week_number = ? AND year = ?",
        (skill, week, year),
    )


def test_record_inserts_one_row_and_creates_counters(db, clock, make_submission):
    recorder = SkillGapRecorder(db, clock=clock)

    record_id = recorder.record(make_submission(missing=("Docker", "Kubernetes")))

    assert record_id == 1
    assert _scalar(db, "SELECT COUNT(*) FROM skill_gaps") == 1
    assert _skill_counter(db, "Docker", "Computer Science") == 1
    assert _skill_counter(db, "Kubernetes", "Computer Science") == 1
    assert _trend_counter(db, "Docker", 10, 2025) == 1


def test_record_stores_json_columns(db, clock, make_submission):
    SkillGapRecorder(db, clock=clock).record(make_submission(missing=("Docker",)))

    with db.connection() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT missing_skills, skill_priority, recommendations, timestamp FROM skill_gaps")
        missing, priority, recommendations, stamp = cursor.fetchone()

    assert json.loads(missing) == ["Docker"]
    assert json.loads(priority) == {"critical": ["Docker"], "important": [], "optional": []}
    assert json.loads(recommendations)[0]["priority"] == "critical"
    assert stamp == "2025-03-05 12:00:00"


def test_counters_increment_per_department(db, clock, make_submission):
    recorder = SkillGapRecorder(db, clock=clock)

    recorder.record(make_submission(missing=("Docker",), department="Computer Science"))
    recorder.record(make_submission(missing=("Docker",), department="Computer Science"))
    recorder.record(make_submission(missing=("Docker",), department="Mechanical"))

    assert _scalar(db, "SELECT COUNT(*) FROM skill_gaps") == 3
    assert _skill_counter(db, "Docker", "Computer Science") == 2
    assert _skill_counter(db, "Docker", "Mechanical") == 1
    assert _trend_counter(db, "Docker", 10, 2025) == 3


def test_duplicate_skills_in_one_submission_count_once(db, clock, make_submission):
    SkillGapRecorder(db, clock=clock).record(make_submission(missing=("Docker", " Docker ", "Docker")))

    assert _skill_counter(db, "Docker", "Computer Science") == 1
    assert _trend_counter(db, "Docker", 10, 2025) == 1


def test_trend_counters_split_by_week(db, make_submission):
    SkillGapRecorder(db, clock=FixedClock(datetime(2025, 3, 5, tzinfo=timezone.utc))).record(
        make_submission(missing=("Go",))
    )
    SkillGapRecorder(db, clock=FixedClock(datetime(2025, 3, 12, tzinfo=timezone.utc))).record(
        make_submission(missing=("Go",))
    )

    assert _trend_counter(db, "Go", 10, 2025) == 1
    assert _trend_counter(db, "Go", 11, 2025) == 1


def test_december_31_is_attributed_to_next_iso_year(db, make_submission):
    recorder = SkillGapRecorder(db, clock=FixedClock(datetime(2024, 12, 31, 9, 30, tzinfo=timezone.utc)))

    recorder.record(make_submission(missing=("Rust",)))

    assert _trend_counter(db, "Rust", 1, 2025) == 1
    assert _trend_counter(db, "Rust", 1, 2024) is None


def test_counter_failure_does_not_abort_the_primary_record(db, clock, make_submission):
    with db.connection() as conn:
        conn.cursor().execute("DROP TABLE trends")
        conn.commit()

    record_id = SkillGapRecorder(db, clock=clock).record(make_submission(missing=("Docker", "AWS")))

    assert record_id == 1
    assert _scalar(db, "SELECT COUNT(*) FROM skill_gaps") == 1
    assert _skill_counter(db, "Docker", "Computer Science") == 1
    assert _skill_counter(db, "AWS", "Computer Science") == 1


def test_primary_insert_failure_raises(db, clock, make_submission):
    with db.connection() as conn:
        conn.cursor().execute("DROP TABLE skill_gaps")
        conn.commit()

    with pytest.raises(PersistenceError):
        SkillGapRecorder(db, clock=clock).record(make_submission())

    assert _scalar(db, "SELECT COUNT(*) FROM skill_analytics") == 0


def test_generate_student_id():
    now = datetime(1970, 1, 1, 0, 0, 2, tzinfo=timezone.utc)

    assert generate_student_id("Jane  Mary Doe", now) == "STU_JANE_MARY_DOE_2000"
    assert generate_student_id(None, now) == "STU_ANON_2000"
    assert generate_student_id("   ", now) == "STU_ANON_2000"
