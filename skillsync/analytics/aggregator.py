"""Analytics aggregation over the skill gap log and the counter tables."""
from typing import Any, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from skillsync.core.database import Database, rows_to_dicts, serialize_timestamp
from skillsync.core.schemas import AnalyticsFilter, Priority
from skillsync.utils.date_utils import Clock, trending_window, utc_now
from skillsync.utils.json_utils import decode_json, decode_string_list
from skillsync.utils.math_utils import round_half_up

from .alerts import alerts_to_json, generate_alerts

TOP_SKILLS_LIMIT = 15
TRENDING_LIMIT = 10
COMPANY_LIMIT = 10
RECENT_LIMIT = 20
RECENT_TOP_SKILLS = 3
COMPANY_TOP_SKILLS = 10

# (name, lower bound inclusive); a score falls in the first band it reaches
MATCH_BANDS = (("high", 80), ("medium", 60), ("low", 40), ("veryLow", 0))


def empty_distribution() -> Dict[str, int]:
    return {name: 0 for name, _ in MATCH_BANDS}


def match_band(score: float) -> str:
    for name, lower in MATCH_BANDS:
        if score >= lower:
            return name
    return "veryLow"


def match_distribution(scores: Sequence[float]) -> Dict[str, int]:
    distribution = empty_distribution()
    for score in scores:
        distribution[match_band(score)] += 1
    return distribution


def empty_snapshot() -> Dict[str, Any]:
    """The zeroed snapshot served when there is nothing (or nothing usable) to show."""
    return {
        "stats": {
            "totalStudents": 0,
            "uniqueSkills": 0,
            "averageMatch": 0,
            "totalDepartments": 0,
            "totalAcademicYears": 0,
            "totalCompanies": 0,
        },
        "topMissingSkills": [],
        "skillPriorityBreakdown": {p.value: [] for p in Priority},
        "departmentStats": [],
        "academicYearStats": [],
        "companyStats": [],
        "trendingSkills": [],
        "recentActivity": [],
        "alerts": [],
        "matchDistribution": empty_distribution(),
    }


def build_where(filters: AnalyticsFilter) -> Tuple[str, List[Any]]:
    clause = "1=1"
    params: List[Any] = []
    if filters.department:
        clause += " AND department = ?"
        params.append(filters.department)
    if filters.academic_year:
        clause += " AND academic_year = ?"
        params.append(filters.academic_year)
    return clause, params


class AnalyticsAggregator:
    """Builds the admin dashboard snapshot from the store."""

    def __init__(self, db: Database, clock: Clock = utc_now) -> None:
        self.db = db
        self.clock = clock

    def aggregate(self, filters: Optional[AnalyticsFilter] = None) -> Dict[str, Any]:
        """Return the analytics snapshot; any failure degrades to :func:`empty_snapshot`."""
        filters = filters or AnalyticsFilter()
        try:
            with self.db.connection() as conn:
                return self._snapshot(conn.cursor(), filters)
        except Exception:
            logger.exception("Analytics aggregation failed; serving empty snapshot")
            return empty_snapshot()

    def _snapshot(self, cursor: Any, filters: AnalyticsFilter) -> Dict[str, Any]:
        where, params = build_where(filters)

        cursor.execute(
            f"SELECT COUNT(DISTINCT student_id) AS total, AVG(match_percentage) AS avg_match "
            f"FROM skill_gaps WHERE {where}",
            params,
        )
        totals = rows_to_dicts(cursor, cursor.fetchall())[0]

        department_stats = self._grouped(cursor, "department", where, params)
        year_stats = self._grouped(cursor, "academic_year", where, params, order_by="academic_year")
        company_stats = self._grouped(cursor, "company_name", where, params, limit=COMPANY_LIMIT)

        top_skills = self._top_missing_skills(cursor)
        cursor.execute("SELECT COUNT(DISTINCT skill_name) FROM skill_analytics")
        unique_skills = cursor.fetchone()[0] or 0

        trending = self._trending_skills(cursor)

        cursor.execute(f"SELECT match_percentage FROM skill_gaps WHERE {where}", params)
        distribution = match_distribution([row[0] for row in cursor.fetchall() if row[0] is not None])

        cursor.execute(f"SELECT skill_priority FROM skill_gaps WHERE {where} ORDER BY id", params)
        breakdown = self._priority_breakdown(row[0] for row in cursor.fetchall())

        recent = self._recent_activity(cursor, where, params)

        return {
            "stats": {
                "totalStudents": totals["total"] or 0,
                "uniqueSkills": unique_skills,
                "averageMatch": round_half_up(totals["avg_match"]),
                "totalDepartments": len(department_stats),
                "totalAcademicYears": len([y for y in year_stats if y["academic_year"] != "Not Specified"]),
                "totalCompanies": len([c for c in company_stats if c["company_name"] != "Unknown"]),
            },
            "topMissingSkills": top_skills,
            "skillPriorityBreakdown": breakdown,
            "departmentStats": [
                {"department": r["department"], "count": r["count"], "avgMatch": round_half_up(r["avg_match"])}
                for r in department_stats
            ],
            "academicYearStats": [
                {"year": r["academic_year"], "count": r["count"], "avgMatch": round_half_up(r["avg_match"])}
                for r in year_stats
            ],
            "companyStats": [
                {"company": r["company_name"], "studentCount": r["count"], "avgReadiness": round_half_up(r["avg_match"])}
                for r in company_stats
            ],
            "trendingSkills": trending,
            "recentActivity": recent,
            "alerts": alerts_to_json(generate_alerts(top_skills, trending, distribution)),
            "matchDistribution": distribution,
        }

    @staticmethod
    def _grouped(
        cursor: Any,
        column: str,
        where: str,
        params: List[Any],
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        order = order_by or f"COUNT(*) DESC, {column}"
        cursor.execute(
            f"SELECT {column}, COUNT(*) AS count, AVG(match_percentage) AS avg_match "
            f"FROM skill_gaps WHERE {where} GROUP BY {column} ORDER BY {order}",
            params,
        )
        rows = cursor.fetchmany(limit) if limit else cursor.fetchall()
        return rows_to_dicts(cursor, rows)

    @staticmethod
    def _top_missing_skills(cursor: Any) -> List[Dict[str, Any]]:
        cursor.execute(
            "SELECT skill_name, SUM(total_missing) AS total FROM skill_analytics "
            "GROUP BY skill_name ORDER BY SUM(total_missing) DESC, skill_name"
        )
        return [
            {"skill": row[0], "count": int(row[1] or 0)}
            for row in cursor.fetchmany(TOP_SKILLS_LIMIT)
        ]

    def _trending_skills(self, cursor: Any) -> List[Dict[str, Any]]:
        year, first_week, last_week = trending_window(self.clock())
        cursor.execute(
            "SELECT skill_name, week_number, count FROM trends "
            "WHERE year = ? AND week_number >= ? AND week_number <= ?",
            (year, first_week, last_week),
        )
        totals: Dict[str, int] = {}
        weekly: Dict[str, Dict[int, int]] = {}
        for skill, week, count in cursor.fetchall():
            totals[skill] = totals.get(skill, 0) + (count or 0)
            weekly.setdefault(skill, {})[week] = count or 0

        ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))[:TRENDING_LIMIT]
        trending = []
        for skill, total in ranked:
            current = weekly[skill].get(last_week, 0)
            previous = weekly[skill].get(last_week - 1, 0)
            if current > previous:
                trend = "increasing"
            elif current < previous:
                trend = "decreasing"
            else:
                trend = "stable"
            trending.append({"skill": skill, "total": total, "trend": trend})
        return trending

    @staticmethod
    def _priority_breakdown(raw_priorities) -> Dict[str, List[str]]:
        tiers: Dict[str, Dict[str, None]] = {p.value: {} for p in Priority}
        for raw in raw_priorities:
            priority = decode_json(raw)
            if not isinstance(priority, dict):
                continue
            for tier, seen in tiers.items():
                skills = priority.get(tier)
                if not isinstance(skills, list):
                    continue
                for skill in skills:
                    if isinstance(skill, str):
                        seen.setdefault(skill, None)
        return {tier: list(seen) for tier, seen in tiers.items()}

    @staticmethod
    def _recent_activity(cursor: Any, where: str, params: List[Any]) -> List[Dict[str, Any]]:
        cursor.execute(
            "SELECT id, student_name, timestamp, department, academic_year, job_role, "
            f"company_name, match_percentage, missing_skills FROM skill_gaps WHERE {where} "
            "ORDER BY timestamp DESC, id DESC",
            params,
        )
        rows = rows_to_dicts(cursor, cursor.fetchmany(RECENT_LIMIT))
        return [
            {
                "id": r["id"],
                "studentName": r["student_name"] or "Anonymous",
                "timestamp": serialize_timestamp(r["timestamp"]),
                "department": r["department"],
                "academicYear": r["academic_year"],
                "jobRole": r["job_role"],
                "companyName": r["company_name"],
                "matchScore": round_half_up(r["match_percentage"]),
                "topSkills": decode_string_list(r["missing_skills"])[:RECENT_TOP_SKILLS],
            }
            for r in rows
        ]


def company_readiness(db: Database, company: str) -> Dict[str, Any]:
    """Readiness of every student who targeted ``company``, best match first."""
    with db.connection() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT student_name, department, academic_year, match_percentage, missing_skills, timestamp "
            "FROM skill_gaps WHERE company_name = ? ORDER BY match_percentage DESC, id",
            (company,),
        )
        students = rows_to_dicts(cursor, cursor.fetchall())

    skill_count: Dict[str, int] = {}
    for student in students:
        for skill in decode_string_list(student["missing_skills"]):
            skill_count[skill] = skill_count.get(skill, 0) + 1
    top_missing = sorted(skill_count.items(), key=lambda item: (-item[1], item[0]))[:COMPANY_TOP_SKILLS]

    scores = [s["match_percentage"] or 0 for s in students]
    return {
        "company": company,
        "totalStudents": len(students),
        "averageReadiness": round_half_up(sum(scores) / len(scores)) if scores else 0,
        "topMissingSkills": [{"skill": skill, "count": count} for skill, count in top_missing],
        "students": [
            {
                "name": s["student_name"],
                "department": s["department"],
                "year": s["academic_year"],
                "readiness": round_half_up(s["match_percentage"]),
                "date": serialize_timestamp(s["timestamp"]),
            }
            for s in students
        ],
    }
