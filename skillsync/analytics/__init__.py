"""Analytics pipeline: ingestion recorder, aggregator, alerts and export."""

from .aggregator import AnalyticsAggregator, company_readiness, empty_snapshot
from .alerts import generate_alerts
from .export import fetch_export_rows, rows_to_csv
from .recorder import SkillGapRecorder, generate_student_id

__all__ = [
    "AnalyticsAggregator",
    "SkillGapRecorder",
    "company_readiness",
    "empty_snapshot",
    "fetch_export_rows",
    "generate_alerts",
    "generate_student_id",
    "rows_to_csv",
]
