"""Alert generation from an analytics snapshot."""
from typing import Any, Dict, List, Mapping, Sequence

from skillsync.core.schemas import Alert, AlertSeverity
from skillsync.utils.math_utils import round_half_up

CRITICAL_SKILL_THRESHOLD = 5
LOW_READINESS_THRESHOLD = 40.0


def generate_alerts(
    top_skills: Sequence[Mapping[str, Any]],
    trending_skills: Sequence[Mapping[str, Any]],
    distribution: Mapping[str, int],
) -> List[Alert]:
    """Derive dashboard alerts from the top missing skills, the trending skills
    and the match distribution. Each rule fires independently."""
    alerts: List[Alert] = []

    if top_skills:
        top = top_skills[0]
        if top["count"] > CRITICAL_SKILL_THRESHOLD:
            alerts.append(
                Alert(
                    severity=AlertSeverity.CRITICAL,
                    title=f"High Demand: {top['skill']}",
                    description=(
                        f"{top['count']} students missing this critical skill. "
                        "Consider emergency workshop."
                    ),
                    count=top["count"],
                    action="Schedule Workshop",
                )
            )

    if trending_skills:
        top_trend = trending_skills[0]
        alerts.append(
            Alert(
                severity=AlertSeverity.WARNING,
                title=f"Trending Skill Gap: {top_trend['skill']}",
                description=f"Emerging demand detected. {top_trend['total']} instances in past 4 weeks.",
                count=top_trend["total"],
                action="Add to Curriculum",
            )
        )

    total = sum(distribution.values())
    if total > 0:
        low_percentage = (distribution.get("low", 0) + distribution.get("veryLow", 0)) / total * 100
        if low_percentage > LOW_READINESS_THRESHOLD:
            alerts.append(
                Alert(
                    severity=AlertSeverity.WARNING,
                    title="Overall Readiness Concern",
                    description=(
                        f"{round_half_up(low_percentage)}% of students have match scores below 60%. "
                        "Review curriculum alignment."
                    ),
                    action="Review Curriculum",
                )
            )

    return alerts


def alerts_to_json(alerts: Sequence[Alert]) -> List[Dict[str, Any]]:
    return [alert.model_dump(mode="json", exclude_none=True) for alert in alerts]
