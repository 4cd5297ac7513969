from skillsync.analytics.alerts import alerts_to_json, generate_alerts
from skillsync.core.schemas import AlertSeverity


def _distribution(high=0, medium=0, low=0, very_low=0):
    return {"high": high, "medium": medium, "low": low, "veryLow": very_low}


def test_no_data_means_no_alerts():
    assert generate_alerts([], [], _distribution()) == []


def test_high_demand_needs_more_than_five():
    assert generate_alerts([{"skill": "Docker", "count": 5}], [], _distribution()) == []

    alerts = generate_alerts([{"skill": "Docker", "count": 6}], [], _distribution())

    assert len(alerts) == 1
    assert alerts[0].severity == AlertSeverity.CRITICAL
    assert alerts[0].title == "High Demand: Docker"
    assert alerts[0].count == 6
    assert alerts[0].action == "Schedule Workshop"


def test_trending_alert_uses_first_trending_skill():
    trending = [{"skill": "Rust", "total": 4, "trend": "increasing"}, {"skill": "Go", "total": 2, "trend": "stable"}]

    alerts = generate_alerts([], trending, _distribution())

    assert len(alerts) == 1
    assert alerts[0].severity == AlertSeverity.WARNING
    assert alerts[0].title == "Trending Skill Gap: Rust"
    assert alerts[0].description == "Emerging demand detected. 4 instances in past 4 weeks."
    assert alerts[0].action == "Add to Curriculum"


def test_readiness_alert_requires_strictly_more_than_forty_percent():
    assert generate_alerts([], [], _distribution(high=3, low=1, very_low=1)) == []

    alerts = generate_alerts([], [], _distribution(high=1, low=1))

    assert [a.title for a in alerts] == ["Overall Readiness Concern"]
    assert alerts[0].description.startswith("50% of students have match scores below 60%.")


def test_readiness_percentage_rounds_half_up():
    alerts = generate_alerts([], [], _distribution(medium=3, very_low=5))

    # 5 / 8 = 62.5%
    assert alerts[0].description.startswith("63%")


def test_rules_fire_independently_in_order():
    alerts = generate_alerts(
        [{"skill": "SQL", "count": 9}],
        [{"skill": "SQL", "total": 3, "trend": "stable"}],
        _distribution(very_low=2),
    )

    assert [a.title for a in alerts] == [
        "High Demand: SQL",
        "Trending Skill Gap: SQL",
        "Overall Readiness Concern",
    ]


def test_alerts_to_json_drops_missing_fields():
    payload = alerts_to_json(generate_alerts([], [], _distribution(low=1)))

    assert payload == [
        {
            "severity": "warning",
            "title": "Overall Readiness Concern",
            "description": "100% of students have match scores below 60%. Review curriculum alignment.",
            "action": "Review Curriculum",
        }
    ]
