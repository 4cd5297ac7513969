import json
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from skillsync.core.config import Settings
from skillsync.core.database import Database
from skillsync.core.schemas import AnalysisResult, Submission


class FixedClock:
    def __init__(self, value: datetime):
        self.value = value

    def __call__(self) -> datetime:
        return self.value


class FakeAIClient:
    """Stands in for GeminiClient: replays queued replies and records prompts."""

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.prompts = []

    def queue(self, reply):
        self.replies.append(reply)

    def run(self, prompt, model=None):
        self.prompts.append(prompt)
        if not self.replies:
            raise AssertionError("FakeAIClient has no reply queued")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def analysis_payload(score=65, missing=("Docker", "Kubernetes"), matched=("Python",), **extra):
    payload = {
        "matchPercentage": score,
        "missingSkills": list(missing),
        "matchedSkills": list(matched),
        "skillPriority": {"critical": list(missing[:1]), "important": list(missing[1:]), "optional": []},
        "skillExplanations": [],
        "recommendations": [
            {"skill": skill, "description": f"Learn {skill}", "priority": "critical"} for skill in missing[:1]
        ],
    }
    payload.update(extra)
    return payload


@pytest.fixture
def db(tmp_path):
    database = Database(db_path=str(tmp_path / "skillsync.db"))
    database.init_schema()
    return database


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 3, 5, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def make_submission():
    counter = {"n": 0}

    def _make(
        score=65,
        missing=("Docker", "Kubernetes"),
        department="Computer Science",
        academic_year="3rd Year",
        company_name="Acme",
        student_name="Jane Doe",
        **extra,
    ):
        counter["n"] += 1
        result = AnalysisResult.model_validate(analysis_payload(score=score, missing=missing, **extra))
        return Submission(
            student_id=f"STU_TEST_{counter['n']}",
            student_name=student_name,
            department=department,
            academic_year=academic_year,
            job_role="Backend Developer",
            company_name=company_name,
            result=result,
        )

    return _make


@pytest.fixture
def app_settings(tmp_path):
    return Settings(
        _env_file=None,
        db_conn=None,
        db_path=str(tmp_path / "api.db"),
        GEMINI_API_KEY=None,
        JWT_SECRET="test-secret",
        LOG_FILE=str(tmp_path / "test.log"),
    )


@pytest.fixture
def fake_ai():
    return FakeAIClient()


@pytest.fixture
def app(app_settings, fake_ai):
    from skillsync.main import create_app

    return create_app(app_settings, ai_client=fake_ai)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers(app, client):
    from skillsync.create_admin import create_admin

    create_admin(app.state.db, "admin@example.com", "Admin", "admin-pass")
    response = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "admin-pass"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def student_headers(client):
    response = client.post(
        "/api/auth/register",
        json={
            "email": "student@example.com",
            "password": "student-pass",
            "fullName": "Jane Doe",
            "department": "Computer Science",
            "academicYear": "3rd Year",
        },
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def ai_reply():
    def _reply(**kwargs):
        return json.dumps(analysis_payload(**kwargs))

    return _reply
