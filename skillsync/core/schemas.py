"""Pydantic models shared by the API, the AI engine and the analytics pipeline."""
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from skillsync.utils.math_utils import round_half_up


class Priority(str, Enum):
    CRITICAL = "critical"
    IMPORTANT = "important"
    OPTIONAL = "optional"

    @classmethod
    def parse(cls, value: Any) -> "Priority":
        """Map a loose priority tag onto the enum; unknown tags become IMPORTANT."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            tag = value.strip().lower()
            for member in cls:
                if member.value == tag:
                    return member
        return cls.IMPORTANT


class AlertSeverity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"


def clean_skill_list(value: Any) -> List[str]:
    """Trim, drop blanks and duplicates, keep first-seen order."""
    if not isinstance(value, (list, tuple, set)):
        return []
    seen = {}
    for item in value:
        if not isinstance(item, str):
            continue
        skill = item.strip()
        if skill and skill not in seen:
            seen[skill] = None
    return list(seen)


class SkillPriority(BaseModel):
    critical: List[str] = Field(default_factory=list)
    important: List[str] = Field(default_factory=list)
    optional: List[str] = Field(default_factory=list)

    @field_validator("critical", "important", "optional", mode="before")
    @classmethod
    def _clean(cls, value: Any) -> List[str]:
        return clean_skill_list(value)


class Recommendation(BaseModel):
    skill: str = ""
    description: str = ""
    priority: Priority = Priority.IMPORTANT

    @field_validator("skill", "description", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, value: Any) -> Priority:
        return Priority.parse(value)


class SkillExplanation(BaseModel):
    skill: str = ""
    explanation: str = ""
    importance: str = ""

    @field_validator("skill", "explanation", "importance", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)


class AnalysisResult(BaseModel):
    """Structured resume-vs-job comparison returned by the AI model."""

    model_config = ConfigDict(populate_by_name=True)

    match_percentage: int = Field(alias="matchPercentage")
    missing_skills: List[str] = Field(alias="missingSkills")
    matched_skills: List[str] = Field(default_factory=list, alias="matchedSkills")
    skill_priority: SkillPriority = Field(default_factory=SkillPriority, alias="skillPriority")
    skill_explanations: List[SkillExplanation] = Field(default_factory=list, alias="skillExplanations")
    recommendations: List[Recommendation] = Field(default_factory=list)

    @field_validator("match_percentage", mode="before")
    @classmethod
    def _score(cls, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError("matchPercentage must be a number")
        score = float(str(value).strip().rstrip("%"))
        return round_half_up(min(100.0, max(0.0, score)))

    @field_validator("missing_skills", mode="before")
    @classmethod
    def _missing(cls, value: Any) -> List[str]:
        if not isinstance(value, (list, tuple)):
            raise ValueError("missingSkills must be a list")
        return clean_skill_list(value)

    @field_validator("matched_skills", mode="before")
    @classmethod
    def _matched(cls, value: Any) -> List[str]:
        return clean_skill_list(value)

    @field_validator("skill_priority", mode="before")
    @classmethod
    def _priority(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, SkillPriority)) else {}

    @field_validator("skill_explanations", "recommendations", mode="before")
    @classmethod
    def _objects(cls, value: Any) -> List[Any]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, (dict, BaseModel))]


class Submission(BaseModel):
    """One analysis to be recorded, with the submitter's metadata."""

    user_id: Optional[int] = None
    student_id: str
    student_name: str = "Anonymous"
    department: str = "Unknown"
    academic_year: str = "Not Specified"
    job_role: str
    company_name: str = "Unknown"
    result: AnalysisResult


class AnalyticsFilter(BaseModel):
    department: Optional[str] = None
    academic_year: Optional[str] = None

    @field_validator("department", "academic_year", mode="before")
    @classmethod
    def _blank_is_all(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None


class Alert(BaseModel):
    severity: AlertSeverity
    title: str
    description: str
    count: Optional[int] = None
    action: Optional[str] = None


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    resume_text: Optional[str] = Field(None, alias="resumeText")
    job_description: Optional[str] = Field(None, alias="jobDescription")
    student_name: Optional[str] = Field(None, alias="studentName")
    department: Optional[str] = None
    academic_year: Optional[str] = Field(None, alias="academicYear")
    company_name: Optional[str] = Field(None, alias="companyName")


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    password: Optional[str] = None
    full_name: Optional[str] = Field(None, alias="fullName")
    university: Optional[str] = None
    department: Optional[str] = None
    academic_year: Optional[str] = Field(None, alias="academicYear")
    student_id: Optional[str] = Field(None, alias="studentId")
    phone: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ExplainSkillRequest(BaseModel):
    skill: Optional[str] = None
