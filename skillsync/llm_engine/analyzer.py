"""AI engine for SkillSync Brain.

Sends the resume and job description to the model and turns its reply into
a validated :class:`AnalysisResult`.
"""

from __future__ import annotations

from typing import Any, Optional

from loguru import logger
from pydantic import ValidationError

from skillsync.core.schemas import AnalysisResult
from skillsync.utils.json_utils import extract_json_object

from .errors import AINotConfiguredError, AIResponseError
from .prompts import build_analysis_prompt, build_skill_explanation_prompt


def _require_client(client: Optional[Any]) -> Any:
    if client is None:
        raise AINotConfiguredError("Gemini API not configured. Please set GEMINI_API_KEY in .env")
    return client


def parse_analysis_response(raw_response: str) -> AnalysisResult:
    """Parse and validate the model reply.

    Raises:
        AIResponseError: If the reply is not JSON or lacks ``matchPercentage``
            or a ``missingSkills`` list.
    """
    try:
        data = extract_json_object(raw_response)
    except ValueError as exc:
        raise AIResponseError("Failed to parse AI response. Please try again.") from exc

    if not isinstance(data, dict):
        logger.error("Model response JSON is not an object: {}", type(data).__name__)
        raise AIResponseError("Failed to parse AI response. Please try again.")

    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as exc:
        logger.error("Invalid response format from model: {}", exc)
        raise AIResponseError("Failed to parse AI response. Please try again.") from exc


def analyze_resume(client: Optional[Any], resume_text: str, job_description: str) -> AnalysisResult:
    """Compare a resume with a job description through the AI model.

    A single, non-retried call; every failure surfaces as an ``AIServiceError``.
    """
    client = _require_client(client)
    prompt = build_analysis_prompt(resume_text, job_description)
    raw_response = client.run(prompt)
    logger.debug("Model raw response length: {}", len(raw_response or ""))
    result = parse_analysis_response(raw_response)
    logger.info(
        "Analysis complete: match={} missing={} matched={}",
        result.match_percentage,
        len(result.missing_skills),
        len(result.matched_skills),
    )
    return result


def explain_skill(client: Optional[Any], skill: str) -> str:
    client = _require_client(client)
    explanation = client.run(build_skill_explanation_prompt(skill))
    return (explanation or "").strip()
