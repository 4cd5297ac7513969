"""Prompt builders for Gemini-based skill gap analysis."""

from __future__ import annotations

RESUME_CHAR_LIMIT = 10000
JOB_CHAR_LIMIT = 2000


def build_analysis_prompt(resume_text: str, job_description: str) -> str:
    """Build the prompt asking Gemini to compare a resume with a job description.

    The resume is clipped to 10000 characters and the job description to
    2000. The model must answer with a single JSON object carrying
    ``matchPercentage``, ``missingSkills``, ``matchedSkills``,
    ``skillPriority`` (critical/important/optional arrays),
    ``skillExplanations`` and ``recommendations``.
    """
    return (
        "Analyze the resume against the job description strictly.\n"
        f"RESUME: {resume_text[:RESUME_CHAR_LIMIT]}\n"
        f"JOB: {job_description[:JOB_CHAR_LIMIT]}\n\n"
        "Provide JSON output:\n"
        "1. matchPercentage (0-100)\n"
        "2. missingSkills (List strings)\n"
        "3. matchedSkills (List strings)\n"
        "4. skillPriority (Object with critical/important/optional arrays)\n"
        "5. skillExplanations (Array of objects {skill, explanation, importance}. KEEP SHORT. 1 sentence max.)\n"
        "6. recommendations (Array of objects {skill, description, priority}. "
        "priority is one of critical, important, optional. KEEP SHORT. 1 sentence max.)\n\n"
        "Return ONLY valid JSON.\n"
        "{\n"
        '  "matchPercentage": 0,\n'
        '  "missingSkills": [],\n'
        '  "matchedSkills": [],\n'
        '  "skillPriority": { "critical": [], "important": [], "optional": [] },\n'
        '  "skillExplanations": [{ "skill": "", "explanation": "", "importance": "" }],\n'
        '  "recommendations": [{ "skill": "", "description": "", "priority": "" }]\n'
        "}"
    )


def build_skill_explanation_prompt(skill: str) -> str:
    return (
        f'Explain the technical skill "{skill}" in 2-3 beginner-friendly sentences. '
        "Include: what it is, why it's important, and a brief example of where it's used. "
        "Return only the explanation text, no extra formatting."
    )
