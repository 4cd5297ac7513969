"""LLM engine package for SkillSync Brain.

Provides Gemini-powered resume analysis utilities.
"""

from .analyzer import analyze_resume, explain_skill
from .errors import AIServiceError
from .gemini_client import GeminiClient

__all__ = ["analyze_resume", "explain_skill", "AIServiceError", "GeminiClient"]
