"""SkillSync Brain: resume vs job description skill gap analytics service."""

__version__ = "1.0.0"
