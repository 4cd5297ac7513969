"""Configuration settings for SkillSync Brain."""
import os
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    db_conn: Optional[str] = os.getenv("DB_CONN")
    db_path: str = "data/skillsync.db"

    GEMINI_API_KEY: Optional[str] = None
    MODEL_NAME: str = "gemini-2.5-flash"
    GEMINI_PROBE_ON_STARTUP: bool = False
    AI_TIMEOUT_SEC: float = 60.0

    JWT_SECRET: str = "your-secret-key-change-in-production"
    JWT_EXPIRE_HOURS: int = 24

    LOG_FILE: str = "skillsync.log"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
