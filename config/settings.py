"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/interview.db")
    DB_TIMEOUT_S: float = 5.0
    CONFIG_PATH: str = Field(default="app_config.json")

    PROMPT_VERSION: str = "1.0"
    DEFAULT_QUESTIONS: int = 5
    MIN_QUESTIONS: int = 1
    MAX_QUESTIONS: int = 20
    MAX_TOPIC_LENGTH: int = 200
    MAX_ANSWER_LENGTH: int = 5000

    EVALUATION_LEASE_SECONDS: float = 120.0
    EVALUATION_LEASE_MARGIN_SECONDS: float = 5.0
    EVALUATION_WAIT_SECONDS: float = 90.0
    EVALUATION_POLL_SECONDS: float = 0.25

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
