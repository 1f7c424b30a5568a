"""
Application configuration and environment settings.
"""
from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List, Union


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Spiral Journal"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./spiral_journal.db"
    DB_ECHO: bool = False

    # CORS
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000", "http://localhost:8080"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Anthropic (journal entry analysis)
    ANTHROPIC_API_KEY: str = ""  # Leave empty to use the local fallback analysis
    ANTHROPIC_API_URL: str = "https://api.anthropic.com/v1/messages"
    ANTHROPIC_MODEL: str = "claude-3-haiku-20240307"
    ANTHROPIC_VERSION: str = "2023-06-01"
    AI_REQUEST_TIMEOUT: float = 30.0  # seconds
    AI_MAX_TOKENS: int = 1000
    AI_MAX_CONTENT_CHARS: int = 500  # Entry text is truncated before it is sent

    # Emotional cores
    CORE_INSIGHT_LIMIT: int = 5  # Recent insights kept per core

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
