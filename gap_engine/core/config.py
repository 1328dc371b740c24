"""Configuration management for Gap Engine."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    # Environment variables should be set directly
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Supabase configuration (required)
    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_KEY: str = Field(..., description="Supabase API key")

    # OpenAI configuration (required)
    OPENAI_API_KEY: str = Field(..., description="OpenAI API key")

    # Environment
    GAP_ENGINE_ENV: str = Field(default="dev", description="Environment: dev, staging, prod, test")

    # Text generation
    ANALYSIS_MODEL: str = Field(default="gpt-4o-mini", description="Model for gap reports")
    OPENAI_TIMEOUT_SECONDS: float = Field(default=50.0, description="Per-request client timeout")
    OPENAI_MAX_RETRIES: int = Field(default=2, description="Client-side retry count")
    CATEGORY_REPORT_MAX_TOKENS: int = Field(
        default=300, description="Max output tokens for a category report"
    )
    SUMMARY_MAX_TOKENS: int = Field(default=500, description="Max output tokens for the summary")
    REPORT_TEMPERATURE: float = Field(default=0.7, description="Sampling temperature for reports")

    # Analysis run
    REPORT_MAX_WORKERS: int = Field(
        default=4, ge=1, description="Thread pool size for category report generation"
    )
    ANALYSIS_TIMEOUT_SECONDS: float = Field(
        default=60.0, description="Wall-clock budget for one analysis run"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If required environment variables are missing
    """
    return Settings()
