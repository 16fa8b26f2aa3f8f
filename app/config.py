"""Application settings loaded from the environment and `.env`."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./stocksmart.db"
    LOG_LEVEL: str = "INFO"

    # Classification thresholds
    DEAD_STOCK_DAYS: int = 30
    DEFAULT_REORDER_LEVEL: int = 10

    # Gemini text generation for /api/ai/insights
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_TEMPERATURE: float = 0.7
    GEMINI_MAX_OUTPUT_TOKENS: int = 2048
    GEMINI_TIMEOUT_SECONDS: float = 30.0

    ERROR_REPORT_DIR: str = "tmp/error_reports"


@lru_cache
def get_settings() -> Settings:
    return Settings()
