# config.py
"""Configuration settings for the Lexicon Nexus generation client.
Uses Pydantic BaseSettings for automatic environment variable loading.
"""

from __future__ import annotations

import structlog
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

logger = structlog.get_logger()


class AiModel(BaseModel):
    """An AI model option offered to the user."""

    id: str
    name: str
    description: str


MODELS: list[AiModel] = [
    AiModel(
        id="gemini-flash-latest",
        name="Fast & Efficient",
        description="Uses Gemini Flash for the quickest responses.",
    ),
    AiModel(
        id="gemini-2.5-pro",
        name="Powerful & Advanced",
        description="Uses Gemini 2.5 Pro for higher quality, but slower, results.",
    ),
    AiModel(
        id="custom-model",
        name="Custom Model",
        description="Enter the name of a custom Gemini model.",
    ),
]

DEFAULT_MODEL_ID = MODELS[0].id
CUSTOM_MODEL_ID = "custom-model"


class LexiconSettings(BaseSettings):
    """Full configuration for the Lexicon Nexus client."""

    # API and Model Configuration
    GEMINI_API_BASE: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_API_KEY: str | None = Field(None, alias="API_KEY")
    DEFAULT_MODEL_ID: str = DEFAULT_MODEL_ID
    HTTPX_TIMEOUT: float = 120.0

    # LLM Call Settings
    LLM_RETRY_ATTEMPTS: int = 3
    LLM_INITIAL_BACKOFF_MS: int = 2000
    # Substrings that mark a backend failure as a rate-limit condition.
    RATE_LIMIT_MARKERS: list[str] = [
        "RESOURCE_EXHAUSTED",
        '"code":429',
        '"code": 429',
        "rate limit",
    ]
    HIGH_QUALITY_ART_DEFAULT: bool = True

    # Storage
    CACHE_PREFIX: str = "lexiconNexus_"
    SETTINGS_PREFIX: str = "lexiconNexusSettings_"
    SETTINGS_FILE: str = "lexicon_settings.json"
    # Session cache lives in memory unless a file is given.
    CACHE_FILE: str | None = None

    # Presentation
    FALLBACK_ART_MAX_TOPIC_CHARS: int = 20

    # Logging & UI
    LOG_LEVEL_STR: str = Field("INFO", alias="LOG_LEVEL")
    LOG_FORMAT: str = (
        "%(asctime)s - %(levelname)s - [%(name)s:%(funcName)s:%(lineno)d] - %(message)s"
    )
    LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"
    LOG_FILE: str | None = None
    LOG_FILE_MAX_BYTES: int = 5 * 1024 * 1024
    LOG_FILE_BACKUPS: int = 3
    QUIET_LOGGERS: list[str] = ["httpx", "httpcore"]
    ENABLE_RICH_PROGRESS: bool = True

    @field_validator("GEMINI_API_KEY")
    @classmethod
    def blank_api_key_is_missing(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()

    @model_validator(mode="after")
    def check_retry_settings(self) -> LexiconSettings:
        if self.LLM_RETRY_ATTEMPTS < 1:
            raise ValueError("LLM_RETRY_ATTEMPTS must be at least 1")
        if self.LLM_INITIAL_BACKOFF_MS < 0:
            raise ValueError("LLM_INITIAL_BACKOFF_MS must not be negative")
        if self.GEMINI_API_KEY is None:
            logger.warning(
                "API_KEY is not set. A key must be configured in the settings store."
            )
        return self

    model_config = SettingsConfigDict(
        env_prefix="", env_file=".env", populate_by_name=True, extra="ignore"
    )


settings = LexiconSettings()
