"""Environment-driven settings for the explainer service.

Environment:
- ENVIRONMENT: deployment label reported by the health check
- AWS_REGION, BEDROCK_MODEL_ID, BEDROCK_MAX_TOKENS, BEDROCK_MAX_ATTEMPTS,
  BEDROCK_READ_TIMEOUT: completion provider configuration
- HISTORY_MAX_ENTRIES: exchange history bound ("none" for unbounded)
- CHAT_MAX_TURNS: chat turn bound
- PROMPT_TEMPLATES_PATH: optional JSON file overriding prompt templates
- LOG_LEVEL: root log level
"""

from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_MODEL_ID = "anthropic.claude-3-haiku-20240307-v1:0"
DEFAULT_HISTORY_MAX_ENTRIES = 100
DEFAULT_CHAT_MAX_TURNS = 20


def _env_optional_int(name: str, default: int | None) -> int | None:
    """Read an integer env var where "none"/"unbounded" mean no limit."""

    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    if raw.strip().lower() in {"none", "unbounded"}:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Env values arrive as strings; validate defaults so they are coerced.
    model_config = ConfigDict(validate_default=True)

    environment: str = Field(
        default_factory=lambda: os.getenv("ENVIRONMENT", "dev")
    )
    aws_region: str = Field(
        default_factory=lambda: os.getenv("AWS_REGION")
        or os.getenv("AWS_DEFAULT_REGION")
        or "us-east-1"
    )
    bedrock_model_id: str = Field(
        default_factory=lambda: os.getenv("BEDROCK_MODEL_ID", DEFAULT_MODEL_ID)
    )
    bedrock_max_tokens: int = Field(
        default_factory=lambda: os.getenv("BEDROCK_MAX_TOKENS", "4095"), gt=0
    )
    bedrock_max_attempts: int = Field(
        default_factory=lambda: os.getenv("BEDROCK_MAX_ATTEMPTS", "3"), ge=1
    )
    bedrock_read_timeout: int = Field(
        default_factory=lambda: os.getenv("BEDROCK_READ_TIMEOUT", "120"), gt=0
    )
    history_max_entries: int | None = Field(
        default_factory=lambda: _env_optional_int(
            "HISTORY_MAX_ENTRIES", DEFAULT_HISTORY_MAX_ENTRIES
        )
    )
    chat_max_turns: int = Field(
        default_factory=lambda: os.getenv(
            "CHAT_MAX_TURNS", str(DEFAULT_CHAT_MAX_TURNS)
        ),
        ge=1,
    )
    prompt_templates_path: str | None = Field(
        default_factory=lambda: os.getenv("PROMPT_TEMPLATES_PATH") or None
    )
    log_level: str = Field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper()
    )

    @field_validator("history_max_entries")
    @classmethod
    def _positive_bound(cls, value: int | None) -> int | None:
        if value is not None and value < 1:
            raise ValueError("HISTORY_MAX_ENTRIES must be at least 1")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return process-wide settings, read once from the environment."""
    return Settings()
