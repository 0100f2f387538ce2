"""
Runtime settings for the platform backend.

All values come from environment variables so the same build runs locally,
in CI and against the hosted database. Read once at import; tests build their
own instances instead of mutating these.
"""

import os
from dataclasses import dataclass, field
from typing import Optional


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


# --- Database ---

DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL")

# Upper bound for any single statement against the hosted database.
DB_STATEMENT_TIMEOUT_MS: int = int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "5000"))
DB_CONNECT_TIMEOUT_SECONDS: int = int(os.getenv("DB_CONNECT_TIMEOUT_SECONDS", "5"))

# --- Auth ---

SUPABASE_JWT_SECRET: Optional[str] = os.getenv("SUPABASE_JWT_SECRET")
SUPABASE_JWT_AUDIENCE: str = os.getenv("SUPABASE_JWT_AUDIENCE", "authenticated")
REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# --- Expiry notifications ---

EXPIRY_WINDOW_START_DAYS: int = int(os.getenv("EXPIRY_WINDOW_START_DAYS", "6"))
EXPIRY_WINDOW_END_DAYS: int = int(os.getenv("EXPIRY_WINDOW_END_DAYS", "7"))
EXPIRY_JOB_DRY_RUN: bool = _env_bool("EXPIRY_JOB_DRY_RUN", "false")

# Shared secret the scheduler sends in X-Job-Secret; admins may trigger without it.
JOB_TRIGGER_SECRET: Optional[str] = os.getenv("JOB_TRIGGER_SECRET")


@dataclass(frozen=True)
class AiSettings:
    """Configuration for the AI assistant proxy."""

    api_key: Optional[str] = None
    primary_model: str = "gemini-2.0-flash"
    fallback_model: Optional[str] = "gemini-1.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout_seconds: float = 30.0
    temperature: float = 0.7
    max_output_tokens: int = 2048
    history_limit: int = 16
    models: tuple = field(init=False, default=())

    def __post_init__(self) -> None:
        models = [self.primary_model]
        if self.fallback_model and self.fallback_model != self.primary_model:
            models.append(self.fallback_model)
        object.__setattr__(self, "models", tuple(models))


def get_ai_settings() -> AiSettings:
    """Build AI settings from the environment."""
    return AiSettings(
        api_key=os.getenv("GEMINI_API_KEY") or None,
        primary_model=os.getenv("AI_PRIMARY_MODEL", "gemini-2.0-flash"),
        fallback_model=os.getenv("AI_FALLBACK_MODEL", "gemini-1.5-flash") or None,
        timeout_seconds=float(os.getenv("AI_TIMEOUT_SECONDS", "30")),
    )
