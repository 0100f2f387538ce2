"""Configuration module for backend services."""

from azhari_platform.config.settings import (
    DATABASE_URL,
    DB_STATEMENT_TIMEOUT_MS,
    EXPIRY_WINDOW_START_DAYS,
    EXPIRY_WINDOW_END_DAYS,
    EXPIRY_JOB_DRY_RUN,
    AiSettings,
    get_ai_settings,
)

__all__ = [
    "DATABASE_URL",
    "DB_STATEMENT_TIMEOUT_MS",
    "EXPIRY_WINDOW_START_DAYS",
    "EXPIRY_WINDOW_END_DAYS",
    "EXPIRY_JOB_DRY_RUN",
    "AiSettings",
    "get_ai_settings",
]
