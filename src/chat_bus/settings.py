"""Application configuration using Pydantic Settings.

This module centralizes runtime configuration for the chat bus. Values can be
provided via environment variables (preferred) or fall back to the defaults
below. A ``Settings`` instance is intended to be retrieved via ``get_settings``
which caches the object for reuse across the process.

Environment variable prefix: ``CHAT_BUS_`` (e.g. ``CHAT_BUS_LOG_LEVEL``).
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chat_bus.event_bus.enums import ErrorPolicy


class Settings(BaseSettings):
    """Runtime settings.

    Attributes map directly to environment variables using the ``CHAT_BUS_``
    prefix (case-insensitive). For example, ``log_level`` <- ``CHAT_BUS_LOG_LEVEL``.
    """

    log_level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Application log level",
    )
    error_policy: ErrorPolicy = Field(
        default=ErrorPolicy.ISOLATE,
        description="Listener failure handling: isolate (report and continue) or fail_fast (raise)",
    )  # fmt: skip

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | None) -> str:
        """Normalize and validate log level."""
        if v is None:
            return "INFO"

        v_upper = str(v).upper()

        allowed = {"TRACE", "DEBUG", "INFO", "WARNING", "ERROR"}
        if v_upper not in allowed:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {', '.join(sorted(allowed))}")

        return v_upper

    @field_validator("error_policy", mode="before")
    @classmethod
    def normalize_error_policy(cls, v: str | ErrorPolicy) -> str:
        """Accept ``FAIL_FAST``, ``fail-fast`` and similar spellings."""
        return str(v).strip().lower().replace("-", "_")

    model_config = SettingsConfigDict(
        env_prefix="CHAT_BUS_",
        case_sensitive=False,
        extra="ignore",  # Ignore unexpected env vars
        env_file=".env",  # Optional .env loading (if present)
        env_file_encoding="utf-8",
    )


@lru_cache
def get_settings() -> Settings:
    """Return the cached ``Settings`` instance.

    The first invocation reads environment variables / .env file; subsequent
    calls reuse the same object to ensure consistent config.
    """

    return Settings()


__all__ = ["Settings", "get_settings"]
