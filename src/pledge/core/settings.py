"""Library settings for pledge.

The library itself needs very little configuration: how to log, and how
strictly to police tasks that break the single-completion contract.
``PledgeSettings`` reads these from ``PLEDGE_*`` environment variables or a
``.env`` file so an application can tune them without code changes.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not on first use
    - **Environment-driven:** Reads from env vars and .env files
    - **Prefixed:** Every variable is namespaced with ``PLEDGE_``
    - **Sensible defaults:** Works out of the box

Examples:
    >>> from pledge.core.settings import get_settings
    >>> get_settings().strict_completion
    False

Tags:
    settings, configuration, pydantic, environment, pledge

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

import logging

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pledge.core.errors import ConfigError


class PledgeSettings(BaseSettings):
    """Settings shared by every deferred computation in the process.

    Fields
    ──────
    log_level          : Structlog log level
    log_json           : JSON log output; None auto-detects from the TTY
    service_name       : ``service.name`` field on every log event
    strict_completion  : Raise DuplicateCompletionError when a task
                         completes twice instead of logging and ignoring it
    """

    model_config = SettingsConfigDict(
        env_prefix="PLEDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None
    service_name: str = "pledge"

    # ── Lifecycle ────────────────────────────────────────────────
    strict_completion: bool = Field(
        default=False,
        description="Raise on duplicate task completion instead of ignoring it",
    )

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value!r}")
        return level


_settings: PledgeSettings | None = None


def get_settings() -> PledgeSettings:
    """Return the process-wide settings, loading them on first use.

    Raises:
        ConfigError: If a PLEDGE_* variable holds an invalid value.
    """
    global _settings
    if _settings is None:
        try:
            _settings = PledgeSettings()
        except ValidationError as exc:
            raise ConfigError("Invalid pledge settings", cause=exc) from exc
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None


__all__ = ["PledgeSettings", "get_settings", "reset_settings"]
