"""Settings for the Strata execution layer.

Defaults for interactor deadlines, the ambient busy-signal debounce window,
logging and metrics. Values come from ``STRATA_``-prefixed environment
variables or a ``.env`` file; constructor arguments on individual
interactors still win over these defaults.

Examples:
    >>> from strata.core.settings import get_settings
    >>> get_settings().default_timeout_seconds
    300.0

    $ STRATA_AMBIENT_DEBOUNCE_SECONDS=1.5 python app.py

Tags:
    settings, configuration, pydantic, environment, strata
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StrataSettings(BaseSettings):
    """Process-wide defaults for interactors.

    Fields
    ──────
    default_timeout_seconds  : Deadline applied when invoke() gets no timeout
    ambient_debounce_seconds : Quiescence window before ambient work shows as busy
    log_level                : Structlog log level
    log_json                 : JSON logs (None = auto-detect from tty)
    service_name             : service.name attached to every log line
    metrics_enabled          : Record interactor metrics in the default registry
    """

    model_config = SettingsConfigDict(
        env_prefix="STRATA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Execution ────────────────────────────────────────────────
    default_timeout_seconds: float = Field(default=300.0, gt=0)
    ambient_debounce_seconds: float = Field(default=5.0, ge=0)

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None
    service_name: str = "strata"
    metrics_enabled: bool = True


@lru_cache(maxsize=1)
def get_settings() -> StrataSettings:
    """Return the cached process-wide settings."""
    return StrataSettings()


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()


__all__ = ["StrataSettings", "get_settings", "reset_settings"]
