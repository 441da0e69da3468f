"""Tests for StrataSettings."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from strata.core.settings import StrataSettings, get_settings, reset_settings


class TestDefaults:
    """Defaults when nothing is configured."""

    def test_defaults(self, monkeypatch):
        for name in (
            "STRATA_DEFAULT_TIMEOUT_SECONDS",
            "STRATA_AMBIENT_DEBOUNCE_SECONDS",
            "STRATA_METRICS_ENABLED",
        ):
            monkeypatch.delenv(name, raising=False)
        settings = StrataSettings(_env_file=None)
        assert settings.default_timeout_seconds == 300.0
        assert settings.ambient_debounce_seconds == 5.0
        assert settings.metrics_enabled is True
        assert settings.service_name == "strata"


class TestEnvironment:
    """Values read from STRATA_ environment variables."""

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("STRATA_DEFAULT_TIMEOUT_SECONDS", "12.5")
        monkeypatch.setenv("STRATA_AMBIENT_DEBOUNCE_SECONDS", "0")
        monkeypatch.setenv("STRATA_METRICS_ENABLED", "false")
        monkeypatch.setenv("STRATA_LOG_LEVEL", "DEBUG")
        settings = StrataSettings(_env_file=None)
        assert settings.default_timeout_seconds == 12.5
        assert settings.ambient_debounce_seconds == 0.0
        assert settings.metrics_enabled is False
        assert settings.log_level == "DEBUG"

    def test_non_positive_timeout_rejected(self, monkeypatch):
        monkeypatch.setenv("STRATA_DEFAULT_TIMEOUT_SECONDS", "0")
        with pytest.raises(PydanticValidationError):
            StrataSettings(_env_file=None)

    def test_negative_debounce_rejected(self):
        with pytest.raises(PydanticValidationError):
            StrataSettings(_env_file=None, ambient_debounce_seconds=-1)

    def test_unknown_variables_ignored(self, monkeypatch):
        monkeypatch.setenv("STRATA_SOMETHING_ELSE", "1")
        StrataSettings(_env_file=None)


class TestCaching:
    """get_settings() caching."""

    def test_cached(self):
        assert get_settings() is get_settings()

    def test_reset_rereads_environment(self, monkeypatch):
        monkeypatch.setenv("STRATA_AMBIENT_DEBOUNCE_SECONDS", "1.5")
        reset_settings()
        assert get_settings().ambient_debounce_seconds == 1.5

        monkeypatch.setenv("STRATA_AMBIENT_DEBOUNCE_SECONDS", "2.5")
        assert get_settings().ambient_debounce_seconds == 1.5
        reset_settings()
        assert get_settings().ambient_debounce_seconds == 2.5
