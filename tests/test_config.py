"""Tests for settings and logging configuration."""

import logging

import pytest
import structlog

from formbridge.config import Settings, get_settings
from formbridge.logging_config import configure_logging, resolve_log_level
from formbridge.providers.rule_set_provider import RuleSetValidationProvider


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.PARALLEL_RULE_SETS is True
        assert settings.SERIALIZE_VALIDATION is True
        assert settings.UNRESOLVED_FAILURE_POLICY == "drop"
        assert settings.DEBUG is False

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("FORMBRIDGE_PARALLEL_RULE_SETS", "false")
        monkeypatch.setenv("FORMBRIDGE_UNRESOLVED_FAILURE_POLICY", "model")
        settings = Settings()
        assert settings.PARALLEL_RULE_SETS is False
        assert settings.UNRESOLVED_FAILURE_POLICY == "model"

    def test_invalid_policy_rejected(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("FORMBRIDGE_UNRESOLVED_FAILURE_POLICY", "explode")
        with pytest.raises(ValueError):
            Settings()

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_provider_reads_settings(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("FORMBRIDGE_SERIALIZE_VALIDATION", "false")
        monkeypatch.setenv("FORMBRIDGE_PARALLEL_RULE_SETS", "false")
        get_settings.cache_clear()

        provider = RuleSetValidationProvider()
        assert provider.serialize is False
        assert provider.parallel is False

    def test_constructor_arguments_win(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("FORMBRIDGE_SERIALIZE_VALIDATION", "false")
        get_settings.cache_clear()
        assert RuleSetValidationProvider(serialize=True).serialize is True


class TestLogging:
    @pytest.mark.parametrize(
        "name, level",
        [("debug", logging.DEBUG), ("INFO", logging.INFO), (" warning ", logging.WARNING), ("bogus", logging.INFO)],
    )
    def test_resolve_log_level(self, name: str, level: int):
        assert resolve_log_level(name) == level

    def test_configure_logging_json(self, capsys: pytest.CaptureFixture[str]):
        configure_logging(Settings(DEBUG=False, LOG_LEVEL="info"))
        structlog.get_logger().info("probe_event", answer=42)
        out = capsys.readouterr().out
        assert '"event": "probe_event"' in out
        assert '"answer": 42' in out

    def test_configure_logging_filters_below_level(self, capsys: pytest.CaptureFixture[str]):
        configure_logging(Settings(LOG_LEVEL="error"))
        structlog.get_logger().warning("quiet_event")
        assert "quiet_event" not in capsys.readouterr().out

    def test_configure_logging_console(self, capsys: pytest.CaptureFixture[str]):
        configure_logging(Settings(DEBUG=True, LOG_LEVEL="debug"))
        structlog.get_logger().debug("console_event")
        assert "console_event" in capsys.readouterr().out

    @pytest.fixture(autouse=True)
    def _reset_structlog(self):
        yield
        structlog.reset_defaults()
