"""
Unit tests for the Logfire monitoring module.

This test suite covers:
- Opt-in initialization (disabled flag, missing token)
- Instrumentation feature flags
- The logging helpers falling back to the standard logger
"""

from unittest.mock import MagicMock, patch

import pytest

from thoraxlab.core import monitoring


@pytest.fixture(autouse=True)
def _reset_configured(monkeypatch):
    monkeypatch.setattr(monitoring, "_configured", False)


class TestInitializeLogfire:
    """Test initialize_logfire under different configurations."""

    def test_disabled(self, monkeypatch):
        monkeypatch.setattr(monitoring, "LOGFIRE_ENABLED", False)

        with patch.object(monitoring, "logfire") as mock_logfire:
            assert monitoring.initialize_logfire() is False

        mock_logfire.configure.assert_not_called()
        assert monitoring.is_logfire_configured() is False

    def test_enabled_without_token(self, monkeypatch):
        monkeypatch.setattr(monitoring, "LOGFIRE_ENABLED", True)
        monkeypatch.setattr(monitoring, "LOGFIRE_TOKEN", "")

        with patch.object(monitoring, "logfire") as mock_logfire, patch.object(monitoring, "logger") as mock_logger:
            assert monitoring.initialize_logfire() is False

        mock_logfire.configure.assert_not_called()
        mock_logger.warning.assert_called_once()

    def test_enabled_with_token_instruments_everything(self, monkeypatch):
        monkeypatch.setattr(monitoring, "LOGFIRE_ENABLED", True)
        monkeypatch.setattr(monitoring, "LOGFIRE_TOKEN", "token-123")
        app = MagicMock()

        with patch.object(monitoring, "logfire") as mock_logfire:
            assert monitoring.initialize_logfire(app) is True

        mock_logfire.configure.assert_called_once_with(
            token="token-123",
            service_name=monitoring.LOGFIRE_SERVICE_NAME,
            service_version=monitoring.LOGFIRE_SERVICE_VERSION,
            environment=monitoring.LOGFIRE_ENVIRONMENT,
        )
        mock_logfire.instrument_sqlalchemy.assert_called_once()
        mock_logfire.instrument_httpx.assert_called_once()
        mock_logfire.instrument_fastapi.assert_called_once_with(app)
        assert monitoring.is_logfire_configured() is True

    def test_feature_flags_and_missing_app(self, monkeypatch):
        monkeypatch.setattr(monitoring, "LOGFIRE_ENABLED", True)
        monkeypatch.setattr(monitoring, "LOGFIRE_TOKEN", "token-123")
        monkeypatch.setattr(monitoring, "LOGFIRE_TRACE_SQLALCHEMY", False)
        monkeypatch.setattr(monitoring, "LOGFIRE_TRACE_HTTPX", False)

        with patch.object(monitoring, "logfire") as mock_logfire:
            monitoring.initialize_logfire()

        mock_logfire.instrument_sqlalchemy.assert_not_called()
        mock_logfire.instrument_httpx.assert_not_called()
        mock_logfire.instrument_fastapi.assert_not_called()


class TestLoggingHelpers:
    """The helpers write debug records until Logfire is configured."""

    @pytest.mark.parametrize(
        "call",
        [
            lambda: monitoring.log_api_request("GET", "/api/v1/projects", 200, 12.5),
            lambda: monitoring.log_consensus_reached("p1", "d1", "high", "dec1"),
            lambda: monitoring.log_error("ValueError", "boom", {"path": "/x"}),
        ],
    )
    def test_fallback_to_logger(self, call):
        with patch.object(monitoring, "logfire") as mock_logfire, patch.object(monitoring, "logger") as mock_logger:
            call()

        mock_logger.debug.assert_called_once()
        mock_logfire.info.assert_not_called()
        mock_logfire.error.assert_not_called()

    def test_api_request_sent_when_configured(self, monkeypatch):
        monkeypatch.setattr(monitoring, "_configured", True)

        with patch.object(monitoring, "logfire") as mock_logfire:
            monitoring.log_api_request("POST", "/api/v1/auth/login", 200, 3.0)

        mock_logfire.info.assert_called_once_with(
            "API request completed", method="POST", path="/api/v1/auth/login", status_code=200, duration_ms=3.0
        )

    def test_consensus_sent_when_configured(self, monkeypatch):
        monkeypatch.setattr(monitoring, "_configured", True)

        with patch.object(monitoring, "logfire") as mock_logfire:
            monitoring.log_consensus_reached("p1", "d1", "high", "dec1")

        mock_logfire.info.assert_called_once_with(
            "Consensus reached", project_id="p1", discussion_id="d1", level="high", decision_id="dec1"
        )

    def test_error_context_is_forwarded(self, monkeypatch):
        monkeypatch.setattr(monitoring, "_configured", True)

        with patch.object(monitoring, "logfire") as mock_logfire:
            monitoring.log_error("ValueError", "boom", {"path": "/x"})

        mock_logfire.error.assert_called_once_with(
            "{error_type}: {error_message}", error_type="ValueError", error_message="boom", path="/x"
        )
