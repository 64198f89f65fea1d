"""Unit tests for server configuration settings model.

Tests verify that the Settings model binds the variables documented in the
.env.example file and that the grouped configuration views agree with the
flat fields.
"""

from pathlib import Path

import pytest

from thoraxlab.server.core.config import (
    AuthConfig,
    CollaborationConfig,
    ConsensusConfig,
    CORSConfig,
    LoggingConfig,
    Settings,
)


@pytest.fixture
def env_example_path() -> Path:
    """Get path to .env.example file."""
    return Path(__file__).resolve().parents[4] / ".env.example"


@pytest.fixture
def env_example_vars(env_example_path: Path) -> dict[str, str]:
    """Parse .env.example file and return environment variables."""
    env_vars = {}
    with open(env_example_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, value = line.split("=", 1)
                env_vars[key.strip()] = value.strip()
    return env_vars


def _isolated(monkeypatch, **env) -> Settings:
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return Settings(_env_file=None)


class TestSettingsBinding:
    """Test Settings model environment variable binding."""

    def test_every_documented_variable_is_bound(self, env_example_vars, monkeypatch):
        known = {field.alias for field in Settings.model_fields.values()}

        undocumented = {key for key in env_example_vars if not key.startswith("LOGFIRE_")} - known

        assert undocumented == set()

    def test_example_values_load(self, env_example_vars, monkeypatch):
        for key, value in env_example_vars.items():
            monkeypatch.setenv(key, value)

        settings = Settings(_env_file=None)

        assert settings.server_port == int(env_example_vars["THORAXLAB_SERVER_PORT"])
        assert settings.database_url == env_example_vars["DATABASE_URL"]
        assert settings.cors_origins == ["*"]

    def test_server_binding(self, monkeypatch):
        settings = _isolated(monkeypatch, THORAXLAB_SERVER_HOST="127.0.0.1", THORAXLAB_SERVER_PORT="9001")

        assert settings.server_host == "127.0.0.1"
        assert settings.server_port == 9001

    def test_database_url_binding(self, monkeypatch):
        settings = _isolated(monkeypatch, DATABASE_URL="postgresql://u:p@db/thoraxlab")

        assert settings.database_url == "postgresql://u:p@db/thoraxlab"


class TestGroupedConfigs:
    """The grouped views are rebuilt from the flat fields."""

    def test_auth(self, monkeypatch):
        settings = _isolated(monkeypatch, SESSION_TTL_DAYS="14")

        assert isinstance(settings.auth, AuthConfig)
        assert settings.auth.session_ttl_days == 14

    def test_collaboration(self, monkeypatch):
        settings = _isolated(monkeypatch, MAX_TEAM_SIZE="5", MAX_NOTIFICATIONS_PER_USER="10")

        collaboration = settings.collaboration
        assert isinstance(collaboration, CollaborationConfig)
        assert collaboration.max_team_size == 5
        assert collaboration.max_notifications_per_user == 10
        assert collaboration.activity_max_entries == 10000
        assert collaboration.activity_trim_to == 5000

    def test_consensus(self, monkeypatch):
        settings = _isolated(monkeypatch, CONSENSUS_HIGH_THRESHOLD="80")

        assert isinstance(settings.consensus, ConsensusConfig)
        assert (settings.consensus.medium_threshold, settings.consensus.high_threshold) == (50, 80)

    def test_logging(self, monkeypatch):
        settings = _isolated(monkeypatch, THORAXLAB_LOG_FORMAT="json", THORAXLAB_ENABLE_FILE_LOGGING="false")

        assert isinstance(settings.logging, LoggingConfig)
        assert settings.logging.format == "json"
        assert settings.logging.enable_file_logging is False

    def test_cors(self, monkeypatch):
        settings = _isolated(monkeypatch, CORS_ORIGINS='["https://thoraxlab.example.org"]')

        assert isinstance(settings.cors, CORSConfig)
        assert settings.cors.origins == ["https://thoraxlab.example.org"]
        assert settings.cors.allow_methods == ["*"]

    def test_assignment_is_reflected(self):
        settings = Settings(_env_file=None)

        settings.max_team_size = 3

        assert settings.collaboration.max_team_size == 3
