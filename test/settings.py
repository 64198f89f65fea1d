"""
Settings for the ThoraxLab test run.

Read from ``test/.env`` (optional) and the environment using ``__`` as the
nesting delimiter, e.g. ``DATABASE__URL`` or ``LOGGING__LEVEL``. The values
are pushed into the application's own environment variables by
``test/conftest.py`` before ``thoraxlab`` is imported.
"""

from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TestDatabaseConfig(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///:memory:", description="Database the app module binds to")


class TestLoggingConfig(BaseModel):
    level: str = Field(default="WARNING", description="Console level while tests run")
    enable_file_logging: bool = Field(default=False, description="Keep logs/thoraxlab.log out of the tree")


class TestSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).parent / ".env"),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    database: TestDatabaseConfig = Field(default_factory=TestDatabaseConfig)
    logging: TestLoggingConfig = Field(default_factory=TestLoggingConfig)

    def app_environment(self) -> dict[str, str]:
        """Environment variables ``thoraxlab.server.core.config`` reads at import."""
        return {
            "DATABASE_URL": self.database.url,
            "THORAXLAB_LOG_LEVEL": self.logging.level,
            "THORAXLAB_ENABLE_FILE_LOGGING": str(self.logging.enable_file_logging).lower(),
            "LOGFIRE_ENABLED": "false",
        }


test_settings = TestSettings()
