"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class AuthConfig(BaseModel):
    """Bearer-token session configuration."""

    session_ttl_days: int = Field(
        default=7, alias="SESSION_TTL_DAYS", description="Number of days a login session stays valid"
    )

    model_config = {"populate_by_name": True}


class CollaborationConfig(BaseModel):
    """Limits applied to teams, notifications and the activity log."""

    max_team_size: int = Field(default=20, alias="MAX_TEAM_SIZE", description="Maximum members per project team")
    notification_ttl_days: int = Field(
        default=30, alias="NOTIFICATION_TTL_DAYS", description="Days before a notification expires"
    )
    max_notifications_per_user: int = Field(
        default=100, alias="MAX_NOTIFICATIONS_PER_USER", description="Notifications kept per user (oldest dropped)"
    )
    activity_max_entries: int = Field(
        default=10000, alias="ACTIVITY_MAX_ENTRIES", description="Activity log size that triggers trimming"
    )
    activity_trim_to: int = Field(
        default=5000, alias="ACTIVITY_TRIM_TO", description="Activity log size kept after trimming"
    )

    model_config = {"populate_by_name": True}


class ConsensusConfig(BaseModel):
    """Thresholds used to turn agreement percentages into consensus levels."""

    medium_threshold: int = Field(
        default=50, alias="CONSENSUS_MEDIUM_THRESHOLD", description="Agreement percentage for medium consensus"
    )
    high_threshold: int = Field(
        default=75, alias="CONSENSUS_HIGH_THRESHOLD", description="Agreement percentage for high consensus"
    )

    model_config = {"populate_by_name": True}


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", alias="THORAXLAB_LOG_LEVEL", description="Root log level")
    format: str = Field(default="detailed", alias="THORAXLAB_LOG_FORMAT", description="simple, detailed or json")
    file_dir: str = Field(default="logs", alias="THORAXLAB_LOG_FILE_DIR", description="Directory for log files")
    enable_file_logging: bool = Field(
        default=True, alias="THORAXLAB_ENABLE_FILE_LOGGING", description="Write logs to a file as well"
    )

    model_config = {"populate_by_name": True}


class CORSConfig(BaseModel):
    """CORS configuration."""

    origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS", description="Allowed CORS origins (use * for all)")
    allow_credentials: bool = Field(
        default=True, alias="CORS_ALLOW_CREDENTIALS", description="Allow credentials in CORS requests"
    )
    allow_methods: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_METHODS", description="Allowed HTTP methods (use * for all)"
    )
    allow_headers: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_HEADERS", description="Allowed HTTP headers (use * for all)"
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    # =====================================================================
    # Pydantic Configuration
    # =====================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # ThoraxLab Server Configuration
    # =====================================================================
    server_host: str = Field(
        default="0.0.0.0",
        description="ThoraxLab server host address to bind to",
        alias="THORAXLAB_SERVER_HOST",
    )
    server_port: int = Field(
        default=8000,
        description="ThoraxLab server port number",
        alias="THORAXLAB_SERVER_PORT",
    )
    slow_request_ms: float = Field(
        default=1000.0,
        description="Requests slower than this (milliseconds) are logged as warnings",
        alias="THORAXLAB_SLOW_REQUEST_MS",
    )

    # =====================================================================
    # Database Configuration
    # =====================================================================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./thoraxlab.db",
        description="Async SQLAlchemy connection URL for the application database",
        alias="DATABASE_URL",
    )

    # =====================================================================
    # Flat fields backing the grouped configurations
    # =====================================================================
    session_ttl_days: int = Field(default=7, alias="SESSION_TTL_DAYS")
    max_team_size: int = Field(default=20, alias="MAX_TEAM_SIZE")
    notification_ttl_days: int = Field(default=30, alias="NOTIFICATION_TTL_DAYS")
    max_notifications_per_user: int = Field(default=100, alias="MAX_NOTIFICATIONS_PER_USER")
    activity_max_entries: int = Field(default=10000, alias="ACTIVITY_MAX_ENTRIES")
    activity_trim_to: int = Field(default=5000, alias="ACTIVITY_TRIM_TO")
    consensus_medium_threshold: int = Field(default=50, alias="CONSENSUS_MEDIUM_THRESHOLD")
    consensus_high_threshold: int = Field(default=75, alias="CONSENSUS_HIGH_THRESHOLD")
    log_level: str = Field(default="INFO", alias="THORAXLAB_LOG_LEVEL")
    log_format: str = Field(default="detailed", alias="THORAXLAB_LOG_FORMAT")
    log_file_dir: str = Field(default="logs", alias="THORAXLAB_LOG_FILE_DIR")
    enable_file_logging: bool = Field(default=True, alias="THORAXLAB_ENABLE_FILE_LOGGING")
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(default=["*"], alias="CORS_ALLOW_METHODS")
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def auth(self) -> AuthConfig:
        """Get session configuration from environment variables."""
        return AuthConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def collaboration(self) -> CollaborationConfig:
        """Get team, notification and activity limits from environment variables."""
        return CollaborationConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def consensus(self) -> ConsensusConfig:
        """Get consensus thresholds from environment variables."""
        return ConsensusConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def logging(self) -> LoggingConfig:
        """Get logging configuration from environment variables."""
        return LoggingConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def cors(self) -> CORSConfig:
        """Get CORS configuration from environment variables."""
        return CORSConfig.model_validate(self.model_dump(by_alias=True))


settings = Settings()
