"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        PLATFORM_DB_HOST: Database host (default: localhost)
        PLATFORM_DB_PORT: Database port (default: 5432)
        PLATFORM_DB_DATABASE: Database name (default: platform)
        PLATFORM_DB_USERNAME: Database user (default: platform)
        PLATFORM_DB_PASSWORD: Database password (required in production)
        PLATFORM_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        PLATFORM_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
        PLATFORM_DB_POOL_TIMEOUT_SECONDS: Wait for a pooled connection (default: 30)
        PLATFORM_DB_POOL_RECYCLE_SECONDS: Connection lifetime (default: 1800)
        PLATFORM_DB_APPLICATION_NAME: Reported to PostgreSQL (default: platform-identity)
    """

    model_config = SettingsConfigDict(
        env_prefix="PLATFORM_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="platform", description="Database name")
    username: str = Field(default="platform", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_min_connections: int = Field(
        default=2,
        description="Minimum connections in pool",
        ge=1,
        le=100,
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )
    pool_timeout_seconds: float = Field(
        default=30.0,
        description="Seconds to wait for a pooled connection",
        gt=0,
    )
    pool_recycle_seconds: int = Field(
        default=1800,
        description="Recycle connections older than this",
        ge=-1,
    )
    application_name: str = Field(
        default="platform-identity",
        description="application_name reported to PostgreSQL",
    )

    @model_validator(mode="after")
    def validate_pool_settings(self) -> "DatabaseSettings":
        """Validate pool max >= min."""
        if self.pool_max_connections < self.pool_min_connections:
            raise ValueError(
                f"pool_max_connections ({self.pool_max_connections}) must be >= "
                f"pool_min_connections ({self.pool_min_connections})"
            )
        return self

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class AuthSettings(BaseSettings):
    """Session token verification settings.

    Environment variables:
        PLATFORM_AUTH_SESSION_TOKEN_SECRET: Shared HMAC secret for session tokens (required)
        PLATFORM_AUTH_SESSION_TOKEN_ALGORITHM: Signing algorithm (default: HS256)
        PLATFORM_AUTH_LEEWAY_SECONDS: Clock skew tolerated on expiry (default: 0)
    """

    model_config = SettingsConfigDict(
        env_prefix="PLATFORM_AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    session_token_secret: SecretStr = Field(
        description="Secret used to verify session token signatures",
    )
    session_token_algorithm: str = Field(
        default="HS256",
        description="Session token signing algorithm",
    )
    leeway_seconds: int = Field(
        default=0,
        description="Clock skew tolerance applied to token expiry",
        ge=0,
        le=300,
    )

    @field_validator("session_token_secret")
    @classmethod
    def secret_not_blank(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value().strip():
            raise ValueError("session_token_secret must not be blank")
        return v


class ReadinessSettings(BaseSettings):
    """Store readiness settings for the startup sequence.

    Environment variables:
        PLATFORM_READINESS_STARTUP_RETRIES: Connection attempts before failing (default: 5)
        PLATFORM_READINESS_RETRY_DELAY_SECONDS: Delay between attempts (default: 2.0)
        PLATFORM_READINESS_RETRY_AFTER_SECONDS: Retry-After hint on 503 (default: 5)
    """

    model_config = SettingsConfigDict(
        env_prefix="PLATFORM_READINESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    startup_retries: int = Field(default=5, ge=1, le=100)
    retry_delay_seconds: float = Field(default=2.0, ge=0)
    retry_after_seconds: int = Field(default=5, ge=1)


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_prefix="PLATFORM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Platform API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")
    log_format: Literal["auto", "console", "json"] = Field(
        default="auto",
        description="Log renderer: console, json, or auto-detect from the terminal",
    )

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()

    @property
    def auth(self) -> AuthSettings:
        """Get session token settings."""
        return get_auth_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_auth_settings() -> AuthSettings:
    """Get cached session token settings."""
    return AuthSettings()


@lru_cache
def get_readiness_settings() -> ReadinessSettings:
    """Get cached readiness settings."""
    return ReadinessSettings()
