"""Application settings and configuration.

This module defines all configuration options for the Rate My Decision service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    List-valued options (allowed origins, write API keys) are kept as the raw
    comma-separated strings operators set; use the parsed properties below.
    """

    # Application metadata
    app_name: str = Field(default="Rate My Decision", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./ratemydecision.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Origin and key control
    cors_allowed_origins: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000",
        alias="CORS_ALLOWED_ORIGINS",
    )
    trust_proxy_headers: bool = Field(default=False, alias="TRUST_PROXY_HEADERS")
    # Multiple comma-separated keys allow rotation without downtime.
    write_api_keys: str = Field(default="", alias="WRITE_API_KEYS")

    # Fixed-window rate limits
    ip_rate_limit_per_minute: int = Field(default=120, alias="IP_RATE_LIMIT_PER_MINUTE")
    viewer_rate_limit_per_minute: int = Field(default=60, alias="VIEWER_RATE_LIMIT_PER_MINUTE")
    rate_limit_window_seconds: float = Field(default=60.0, alias="RATE_LIMIT_WINDOW_SECONDS")

    share_url_prefix: str = Field(default="/d/", alias="SHARE_URL_PREFIX")

    model_config = SettingsConfigDict(
        env_file=".env",
        populate_by_name=True,
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def allow_any_origin(self) -> bool:
        """Return True when CORS is configured in wildcard mode."""
        return self.cors_allowed_origins.strip() == "*"

    @property
    def allowed_origins(self) -> frozenset[str]:
        """Return the explicit CORS origin allowlist (empty in wildcard mode)."""
        if self.allow_any_origin:
            return frozenset()
        return frozenset(_split_csv(self.cors_allowed_origins))

    @property
    def api_keys(self) -> frozenset[str]:
        """Return the configured write API keys; empty means open write mode."""
        return frozenset(_split_csv(self.write_api_keys))

    @property
    def database_url_sync(self) -> str:
        """Return a sync-driver database URL for tooling such as Alembic."""
        url = self.database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        if url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+psycopg://", 1)
        return url


settings = Settings()
