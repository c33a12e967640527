"""
Application settings module.

Manages all configuration via environment variables using pydantic-settings.
The settings object is immutable and built once at startup.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def split_csv(value: str) -> tuple[str, ...]:
    """Split a comma-separated env value, dropping blanks."""
    return tuple(item.strip() for item in value.split(",") if item.strip())


class PostgresSettings(BaseSettings):
    """PostgreSQL connection settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="PG_", extra="ignore", frozen=True
    )

    host: str = "localhost"
    port: int = 5432
    user: str = "admin"
    password: str = "1234"
    database: str = "scravo_dev"
    pool_max: int = 10

    @property
    def dsn(self) -> str:
        """Generate PostgreSQL DSN."""
        return (
            f"postgresql://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.database}"
        )


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 5000
    node_env: Literal["development", "production", "test"] = "development"
    log_level: Optional[str] = None

    # Display-only URLs
    frontend_url: Optional[str] = None
    render_external_url: Optional[str] = None

    # CORS (comma-separated)
    cors_origins: str = "http://localhost:5173,https://revalue-frontend.vercel.app"
    cors_origin_regex: Optional[str] = None
    cors_methods: str = "GET,POST,PUT,DELETE,OPTIONS"
    cors_headers: str = "Content-Type,Authorization,Accept"

    # Request handling
    body_limit_mb: int = 50
    uploads_dir: str = "uploads"
    request_timeout_seconds: float = 30.0

    # External handler groups, "module:attribute"
    auth_routes: Optional[str] = None
    listings_routes: Optional[str] = None
    transactions_routes: Optional[str] = None

    postgres: PostgresSettings = PostgresSettings()

    @field_validator("node_env", mode="before")
    @classmethod
    def normalize_node_env(cls, value):
        """Accept NODE_ENV in any case."""
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("body_limit_mb")
    @classmethod
    def check_body_limit(cls, value: int) -> int:
        """Body limit must be a positive bound."""
        if value <= 0:
            raise ValueError("BODY_LIMIT_MB must be greater than 0")
        return value

    @property
    def is_development(self) -> bool:
        return self.node_env == "development"

    @property
    def is_production(self) -> bool:
        return self.node_env == "production"

    @property
    def effective_log_level(self) -> str:
        """LOG_LEVEL if set, otherwise derived from NODE_ENV."""
        if self.log_level:
            return self.log_level.upper()
        return "DEBUG" if self.is_development else "INFO"

    @property
    def body_limit_bytes(self) -> int:
        return self.body_limit_mb * 1024 * 1024

    @property
    def allowed_origins(self) -> tuple[str, ...]:
        """Configured origins plus FRONTEND_URL when set."""
        origins = split_csv(self.cors_origins)
        if self.frontend_url:
            frontend = self.frontend_url.rstrip("/")
            if frontend not in origins:
                origins = origins + (frontend,)
        return origins

    @property
    def public_url(self) -> str:
        """Externally visible base URL, for display only."""
        if self.render_external_url:
            return self.render_external_url.rstrip("/")
        return f"http://localhost:{self.port}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
