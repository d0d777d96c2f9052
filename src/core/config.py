"""Configuration management for the pass admin application.

Provides Pydantic-based configuration classes for type-safe, validated configuration
management using environment variables.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """Remote database configuration."""

    url: str | None = Field(default=None, description="PostgreSQL connection URL of the hosted database")
    connect_timeout: int = Field(default=10, description="Connection timeout in seconds")
    query_timeout: int = Field(default=30, description="Statement timeout in seconds")

    model_config = SettingsConfigDict(env_prefix="DATABASE_", case_sensitive=False, extra="ignore")


class AppConfig(BaseSettings):
    """Web application configuration."""

    flask_secret_key: str | None = Field(default=None, description="Secret used to sign the Flask session")
    production: bool = Field(default=False, description="Enable production cookie and proxy settings")
    admin_ui_port: int = Field(default=8001, description="Admin UI port")
    admin_server_type: str = Field(default="waitress", description="waitress or werkzeug")
    base_domain: str | None = Field(default=None, description="Apex domain used for subdomain routing")
    session_cookie_domain: str | None = Field(default=None, description="Cookie domain shared across subdomains")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False, extra="ignore")

    @field_validator("base_domain", "session_cookie_domain")
    @classmethod
    def normalize_domain(cls, v):
        """Lowercase domains and drop a trailing dot."""
        if not v:
            return None
        return v.strip().lower().rstrip(".")


class AdminAuthConfig(BaseSettings):
    """Operator login for the agency dashboard."""

    email: str = Field(default="", description="Operator email address")
    password: str = Field(default="", description="Operator password")

    model_config = SettingsConfigDict(env_prefix="ADMIN_", case_sensitive=False, extra="ignore")

    @property
    def is_configured(self) -> bool:
        return bool(self.email and self.password)


def load_env_file_settings(env_file: str) -> DatabaseConfig:
    """Load database settings from a committed env file (maintenance scripts)."""
    return DatabaseConfig(_env_file=env_file, _env_file_encoding="utf-8")


def get_app_config() -> AppConfig:
    return AppConfig()


def get_database_config() -> DatabaseConfig:
    return DatabaseConfig()


def get_admin_auth_config() -> AdminAuthConfig:
    return AdminAuthConfig()
