"""
Configuration management for the Ops Dashboard.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = Field(default="Ops Dashboard")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # API
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    api_workers: int = Field(default=1)
    cors_allow_origins: str = Field(
        default="*",
        description="Comma-separated list of origins allowed by CORS.",
    )

    # Database
    database_url: str = Field(default="sqlite:///./ops_dashboard.db")
    run_migrations_on_startup: bool = Field(default=True)
    seed_sample_data: bool = Field(
        default=False,
        description="Insert demo rows into empty tables at startup.",
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    # Argo CD
    argocd_base_url: Optional[str] = Field(
        default=None,
        description="Base URL of the Argo CD API server, e.g. 'https://argocd.example.com'.",
    )
    argocd_ca_bundle: Optional[str] = Field(
        default=None,
        description="Path to a PEM bundle trusted for the Argo CD endpoint (self-signed deployments).",
    )
    argocd_timeout_seconds: float = Field(default=30.0)

    def allowed_origins(self) -> list[str]:
        """Return the parsed CORS origin list."""
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
