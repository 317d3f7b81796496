"""Application settings and configuration.

This module defines all configuration options for the ICT desk service.
Settings are loaded from environment variables with sensible defaults.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="ICT Desk", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./ictdesk.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Ticket numbering
    timezone: str = Field(default="UTC", alias="ICTDESK_TIMEZONE")
    ticket_width: int = Field(default=4, ge=1, alias="ICTDESK_TICKET_WIDTH")
    ticket_overflow: Literal["error", "widen"] = Field(
        default="error",
        alias="ICTDESK_TICKET_OVERFLOW",
    )
    allocation_max_retries: int = Field(
        default=3,
        ge=1,
        alias="ICTDESK_ALLOCATION_MAX_RETRIES",
    )

    # Reset requests must reference an organisational mailbox
    deped_email_domain: str = Field(
        default="@deped.gov.ph",
        alias="ICTDESK_DEPED_EMAIL_DOMAIN",
    )

    api_prefix: str = Field(default="", alias="ICTDESK_API_PREFIX")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def max_ticket_sequence(self) -> int:
        """Largest sequence that fits the configured ticket width."""
        return 10**self.ticket_width - 1


settings = Settings()
