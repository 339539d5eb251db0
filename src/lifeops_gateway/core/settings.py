"""Application settings and configuration.

This module defines all configuration options for the LifeOps integration gateway.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="LifeOps Gateway", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")

    # Security and authentication
    secret_key: str = Field(default="change-me-in-production", alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(default=60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    debug: bool = Field(default=False, alias="DEBUG")

    # Fernet key for credential blobs; derived from SECRET_KEY when unset
    credential_encryption_key: str | None = Field(
        default=None,
        alias="CREDENTIAL_ENCRYPTION_KEY",
    )

    # Database configuration
    database_url: str = Field(default="sqlite:///./lifeops.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # CI/CD provider endpoints
    github_api_base_url: str = Field(
        default="https://api.github.com",
        alias="GITHUB_API_BASE_URL",
    )
    github_api_version: str = Field(default="2022-11-28", alias="GITHUB_API_VERSION")
    circleci_default_base_url: str = Field(
        default="https://circleci.com/api/v2",
        alias="CIRCLECI_BASE_URL",
    )
    provider_http_timeout_seconds: float = Field(
        default=15.0,
        alias="PROVIDER_HTTP_TIMEOUT_SECONDS",
    )

    # Webhook delivery
    webhook_max_retries: int = Field(default=3, ge=1, alias="WEBHOOK_MAX_RETRIES")
    webhook_retry_base_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        alias="WEBHOOK_RETRY_BASE_DELAY_SECONDS",
    )
    webhook_http_timeout_seconds: float = Field(
        default=10.0,
        alias="WEBHOOK_HTTP_TIMEOUT_SECONDS",
    )

    # CORS configuration for the dashboard frontend
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides.

        Returns:
            The active database URL (test database if in testing mode, otherwise production)
        """
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()
