"""Application settings using Pydantic Settings.

Centralized configuration for the pollution report backend.

SECURITY: Production requires the following environment variables:
- APP_JWT_SECRET: Key used to verify bearer tokens issued by the auth service (min 32 chars)
- APP_TRIGGER_SECRET: Shared secret presented by the hosting platform on trigger delivery
- EMAIL_USER / EMAIL_PASS: Mail account for outgoing notifications (optional, email is disabled without it)

Generate secrets with: python -c "import secrets; print(secrets.token_hex(32))"
"""

import logging
from functools import lru_cache
from typing import List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class EmailSettings(BaseSettings):
    """Mail transport configuration (Gmail SMTP by default)."""

    model_config = SettingsConfigDict(
        env_prefix="EMAIL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    user: str = Field(default="", description="Sender account / SMTP username")
    password: str = Field(
        default="",
        validation_alias=AliasChoices("EMAIL_PASSWORD", "EMAIL_PASS"),
        description="SMTP password (use an app password for Gmail)",
    )
    host: str = Field(default="smtp.gmail.com", description="SMTP host")
    port: int = Field(default=465, description="SMTP port")
    use_ssl: bool = Field(default=True, description="Use implicit TLS (port 465)")
    use_tls: bool = Field(default=False, description="Use STARTTLS (port 587)")
    from_name: str = Field(default="Pollution Report", description="Display name for the sender")

    @property
    def is_configured(self) -> bool:
        """Email is enabled only when both credentials are present."""
        return bool(self.user and self.password)


class VerificationSettings(BaseSettings):
    """One-time verification code configuration."""

    model_config = SettingsConfigDict(
        env_prefix="VERIFICATION_",
        extra="ignore",
    )

    code_ttl_minutes: int = Field(default=10, ge=1, description="Minutes a code stays valid")
    max_attempts: int = Field(default=5, ge=1, description="Verify attempts allowed per code")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application info
    name: str = Field(default="Pollution Report App", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    environment: str = Field(default="development", description="Environment name")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_json: bool = Field(default=False, description="Emit JSON formatted logs")

    # CORS
    cors_origins: list = Field(
        default=["http://localhost:4200", "https://local-pollution-report-app.web.app"],
        description="Allowed CORS origins"
    )

    # Auth (tokens are issued by the managed auth service, only verified here)
    jwt_secret: str = Field(
        default="change-me-in-production-INSECURE",
        description="Key used to verify bearer tokens"
    )
    jwt_algorithm: str = Field(default="HS256", description="Bearer token algorithm")

    # Trigger delivery
    trigger_secret: str = Field(
        default="",
        description="Shared secret expected in X-Trigger-Secret (empty disables the check outside production)"
    )
    dedupe_trigger_events: bool = Field(
        default=True,
        description="Skip trigger deliveries whose eventId was already processed"
    )

    # Password reset
    password_reset_continue_url: str = Field(
        default="https://local-pollution-report-app.web.app/login",
        description="Page the password reset link returns to"
    )

    # Nested settings (loaded separately)
    @property
    def email(self) -> EmailSettings:
        return EmailSettings()

    @property
    def verification(self) -> VerificationSettings:
        return VerificationSettings()

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment in ("production", "prod", "staging")

    def validate_production_security(self) -> List[str]:
        """
        Validate all security requirements for production.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not self.is_production:
            return errors

        if "INSECURE" in self.jwt_secret:
            errors.append("APP_JWT_SECRET: Must be set in production")
        elif len(self.jwt_secret) < 32:
            errors.append("APP_JWT_SECRET: Must be at least 32 characters")

        if not self.trigger_secret:
            errors.append("APP_TRIGGER_SECRET: Required in production")

        return errors


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings instance.

    Returns:
        Settings: Cached settings loaded from environment.
    """
    return Settings()
