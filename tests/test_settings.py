"""Tests for application settings."""

from config.database import DatabaseSettings
from config.settings import Settings, VerificationSettings


class TestProductionValidation:

    def test_development_has_no_problems(self):
        assert Settings(environment="development").validate_production_security() == []

    def test_production_requires_secrets(self):
        problems = Settings(environment="production", trigger_secret="").validate_production_security()

        assert any(p.startswith("APP_JWT_SECRET") for p in problems)
        assert any(p.startswith("APP_TRIGGER_SECRET") for p in problems)

    def test_production_without_email_is_allowed(self, monkeypatch):
        monkeypatch.setenv("EMAIL_USER", "")
        settings = Settings(
            environment="production",
            jwt_secret="x" * 40,
            trigger_secret="shared-secret",
        )

        assert settings.validate_production_security() == []
        assert not settings.email.is_configured


class TestDefaults:

    def test_verification_defaults(self):
        settings = VerificationSettings()
        assert settings.code_ttl_minutes == 10
        assert settings.max_attempts == 5

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("VERIFICATION_MAX_ATTEMPTS", "3")
        assert VerificationSettings().max_attempts == 3

    def test_memory_store_by_default(self, monkeypatch):
        monkeypatch.setenv("DB_DRIVER", "memory")
        assert DatabaseSettings().is_memory

    def test_sqlite_url(self, tmp_path):
        settings = DatabaseSettings(driver="sqlite+aiosqlite", sqlite_path=tmp_path / "db.sqlite")
        assert settings.async_url.startswith("sqlite+aiosqlite:///")
        assert not settings.is_memory
