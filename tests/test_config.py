"""Tests for environment-driven settings."""

import dataclasses

import pytest

from app.config import Settings


class TestSettings:
    """Tests for Settings defaults and validation."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch):
        """Unset variables fall back to the documented defaults."""
        for name in ("MAX_LOGIN_ATTEMPTS", "LOCKOUT_MINUTES", "TOKEN_EXPIRE_MINUTES", "CLIENT_URL", "APP_ENV"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings()
        assert settings.MAX_LOGIN_ATTEMPTS == 5
        assert settings.LOCKOUT_MINUTES == 15
        assert settings.TOKEN_EXPIRE_MINUTES == 7 * 24 * 60
        assert settings.CLIENT_URL == "http://localhost:3000"
        assert settings.is_production is False

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch):
        """Values are read from the environment."""
        monkeypatch.setenv("MAX_LOGIN_ATTEMPTS", "3")
        monkeypatch.setenv("APP_ENV", "production")
        settings = Settings()
        assert settings.MAX_LOGIN_ATTEMPTS == 3
        assert settings.is_production is True

    def test_missing_secret_generated_with_warning(self, monkeypatch: pytest.MonkeyPatch):
        """An empty secret is replaced and reported."""
        monkeypatch.delenv("JWT_SECRET_KEY", raising=False)
        settings = Settings()
        assert settings.JWT_SECRET_KEY
        assert any("JWT_SECRET_KEY" in w for w in settings.validate())

    def test_secret_not_in_repr(self):
        """The signing key never shows up in logs of the settings object."""
        settings = Settings(JWT_SECRET_KEY="very-secret-value")
        assert "very-secret-value" not in repr(settings)

    def test_immutable(self):
        """Settings cannot be changed after construction."""
        settings = Settings()
        with pytest.raises(dataclasses.FrozenInstanceError):
            settings.MAX_LOGIN_ATTEMPTS = 10  # type: ignore[misc]

    def test_invalid_limits_reported(self):
        """Out-of-range limits show up in validate()."""
        warnings = Settings(MAX_LOGIN_ATTEMPTS=0, BCRYPT_ROUNDS=2).validate()
        assert any("MAX_LOGIN_ATTEMPTS" in w for w in warnings)
        assert any("BCRYPT_ROUNDS" in w for w in warnings)
