import pytest

from screenshot_api.config import Settings
from screenshot_api.errors import ConfigurationError


def test_defaults(monkeypatch):
    for name in ("PORT", "CORS_ORIGINS", "MAX_BODY_SIZE", "DEBUG", "BROWSER_ARGS"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings()

    assert settings.PORT == 3001
    assert settings.CORS_ORIGINS == ["*"]
    assert settings.MAX_BODY_SIZE == 50 * 1024 * 1024
    assert settings.DEBUG is False
    assert settings.BROWSER_ARGS == ["--no-sandbox", "--disable-dev-shm-usage"]


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example.com, https://b.example.com")
    monkeypatch.setenv("DEBUG", "true")

    settings = Settings()

    assert settings.PORT == 8080
    assert settings.CORS_ORIGINS == ["https://a.example.com", "https://b.example.com"]
    assert settings.DEBUG is True


def test_missing_secret_key_is_fatal(monkeypatch):
    monkeypatch.delenv("CLERK_SECRET_KEY", raising=False)

    with pytest.raises(ConfigurationError, match="CLERK_SECRET_KEY"):
        Settings().validate()


def test_non_numeric_port_is_fatal(monkeypatch):
    monkeypatch.setenv("CLERK_SECRET_KEY", "sk_test")
    monkeypatch.setenv("PORT", "http")

    with pytest.raises(ConfigurationError, match="PORT"):
        Settings().validate()


def test_valid_settings(monkeypatch):
    monkeypatch.setenv("CLERK_SECRET_KEY", "sk_test")
    monkeypatch.setenv("PORT", "3001")
    Settings().validate()
