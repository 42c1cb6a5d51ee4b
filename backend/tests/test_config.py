import pytest
from pydantic import ValidationError

from app.core.config import Settings


def test_cors_origins_accept_comma_list(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example.org, https://b.example.org")
    assert Settings(_env_file=None).CORS_ORIGINS == ["https://a.example.org", "https://b.example.org"]


def test_cors_origins_accept_json(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", '["https://a.example.org"]')
    assert Settings(_env_file=None).CORS_ORIGINS == ["https://a.example.org"]


def test_defaults(monkeypatch):
    for name in ("BUSINESS_TIMEZONE", "BUSINESS_OPEN_HOUR", "BUSINESS_CLOSE_HOUR", "ACCESS_TOKEN_EXPIRE_MINUTES"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None)
    assert settings.BUSINESS_TIMEZONE == "Africa/Johannesburg"
    assert (settings.BUSINESS_OPEN_HOUR, settings.BUSINESS_CLOSE_HOUR) == (7, 18)
    assert settings.ACCESS_TOKEN_EXPIRE_MINUTES == 7 * 24 * 60
    assert settings.DB_BUSY_RETRIES == 3


def test_business_hours_must_be_ordered(monkeypatch):
    monkeypatch.setenv("BUSINESS_OPEN_HOUR", "19")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)
