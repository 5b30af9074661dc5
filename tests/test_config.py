from __future__ import annotations

import pytest

from config import DEMO, PRODUCTION, ConfigError, load_settings

_ENV = (
    "GATEWAY_MODE",
    "JWT_SECRET",
    "BREVO_API_KEY",
    "BREVO_FROM",
    "EMAIL_FROM",
    "DEMO_ACCEPT_ANY_CODE",
    "OTP_EXP_MINUTES",
    "PORT",
    "CORS_ORIGINS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)


def test_demo_defaults_generate_ephemeral_secret():
    first = load_settings()
    second = load_settings()

    assert first.mode == DEMO
    assert first.port == 5000
    assert first.otp_exp_minutes == 10
    assert first.jwt_exp_hours == 24
    assert first.jwt_secret and first.jwt_secret != second.jwt_secret
    assert first.cors_origins == ("*",)


def test_production_refuses_to_start_without_secrets(monkeypatch):
    monkeypatch.setenv("GATEWAY_MODE", "production")
    with pytest.raises(ConfigError, match="JWT_SECRET"):
        load_settings()

    monkeypatch.setenv("JWT_SECRET", "s")
    with pytest.raises(ConfigError, match="BREVO_API_KEY"):
        load_settings()


def test_production_settings(monkeypatch):
    monkeypatch.setenv("GATEWAY_MODE", "Production")
    monkeypatch.setenv("JWT_SECRET", "s")
    monkeypatch.setenv("BREVO_API_KEY", "k")
    monkeypatch.setenv("EMAIL_FROM", "noreply@x.com")
    monkeypatch.setenv("DEMO_ACCEPT_ANY_CODE", "true")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.com, https://b.com")

    settings = load_settings()
    assert settings.mode == PRODUCTION
    assert settings.is_demo is False
    assert settings.jwt_secret == "s"
    assert settings.brevo_from == "noreply@x.com"
    assert settings.demo_accept_any_code is False
    assert settings.cors_origins == ("https://a.com", "https://b.com")


def test_invalid_values(monkeypatch):
    monkeypatch.setenv("GATEWAY_MODE", "staging")
    with pytest.raises(ConfigError, match="GATEWAY_MODE"):
        load_settings()

    monkeypatch.setenv("GATEWAY_MODE", "demo")
    monkeypatch.setenv("OTP_EXP_MINUTES", "ten")
    with pytest.raises(ConfigError, match="OTP_EXP_MINUTES"):
        load_settings()
