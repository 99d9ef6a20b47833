"""Settings parsing and validation."""

import pytest
from pydantic import ValidationError

from app.core.config import Settings, parse_duration


@pytest.mark.parametrize(
    "value, seconds",
    [("900", 900), ("30s", 30), ("15m", 900), ("2h", 7200), ("1d", 86400), (" 5m ", 300)],
)
def test_parse_duration(value, seconds):
    assert parse_duration(value) == seconds


@pytest.mark.parametrize("value", ["", "m", "15x", "-5m", "1.5h", "0", "0m"])
def test_parse_duration_rejects(value):
    with pytest.raises(ValueError):
        parse_duration(value)


def _settings(**overrides):
    values = {"JWT_SECRET": "a-test-secret", **overrides}
    return Settings(_env_file=None, **values)


def test_defaults():
    settings = _settings()

    assert settings.JWT_ALGORITHM == "HS256"
    assert settings.access_token_expire_seconds == 900
    assert settings.REFRESH_TOKEN_EXPIRE_DAYS == 30
    assert settings.REVOKED_TOKEN_GRACE_DAYS == 7
    assert settings.BCRYPT_ROUNDS == 10
    assert settings.DEFAULT_ROLES == ["viewer"]


def test_access_token_expiry_is_configurable():
    assert _settings(ACCESS_TOKEN_EXP="1h").access_token_expire_seconds == 3600


@pytest.mark.parametrize(
    "overrides",
    [
        {"JWT_SECRET": "   "},
        {"BCRYPT_ROUNDS": 9},
        {"ACCESS_TOKEN_EXP": "soon"},
    ],
)
def test_invalid_settings_are_rejected(overrides):
    with pytest.raises(ValidationError):
        _settings(**overrides)


def test_jwt_secret_is_required(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
