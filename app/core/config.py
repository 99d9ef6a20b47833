# =============================================================================================
# APP/CORE/CONFIG.PY - CENTRALIZED CONFIGURATION WITH PYDANTIC SETTINGS
# =============================================================================================
# This module provides a type-safe, environment-driven configuration system using Pydantic.
#
# Every tunable of the service lives here: database location, JWT signing secret,
# token lifetimes, bcrypt cost, default roles for new accounts, logging.
#
# FLOW:
# 1. Environment (or .env file) → Settings fields
# 2. Validators reject a blank JWT secret, a weak bcrypt cost or a bad expiry string
# 3. get_settings() caches one instance for the process
# 4. Services receive the Settings object explicitly (TokenService(db, settings))
# =============================================================================================

import re
from functools import lru_cache  # Cache settings instance (load once, reuse everywhere)

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Duration strings accepted for ACCESS_TOKEN_EXP: "900", "30s", "15m", "2h", "1d"
_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: str) -> int:
    """
    Convert a duration string into seconds.

    EXAMPLES:
        parse_duration("15m")  → 900
        parse_duration("2h")   → 7200
        parse_duration("45")   → 45

    Raises:
        ValueError: if the string is not a positive number with an optional s/m/h/d suffix
    """
    match = _DURATION_RE.match(value)
    if not match:
        raise ValueError(f"Invalid duration: {value!r} (expected e.g. '15m', '2h', '900')")
    seconds = int(match.group(1)) * _DURATION_UNITS[match.group(2)]
    if seconds <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")
    return seconds


# -------------------------
# Settings class - Defines all configuration with types and defaults
# -------------------------
class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables.

    USAGE EXAMPLE:
        from app.core.config import get_settings
        settings = get_settings()
        print(settings.access_token_expire_seconds)  # 900 for "15m"
    """

    APP_NAME: str = "Currency Calculator Backend"

    # -------------------------
    # DATABASE CONFIGURATION
    # -------------------------
    # SQLAlchemy connection string, relative SQLite file by default
    DATABASE_URL: str = "sqlite:///./dev.db"

    # -------------------------
    # JWT (JSON WEB TOKEN) SETTINGS
    # -------------------------
    # Secret key for signing/verifying access tokens (required, no default)
    # Generate: openssl rand -hex 32
    JWT_SECRET: str

    # HS256 = HMAC with SHA-256
    JWT_ALGORITHM: str = "HS256"

    # Access token lifetime as a duration string ("15m", "1h", "900")
    ACCESS_TOKEN_EXP: str = "15m"

    # Refresh tokens are opaque and store-backed; lifetime in days
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30

    # Revoked refresh tokens are kept this long before the cleanup sweep deletes them
    REVOKED_TOKEN_GRACE_DAYS: int = 7

    # -------------------------
    # PASSWORD HASHING (BCRYPT)
    # -------------------------
    # Cost factor, each increment doubles hashing time
    BCRYPT_ROUNDS: int = 10

    # -------------------------
    # ACCOUNTS
    # -------------------------
    # Role tags given to every newly registered user
    DEFAULT_ROLES: list[str] = ["viewer"]

    # -------------------------
    # HTTP / LOGGING
    # -------------------------
    CORS_ORIGINS: list[str] = ["*"]
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -------------------------
    # Validators
    # -------------------------
    @field_validator("JWT_SECRET")
    @classmethod
    def _secret_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("JWT_SECRET must not be blank")
        return value

    @field_validator("ACCESS_TOKEN_EXP")
    @classmethod
    def _valid_expiry(cls, value: str) -> str:
        parse_duration(value)
        return value.strip()

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def _strong_enough(cls, value: int) -> int:
        if value < 10:
            raise ValueError("BCRYPT_ROUNDS must be at least 10")
        return value

    @property
    def access_token_expire_seconds(self) -> int:
        """ACCESS_TOKEN_EXP converted to seconds."""
        return parse_duration(self.ACCESS_TOKEN_EXP)


# -------------------------
# Cached settings instance - Load once, reuse everywhere
# -------------------------
@lru_cache
def get_settings() -> Settings:
    """
    Returns a singleton Settings instance (cached after first call).

    TESTING:
    To override settings in tests, clear the cache and set env vars:
        get_settings.cache_clear()
        monkeypatch.setenv("ACCESS_TOKEN_EXP", "1h")
        settings = get_settings()
    """
    return Settings()
