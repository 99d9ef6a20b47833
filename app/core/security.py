# =============================================================================================
# APP/CORE/SECURITY.PY - PASSWORD HASHING, JWT SIGNING, RANDOM TOKENS
# =============================================================================================
# Cryptographic primitives used by the auth router and the TokenService:
# 1. Password hashing with bcrypt (one-way, salted, configurable cost)
# 2. JWT encoding/decoding (HS256 signed access tokens)
# 3. Opaque refresh token generation (cryptographically secure random bytes)
#
# Nothing here touches the database; persistence lives in app/services/token_service.py.
# =============================================================================================

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt  # PyJWT
from passlib.context import CryptContext  # Bcrypt password hashing

from app.core.config import Settings, get_settings

# Refresh tokens carry 40 random bytes → 80 hex characters
REFRESH_TOKEN_BYTES = 40


# -------------------------
# PASSWORD HASHING SETUP (BCRYPT)
# -------------------------
# bcrypt__rounds applies the configured cost factor to newly created hashes.
# Verification reads the cost from the stored hash, so raising BCRYPT_ROUNDS later
# keeps old hashes valid.
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=get_settings().BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    """
    Hash a plaintext password using bcrypt.

    Same password → different hash each time (random salt stored inside the hash).

    Returns:
        Bcrypt hash string (60 characters, e.g., "$2b$10$...")
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Constant-time check of a plaintext password against a stored bcrypt hash."""
    return pwd_context.verify(plain_password, hashed_password)


# =============================================================================================
# JWT FUNCTIONS
# =============================================================================================

def encode_jwt(claims: dict[str, Any], settings: Settings, expires_in: int) -> str:
    """
    Sign `claims` into a JWT that expires `expires_in` seconds from now.

    `iat` and `exp` are added here; callers provide the identity claims.
    """
    now = datetime.now(timezone.utc)
    payload = {
        **claims,
        "iat": now,
        "exp": now + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_jwt(token: str, settings: Settings) -> dict[str, Any]:
    """
    Decode and verify a JWT.

    Checks signature, expiry and algorithm (only the configured algorithm is accepted,
    which blocks "alg: none" substitution).

    Raises:
        jwt.ExpiredSignatureError: Token has expired
        jwt.InvalidTokenError: Signature invalid, payload tampered or format wrong
    """
    return jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
    )


# =============================================================================================
# OPAQUE REFRESH TOKENS
# =============================================================================================

def generate_refresh_token() -> str:
    """
    Return a new opaque refresh token.

    Uses the OS CSPRNG (secrets module). With 320 bits of entropy a collision is not
    a practical concern; the unique index on refresh_tokens.token still rejects one.
    """
    return secrets.token_hex(REFRESH_TOKEN_BYTES)
