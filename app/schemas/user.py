# =============================================================================================
# APP/SCHEMAS/USER.PY - PYDANTIC SCHEMAS FOR USER REGISTRATION, LOGIN AND PROFILE
# =============================================================================================
# VALIDATION:
# - email: valid format (EmailStr), normalized to lower case
# - password: at least 5 characters on registration, non-empty on login
#
# Failed validation answers 400 "Validation failed" (see app/core/handlers.py).
# =============================================================================================

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class _Credentials(BaseModel):
    email: EmailStr = Field(
        ...,
        description="User's email address (used for login)",
        examples=["alice@example.com"],
    )

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        # EmailStr only lower-cases the domain; accounts are matched case-insensitively
        return value.lower()


class RegisterIn(_Credentials):
    """
    USAGE:
        POST /auth/register
        {
            "email": "alice@example.com",
            "password": "secret"
        }
    """

    password: str = Field(
        ...,
        min_length=5,
        description="User's password (will be hashed, minimum 5 characters)",
        examples=["SecurePassword123!"],
    )


class LoginIn(_Credentials):
    """Login accepts any non-empty password; the hash comparison decides."""

    password: str = Field(
        ...,
        min_length=1,
        description="User's password",
        examples=["SecurePassword123!"],
    )


class UserOut(BaseModel):
    """Safe user fields (never the password hash)."""

    id: str
    email: str
    roles: list[str]

    model_config = ConfigDict(from_attributes=True)


class ProfileOut(BaseModel):
    ok: bool = True
    user: UserOut


class MessageOut(BaseModel):
    """Generic success envelope: {"ok": true, "msg": "..."}."""

    ok: bool = True
    msg: str
