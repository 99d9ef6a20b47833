# =============================================================================================
# APP/SCHEMAS/AUTH.PY - PYDANTIC SCHEMAS FOR TOKENS AND CALLER IDENTITY
# =============================================================================================
# SCHEMAS:
# - CurrentUser: identity carried by a verified access token (id + role tags)
# - RefreshTokenIn: body of /auth/refresh and /auth/logout
# - LoginOut / RefreshOut: token responses
#
# JSON keys are camelCase ("accessToken", "refreshToken") to match existing clients;
# the Python attributes stay snake_case through Pydantic aliases.
# =============================================================================================

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for response bodies: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================================
# CALLER IDENTITY
# =============================================================================================

class CurrentUser(BaseModel):
    """
    Who is calling, as proven by the access token.

    Built from token claims only; no database lookup happens per request.
    """

    id: str
    roles: list[str] = Field(default_factory=list)

    def has_role(self, role: str) -> bool:
        # Exact tag match, no hierarchy ("editor" does not imply "viewer")
        return role in self.roles


# =============================================================================================
# INPUT SCHEMAS (Request bodies)
# =============================================================================================

class RefreshTokenIn(BaseModel):
    """
    USAGE:
        POST /auth/refresh     {"token": "9f2c..."}
        DELETE /auth/logout    {"token": "9f2c..."}
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    # Optional here: a missing or blank token is an auth failure answered by the
    # route ("No token provided."), not a validation error
    token: str | None = Field(
        None,
        description="Opaque refresh token returned by /auth/login",
        examples=["9f2c4e0d5b7a..."],
    )


# =============================================================================================
# OUTPUT SCHEMAS (Response bodies)
# =============================================================================================

class LoginUser(BaseModel):
    email: str
    roles: list[str]


class LoginOut(CamelModel):
    """
    RESPONSE EXAMPLE:
        {
            "ok": true,
            "user": {"email": "alice@example.com", "roles": ["viewer"]},
            "accessToken": "eyJhbGci...",
            "refreshToken": "9f2c4e0d..."
        }
    """

    ok: bool = True
    user: LoginUser
    access_token: str = Field(..., description="Signed JWT, send as 'Authorization: Bearer <token>'")
    refresh_token: str = Field(..., description="Opaque token for POST /auth/refresh (30 days)")


class RefreshOut(CamelModel):
    ok: bool = True
    access_token: str
