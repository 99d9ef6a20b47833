# =============================================================================================
# APP/ROUTERS/AUTH.PY - AUTHENTICATION ENDPOINTS
# =============================================================================================
# This module provides all authentication-related API endpoints:
# - POST   /auth/register: Create new user account (role "viewer")
# - POST   /auth/login:    Verify credentials, get access + refresh token
# - POST   /auth/refresh:  Exchange a refresh token for a new access token
# - DELETE /auth/logout:   Revoke a refresh token
# - GET    /auth/me:       Identity of the current access token
#
# AUTHENTICATION FLOW:
# 1. User registers: POST /auth/register
# 2. User logs in: POST /auth/login → accessToken (15 min JWT) + refreshToken (30 days, opaque)
# 3. User calls protected routes with "Authorization: Bearer <accessToken>"
# 4. Access token expires: POST /auth/refresh {"token": refreshToken} → new accessToken
#    (the refresh token itself is not rotated; it lives until expiry or logout)
# 5. User logs out: DELETE /auth/logout {"token": refreshToken}
#
# ANTI-ENUMERATION:
# - Every login failure is 401 "Login failed." (unknown email and wrong password look alike)
# - Every registration failure is 400 "User registration failed."
# =============================================================================================

import structlog
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.db import get_db
from app.core.deps import get_current_user, get_token_service
from app.core.errors import AuthenticationFailure, ValidationFailure
from app.core.security import hash_password, verify_password
from app.models.user import User
from app.schemas.auth import CurrentUser, LoginOut, LoginUser, RefreshOut, RefreshTokenIn
from app.schemas.user import LoginIn, MessageOut, ProfileOut, RegisterIn, UserOut
from app.services.token_service import TokenService

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
)

LOGIN_FAILED = "Login failed."
REGISTRATION_FAILED = "User registration failed."
INVALID_TOKEN = "Invalid token."
NO_TOKEN = "No token provided."


# =============================================================================================
# ENDPOINT 1: Register new user
# =============================================================================================

@router.post("/register", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def register(
    data: RegisterIn,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Create a new user account with the default role tags.

    RESPONSE (201 Created):
        {"ok": true, "msg": "Successful registration: alice@example.com"}

    ERRORS:
        400 Bad Request: invalid body, or the account could not be created
    """
    # The unique index on users.email is the real guard; the lookup just avoids
    # paying for a bcrypt hash on an obvious duplicate.
    if db.query(User).filter(User.email == data.email).first():
        logger.info("registration_rejected", reason="duplicate_email")
        raise ValidationFailure(REGISTRATION_FAILED)

    user = User(
        email=data.email,
        password_hash=hash_password(data.password),
        roles=list(settings.DEFAULT_ROLES),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.info("registration_rejected", reason="integrity_error")
        raise ValidationFailure(REGISTRATION_FAILED) from exc

    logger.info("user_registered", user_id=user.id)
    return MessageOut(msg=f"Successful registration: {user.email}")


# =============================================================================================
# ENDPOINT 2: Login (authenticate and get tokens)
# =============================================================================================

@router.post("/login", response_model=LoginOut)
def login(
    data: LoginIn,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    """
    Authenticate user and return access + refresh tokens.

    RESPONSE (200 OK):
        {
            "ok": true,
            "user": {"email": "alice@example.com", "roles": ["viewer"]},
            "accessToken": "eyJhbGci...",
            "refreshToken": "9f2c4e0d..."
        }

    ERRORS:
        401 Unauthorized: "Login failed." (whatever the reason)
    """
    user = db.query(User).filter(User.email == data.email).first()

    # One condition for both cases: callers can't tell which part was wrong
    if not user or not verify_password(data.password, user.password_hash):
        logger.info("login_failed")
        raise AuthenticationFailure(LOGIN_FAILED)

    access_token = tokens.generate_access_token(user.id, user.roles)
    refresh_token = tokens.create_refresh_token(user.id)

    logger.info("login_succeeded", user_id=user.id)
    return LoginOut(
        user=LoginUser(email=user.email, roles=user.roles),
        access_token=access_token,
        refresh_token=refresh_token,
    )


# =============================================================================================
# ENDPOINT 3: Refresh (exchange refresh token for a new access token)
# =============================================================================================

@router.post("/refresh", response_model=RefreshOut)
def refresh(
    data: RefreshTokenIn,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    """
    Issue a new access token for a valid refresh token.

    The access token carries the user's current roles, so role changes take effect on
    the next refresh.

    ERRORS:
        401 Unauthorized: no token in the body
        403 Forbidden: token unknown, expired or revoked (indistinguishable)
        401 Unauthorized: token valid but its user no longer exists
    """
    if not data.token:
        raise AuthenticationFailure(NO_TOKEN)

    user_id = tokens.validate_refresh_token(data.token)
    if user_id is None:
        raise AuthenticationFailure(INVALID_TOKEN, status_code=status.HTTP_403_FORBIDDEN)

    user = db.get(User, user_id)
    if user is None:
        raise AuthenticationFailure(INVALID_TOKEN)

    return RefreshOut(access_token=tokens.generate_access_token(user.id, user.roles))


# =============================================================================================
# ENDPOINT 4: Logout (revoke refresh token)
# =============================================================================================

@router.delete("/logout", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def logout(
    data: RefreshTokenIn,
    tokens: TokenService = Depends(get_token_service),
):
    """
    Revoke a refresh token.

    Access tokens already issued stay valid until they expire (15 minutes by default).

    ERRORS:
        400 Bad Request: no token in the body, or token unknown or already revoked
    """
    if not data.token:
        raise ValidationFailure(NO_TOKEN)

    if not tokens.revoke_refresh_token(data.token):
        raise ValidationFailure(INVALID_TOKEN)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================================
# ENDPOINT 5: Get current user profile
# =============================================================================================

@router.get("/me", response_model=ProfileOut)
def me(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Return the account behind the access token.

    Unlike the currency routes this one reads the users table, so a token for a
    deleted account is rejected here.
    """
    user = db.get(User, current_user.id)
    if user is None:
        raise AuthenticationFailure(INVALID_TOKEN, status_code=status.HTTP_403_FORBIDDEN)
    return ProfileOut(user=UserOut.model_validate(user))
