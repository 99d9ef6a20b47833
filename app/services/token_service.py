# =============================================================================================
# APP/SERVICES/TOKEN_SERVICE.PY - ACCESS TOKEN SIGNING AND REFRESH TOKEN LIFECYCLE
# =============================================================================================
# Two kinds of credentials:
#
#   ACCESS TOKEN  - HS256 JWT, short-lived (ACCESS_TOKEN_EXP, "15m" by default)
#                   claims: sub (user id), roles, type="access", iat, exp
#                   verified per request WITHOUT a database lookup
#
#   REFRESH TOKEN - 80 hex chars of CSPRNG output, long-lived (30 days)
#                   meaningless on its own; the refresh_tokens row decides validity
#
# The service receives its Session and Settings explicitly so tests can hand it an
# in-memory database and a custom configuration.
# =============================================================================================

from datetime import timedelta

import jwt
import structlog
from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.db import utcnow
from app.core.errors import AuthenticationFailure
from app.core.security import decode_jwt, encode_jwt, generate_refresh_token
from app.models.token import RefreshToken
from app.schemas.auth import CurrentUser

logger = structlog.get_logger(__name__)

ACCESS_TOKEN_TYPE = "access"


class TokenService:
    """Issue, validate, revoke and garbage-collect credentials."""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    # =========================================================================================
    # ACCESS TOKENS (stateless)
    # =========================================================================================

    def generate_access_token(self, user_id: str, roles: list[str]) -> str:
        """
        Sign a short-lived access token embedding the user id and role tags.

        No side effects: nothing is written to the database.
        """
        return encode_jwt(
            {"sub": str(user_id), "roles": list(roles), "type": ACCESS_TOKEN_TYPE},
            self.settings,
            expires_in=self.settings.access_token_expire_seconds,
        )

    def decode_access_token(self, token: str) -> CurrentUser:
        """
        Verify an access token and return the caller identity it carries.

        Bad signature, expiry, wrong algorithm, wrong type and missing claims all
        produce the same AuthenticationFailure("Invalid token.") with status 403.
        """
        try:
            payload = decode_jwt(token, self.settings)
        except jwt.InvalidTokenError as exc:  # ExpiredSignatureError is a subclass
            logger.debug("access_token_rejected", reason=type(exc).__name__)
            raise AuthenticationFailure("Invalid token.", status_code=403) from exc

        user_id = payload.get("sub")
        roles = payload.get("roles")
        if payload.get("type") != ACCESS_TOKEN_TYPE or not user_id or not isinstance(roles, list):
            logger.debug("access_token_rejected", reason="bad_payload")
            raise AuthenticationFailure("Invalid token.", status_code=403)

        return CurrentUser(id=user_id, roles=roles)

    # =========================================================================================
    # REFRESH TOKENS (store-backed)
    # =========================================================================================

    def create_refresh_token(self, user_id: str) -> str:
        """
        Generate and persist a new refresh token for `user_id`.

        Returns the raw token (the only time it leaves the server).
        A duplicate token would fail the unique index with IntegrityError; at 320 bits
        of entropy we do not retry.
        """
        token = generate_refresh_token()
        now = utcnow()
        record = RefreshToken(
            token=token,
            user_id=str(user_id),
            created_at=now,
            expires_at=now + timedelta(days=self.settings.REFRESH_TOKEN_EXPIRE_DAYS),
            revoked=False,
        )
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError:
            # Duplicate token or unknown user_id; leave the session usable
            self.db.rollback()
            raise

        logger.info("refresh_token_created", user_id=str(user_id), token_id=record.id)
        return token

    def validate_refresh_token(self, token: str) -> str | None:
        """
        Return the owning user id if `token` is unrevoked and unexpired, else None.

        Unknown, expired and revoked tokens are deliberately indistinguishable to the
        caller.
        """
        record = (
            self.db.query(RefreshToken)
            .filter(
                RefreshToken.token == token,
                RefreshToken.revoked.is_(False),
                RefreshToken.expires_at > utcnow(),
            )
            .first()
        )
        if record is None:
            logger.debug("refresh_token_invalid")
            return None
        return record.user_id

    def revoke_refresh_token(self, token: str) -> bool:
        """
        Mark a single unrevoked token as revoked.

        Returns True if a row changed, False if the token is unknown or already revoked.
        """
        changed = (
            self.db.query(RefreshToken)
            .filter(RefreshToken.token == token, RefreshToken.revoked.is_(False))
            .update({RefreshToken.revoked: True}, synchronize_session=False)
        )
        self.db.commit()

        if changed:
            logger.info("refresh_token_revoked")
        return changed > 0

    def revoke_all_user_tokens(self, user_id: str) -> int:
        """Revoke every unrevoked token owned by `user_id`; returns how many changed."""
        changed = (
            self.db.query(RefreshToken)
            .filter(RefreshToken.user_id == str(user_id), RefreshToken.revoked.is_(False))
            .update({RefreshToken.revoked: True}, synchronize_session=False)
        )
        self.db.commit()

        logger.info("user_refresh_tokens_revoked", user_id=str(user_id), count=changed)
        return changed

    def cleanup_expired_tokens(self) -> int:
        """
        Delete tokens that are expired, or revoked and older than the grace window.

        A revoked token is kept for REVOKED_TOKEN_GRACE_DAYS after creation before it
        is removed. Returns the number of rows deleted.
        """
        now = utcnow()
        revoked_cutoff = now - timedelta(days=self.settings.REVOKED_TOKEN_GRACE_DAYS)

        deleted = (
            self.db.query(RefreshToken)
            .filter(
                or_(
                    RefreshToken.expires_at < now,
                    and_(RefreshToken.revoked.is_(True), RefreshToken.created_at < revoked_cutoff),
                )
            )
            .delete(synchronize_session=False)
        )
        self.db.commit()

        logger.info("refresh_tokens_cleaned_up", count=deleted)
        return deleted
