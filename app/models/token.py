# =============================================================================================
# APP/MODELS/TOKEN.PY - REFRESH TOKEN DATABASE MODEL
# =============================================================================================
# Refresh tokens are opaque random strings (not JWTs). Because they carry no signature,
# the database row is the only source of truth for whether a token is usable.
#
# LIFECYCLE:
# 1. Login → row created, expires_at = now + 30 days, revoked = False
# 2. Refresh → row looked up by exact token match (must be unrevoked and unexpired)
# 3. Logout → revoked = True (the only mutation ever applied to a row)
# 4. Cleanup sweep → row deleted once expired, or revoked and older than 7 days
#
# VALIDITY INVARIANT:
#   usable  ⇔  revoked == False  AND  now < expires_at
# =============================================================================================

from uuid import uuid4

from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship

from app.core.db import Base, utcnow


class RefreshToken(Base):
    """
    Store-backed refresh token.

    DATABASE TABLE:
        CREATE TABLE refresh_tokens (
            id VARCHAR(36) PRIMARY KEY,
            token VARCHAR(128) NOT NULL UNIQUE,
            user_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            created_at TIMESTAMP NOT NULL,
            expires_at TIMESTAMP NOT NULL,
            revoked BOOLEAN NOT NULL DEFAULT 0
        );

    INDEXES:
    - token (unique): exact-match lookup on refresh/logout, rejects duplicates
    - user_id: "revoke every token of this user"
    - expires_at: cleanup sweep
    """

    __tablename__ = "refresh_tokens"

    id: str = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
        nullable=False,
    )

    # 80 hex chars today; column leaves room for a longer token format
    token: str = Column(
        String(128),
        nullable=False,
        unique=True,
        index=True,
    )

    user_id: str = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at = Column(
        DateTime,
        nullable=False,
        default=utcnow,
    )

    # Naive UTC (see app.core.db.utcnow)
    expires_at = Column(
        DateTime,
        nullable=False,
        index=True,
    )

    revoked: bool = Column(
        Boolean,
        nullable=False,
        default=False,
    )

    user = relationship(
        "User",
        back_populates="refresh_tokens",
        lazy="select",
    )

    # Composite index for the cleanup query: revoked AND created_at < cutoff
    __table_args__ = (
        Index("ix_refresh_tokens_revoked_created", "revoked", "created_at"),
    )

    def __repr__(self) -> str:
        # Never include the token itself
        return f"<RefreshToken(id={self.id}, user_id={self.user_id}, revoked={self.revoked})>"
