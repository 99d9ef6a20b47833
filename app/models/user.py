# =============================================================================================
# APP/MODELS/USER.PY - USER ACCOUNT DATABASE MODEL
# =============================================================================================
# A user is an email, a bcrypt password hash and a list of role tags.
#
# ROLES:
# - Plain strings checked by exact match ("viewer", "editor")
# - New accounts get settings.DEFAULT_ROLES (["viewer"])
# - No HTTP endpoint changes roles; `python manage.py grant-role` does
#
# Users are never deleted by this service.
# =============================================================================================

from uuid import uuid4

from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.orm import relationship

from app.core.db import Base, utcnow


class User(Base):
    """
    User account model.

    DATABASE TABLE:
        CREATE TABLE users (
            id VARCHAR(36) PRIMARY KEY,
            email VARCHAR(255) NOT NULL UNIQUE,
            password_hash VARCHAR(60) NOT NULL,
            roles JSON NOT NULL,
            created_at TIMESTAMP NOT NULL
        );
    """

    __tablename__ = "users"

    id: str = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
        nullable=False,
    )

    # Stored lower-cased (schemas normalize before we get here)
    email: str = Column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    password_hash: str = Column(
        String(60),  # bcrypt hashes are always 60 chars
        nullable=False,
    )

    # JSON array of role tags. Assign a new list to change it; in-place
    # mutation of the list is not tracked by the ORM.
    roles: list = Column(
        JSON,
        nullable=False,
        default=list,
    )

    created_at = Column(
        DateTime,
        nullable=False,
        default=utcnow,
    )

    refresh_tokens = relationship(
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="select",
    )

    def has_role(self, role: str) -> bool:
        return role in (self.roles or [])

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, roles={self.roles})>"
