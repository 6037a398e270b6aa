# src/quorum/models/user.py
"""SQLAlchemy models for community member profiles."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from quorum.db.session import Base
from quorum.db.time import utcnow

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLE_BANNED = "banned"


class User(Base):
    """Registered member with a public profile.

    ``guest`` is never stored; it is the role of a request without an identity.
    """

    __tablename__ = "user_profile"
    __table_args__ = (
        CheckConstraint("role IN ('user', 'admin', 'banned')", name="ck_user_profile_role"),
        CheckConstraint("reputation >= 0", name="ck_user_profile_reputation"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(Text, nullable=False, default=ROLE_USER)
    reputation: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_banned(self) -> bool:
        return self.role == ROLE_BANNED
