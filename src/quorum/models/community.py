# src/quorum/models/community.py
"""Models for notifications, badges and site announcements."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quorum.db.session import Base
from quorum.db.time import utcnow


class Notification(Base):
    """Inbox entry for a member (new answer, accepted answer, mention)."""

    __tablename__ = "notification"
    __table_args__ = (Index("ix_notification_user_id", "user_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_profile.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    related_question_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("question.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class Badge(Base):
    """Badge definition (bronze/silver/gold style achievements)."""

    __tablename__ = "badge"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    icon: Mapped[str | None] = mapped_column(Text, nullable=True)
    badge_type: Mapped[str] = mapped_column(Text, nullable=False, default="bronze")


class UserBadge(Base):
    """Join table recording when a member earned a badge."""

    __tablename__ = "user_badge"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_profile.id", ondelete="CASCADE"),
        primary_key=True,
    )
    badge_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("badge.id", ondelete="CASCADE"),
        primary_key=True,
    )
    earned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    badge: Mapped[Badge] = relationship("Badge", lazy="joined")


class Announcement(Base):
    """Site-wide announcement managed from the admin dashboard."""

    __tablename__ = "announcement"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    # Null when posted through the shared admin session rather than an admin account.
    author_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("user_profile.id", ondelete="SET NULL"),
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
