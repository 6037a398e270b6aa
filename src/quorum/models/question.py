# src/quorum/models/question.py
"""SQLAlchemy models for questions and their tags."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quorum.db.session import Base
from quorum.db.time import utcnow

if TYPE_CHECKING:
    from .answer import Answer
    from .user import User
    from .vote import QuestionVote


class Question(Base):
    """A question asked by a member.

    ``vote_count`` and ``answer_count`` are denormalized counters adjusted
    incrementally; they are never recomputed on read.
    """

    __tablename__ = "question"
    __table_args__ = (Index("ix_question_created_at", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_profile.id", ondelete="CASCADE"),
        nullable=False,
    )
    vote_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    answer_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    author: Mapped[User] = relationship("User", lazy="joined")
    tag_rows: Mapped[list[QuestionTag]] = relationship(
        "QuestionTag",
        cascade="all, delete-orphan",
        order_by="QuestionTag.position",
    )
    answers: Mapped[list[Answer]] = relationship(
        "Answer",
        back_populates="question",
        cascade="all, delete-orphan",
    )
    votes: Mapped[list[QuestionVote]] = relationship(
        "QuestionVote",
        cascade="all, delete-orphan",
    )

    @property
    def tags(self) -> list[str]:
        return [row.tag for row in self.tag_rows]

    @tags.setter
    def tags(self, values: list[str]) -> None:
        self.tag_rows = [
            QuestionTag(tag=value, position=position) for position, value in enumerate(values)
        ]


class QuestionTag(Base):
    """Tag attached to a question; stored lower-cased."""

    __tablename__ = "question_tag"
    __table_args__ = (Index("ix_question_tag_tag", "tag"),)

    question_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("question.id", ondelete="CASCADE"),
        primary_key=True,
    )
    tag: Mapped[str] = mapped_column(Text, primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
