# src/quorum/models/answer.py
"""SQLAlchemy model for answers to questions."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quorum.db.session import Base
from quorum.db.time import utcnow

if TYPE_CHECKING:
    from .question import Question
    from .user import User
    from .vote import AnswerVote


class Answer(Base):
    """Answer posted under a question; at most one per question is accepted."""

    __tablename__ = "answer"
    __table_args__ = (Index("ix_answer_question_id", "question_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    question_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("question.id", ondelete="CASCADE"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_profile.id", ondelete="CASCADE"),
        nullable=False,
    )
    vote_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_accepted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    author: Mapped[User] = relationship("User", lazy="joined")
    question: Mapped[Question] = relationship("Question", back_populates="answers")
    votes: Mapped[list[AnswerVote]] = relationship(
        "AnswerVote",
        cascade="all, delete-orphan",
    )
