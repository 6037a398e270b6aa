# src/quorum/models/vote.py
"""Models capturing voting interactions on questions and answers."""

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from quorum.db.session import Base


class QuestionVote(Base):
    """Per-user vote on a question."""

    __tablename__ = "question_vote"
    __table_args__ = (
        CheckConstraint("vote_type IN ('up', 'down')", name="ck_question_vote_type"),
        Index("ix_question_vote_user_id", "user_id"),
    )

    # Composite primary key prevents duplicate votes from the same user.
    question_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("question.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_profile.id", ondelete="CASCADE"),
        primary_key=True,
    )
    vote_type: Mapped[str] = mapped_column(Text, nullable=False)


class AnswerVote(Base):
    """Per-user vote on an answer."""

    __tablename__ = "answer_vote"
    __table_args__ = (
        CheckConstraint("vote_type IN ('up', 'down')", name="ck_answer_vote_type"),
        Index("ix_answer_vote_user_id", "user_id"),
    )

    answer_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("answer.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_profile.id", ondelete="CASCADE"),
        primary_key=True,
    )
    vote_type: Mapped[str] = mapped_column(Text, nullable=False)
