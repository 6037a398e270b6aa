"""SQLAlchemy models for the Quorum application."""

from .answer import Answer
from .community import Announcement, Badge, Notification, UserBadge
from .question import Question, QuestionTag
from .user import User
from .vote import AnswerVote, QuestionVote

__all__ = [
    "Announcement",
    "Answer",
    "AnswerVote",
    "Badge",
    "Notification",
    "Question", "QuestionTag",
    "QuestionVote",
    "User",
    "UserBadge",
]
