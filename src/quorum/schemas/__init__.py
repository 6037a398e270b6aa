"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .admin import AdminLoginRequest, AdminLoginResponse, AnnouncementCreate, AnnouncementOut
from .notification import NotificationInbox, NotificationOut
from .question import AnswerCreate, AnswerOut, QuestionCreate, QuestionOut, QuestionPage
from .user import LoginRequest, ProfileResponse, SignupRequest, TokenResponse
from .vote import VoteRequest, VoteResponse

__all__ = [
    "AdminLoginRequest", "AdminLoginResponse", "AnnouncementCreate", "AnnouncementOut",
    "NotificationInbox", "NotificationOut",
    "AnswerCreate", "AnswerOut", "QuestionCreate", "QuestionOut", "QuestionPage",
    "LoginRequest", "ProfileResponse", "SignupRequest", "TokenResponse",
    "VoteRequest", "VoteResponse",
]
