"""Admin dashboard Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class AdminLoginRequest(BaseModel):
    username: str
    password: str


class AdminLoginResponse(BaseModel):
    """Result of a successful admin credential check.

    ``session_id`` must be sent back as the ``X-Admin-Session`` header.
    """

    status: Literal["granted"] = "granted"
    session_id: str
    expires_in_seconds: int


class AdminSessionStatus(BaseModel):
    state: Literal["valid", "expired", "absent"]


class AdminStats(BaseModel):
    total_users: int
    total_questions: int
    total_answers: int
    today_questions: int


class AdminUser(BaseModel):
    id: int
    username: str
    email: str
    role: str
    reputation: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AdminQuestion(BaseModel):
    id: int
    title: str
    author_username: str | None
    vote_count: int
    answer_count: int
    created_at: datetime


class AdminAnswer(BaseModel):
    id: int
    question_id: int
    question_title: str | None
    content: str
    author_username: str | None
    vote_count: int
    is_accepted: bool
    created_at: datetime


class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    body: str = Field(..., min_length=1, max_length=5000)


class AnnouncementOut(BaseModel):
    id: int
    title: str
    body: str
    author_id: int | None
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
