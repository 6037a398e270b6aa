"""User-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

RoleName = Literal["guest", "user", "admin", "banned"]


class SignupRequest(BaseModel):
    """Schema for creating a new account."""

    username: str = Field(..., min_length=3, max_length=32, pattern=r"^[A-Za-z0-9_.-]+$")
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=6, max_length=128)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        value = value.strip().lower()
        if "@" not in value:
            raise ValueError("Invalid email address")
        return value


class LoginRequest(BaseModel):
    """Schema for password login."""

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class TokenResponse(BaseModel):
    """Bearer token issued after signup or login."""

    access_token: str
    token_type: str = "bearer"
    user_id: int


class ProfileResponse(BaseModel):
    """Public profile of a member."""

    id: int
    username: str
    avatar_url: str | None
    role: RoleName
    reputation: int
    reputation_tier: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdate(BaseModel):
    """Partial profile update submitted from the settings page."""

    username: str | None = Field(None, min_length=3, max_length=32, pattern=r"^[A-Za-z0-9_.-]+$")
    avatar_url: str | None = Field(None, max_length=2048)


class LeaderboardEntry(BaseModel):
    rank: int
    id: int
    username: str
    avatar_url: str | None
    reputation: int
    reputation_tier: str
    accepted_answers: int


class BadgeResponse(BaseModel):
    """Badge earned by a member."""

    name: str
    description: str
    icon: str | None
    badge_type: str
    earned_at: datetime


class UserAnswer(BaseModel):
    """Answer shown on its author's profile."""

    id: int
    question_id: int
    question_title: str
    content: str
    vote_count: int
    is_accepted: bool
    created_at: datetime
