"""Question and answer Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from quorum.core.settings import settings

VoteDirectionName = Literal["up", "down"]
SortKey = Literal["newest", "unanswered", "most-voted"]


def _normalize_tags(values: list[str]) -> list[str]:
    tags: list[str] = []
    for value in values:
        tag = value.strip().lower()
        if tag and tag not in tags:
            tags.append(tag)
    if len(tags) > settings.max_tags_per_question:
        raise ValueError(f"At most {settings.max_tags_per_question} tags are allowed")
    return tags


class QuestionCreate(BaseModel):
    """Schema for asking a new question."""

    title: str = Field(..., min_length=10, max_length=200)
    description: str = Field(..., min_length=20, max_length=20_000)
    tags: list[str] = Field(..., min_length=1)

    @field_validator("tags")
    @classmethod
    def _validate_tags(cls, values: list[str]) -> list[str]:
        tags = _normalize_tags(values)
        if not tags:
            raise ValueError("At least one tag is required")
        return tags


class QuestionUpdate(BaseModel):
    """Partial edit of a question (author or admin)."""

    title: str | None = Field(None, min_length=10, max_length=200)
    description: str | None = Field(None, min_length=20, max_length=20_000)
    tags: list[str] | None = None

    @field_validator("tags")
    @classmethod
    def _validate_tags(cls, values: list[str] | None) -> list[str] | None:
        if values is None:
            return None
        return _normalize_tags(values)


class AuthorSummary(BaseModel):
    """Author profile fields embedded in listings."""

    id: int
    username: str
    avatar_url: str | None
    reputation: int
    role: str

    model_config = ConfigDict(from_attributes=True)


class QuestionOut(BaseModel):
    """Question as returned by listings and detail views.

    ``user_vote`` is only present when the request carries an identity; it is
    ``None`` for a member who has not voted.
    """

    id: int
    title: str
    description: str
    tags: list[str]
    author_id: int
    vote_count: int
    view_count: int
    answer_count: int
    created_at: datetime
    updated_at: datetime
    author: AuthorSummary | None
    user_vote: VoteDirectionName | None = None


class QuestionPage(BaseModel):
    items: list[QuestionOut]
    total: int
    page: int
    page_size: int


class AnswerCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=20_000)

    @field_validator("content")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Answer content must not be blank")
        return value


class AnswerOut(BaseModel):
    id: int
    question_id: int
    content: str
    author_id: int
    vote_count: int
    is_accepted: bool
    created_at: datetime
    updated_at: datetime
    author: AuthorSummary | None
    user_vote: VoteDirectionName | None = None
