"""Vote-related Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, Field


class VoteRequest(BaseModel):
    """Schema for casting, switching or removing a vote."""

    direction: Literal["up", "down"] = Field(..., description="'up' or 'down'; repeating removes")


class VoteResponse(BaseModel):
    """Counter and vote state after reconciliation."""

    vote_count: int
    user_vote: Literal["up", "down"] | None
    action: Literal["created", "updated", "deleted"]


class MyVoteResponse(BaseModel):
    user_vote: Literal["up", "down"] | None
