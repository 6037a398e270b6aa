"""Notification Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class NotificationOut(BaseModel):
    id: int
    type: str
    title: str
    message: str
    is_read: bool
    related_question_id: int | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NotificationInbox(BaseModel):
    items: list[NotificationOut]
    unread_count: int
