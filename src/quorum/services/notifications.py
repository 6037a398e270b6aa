"""Member inbox: creating, listing and acknowledging notifications."""
from __future__ import annotations

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from quorum.core.errors import NotFound
from quorum.core.settings import settings
from quorum.models import Notification

__all__ = [
    "notify",
    "list_notifications",
    "unread_count",
    "mark_read",
    "mark_all_read",
]


def notify(
    db: Session,
    *,
    user_id: int,
    type_: str,
    title: str,
    message: str,
    related_question_id: int | None = None,
    actor_id: int | None = None,
) -> Notification | None:
    """Queue a notification for ``user_id``; members are not notified of their own actions."""
    if actor_id is not None and actor_id == user_id:
        return None
    notification = Notification(
        user_id=user_id,
        type=type_,
        title=title,
        message=message,
        related_question_id=related_question_id,
    )
    db.add(notification)
    return notification


def list_notifications(db: Session, user_id: int, limit: int | None = None) -> list[Notification]:
    """Return the newest notifications for a member."""
    stmt = (
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit or settings.notifications_limit)
    )
    return list(db.execute(stmt).scalars())


def unread_count(db: Session, user_id: int) -> int:
    return int(
        db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            )
        ).scalar_one()
    )


def mark_read(db: Session, user_id: int, notification_id: int) -> Notification:
    notification = db.get(Notification, notification_id)
    if notification is None or notification.user_id != user_id:
        raise NotFound("Notification not found")
    notification.is_read = True
    db.flush()
    return notification


def mark_all_read(db: Session, user_id: int) -> int:
    """Mark every unread notification as read and return how many changed."""
    result = db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    db.flush()
    return int(result.rowcount or 0)
