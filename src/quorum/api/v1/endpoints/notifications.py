# src/quorum/api/v1/endpoints/notifications.py
"""Notification inbox endpoints for the Quorum API."""

from fastapi import APIRouter

from quorum.db.session import commit_or_raise
from quorum.schemas.notification import NotificationInbox, NotificationOut
from quorum.services import notifications as notification_service
from quorum.services.changes import notifications_topic

from ..dependencies import ChangeFeedDep, CurrentUserDep, SessionDep

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationInbox)
async def list_notifications(current_user: CurrentUserDep, db: SessionDep) -> NotificationInbox:
    """Return the newest notifications and the unread total."""
    items = notification_service.list_notifications(db, current_user.id)
    return NotificationInbox(
        items=[NotificationOut.model_validate(item) for item in items],
        unread_count=notification_service.unread_count(db, current_user.id),
    )


@router.post("/read-all")
async def mark_all_read(
    current_user: CurrentUserDep,
    db: SessionDep,
    feed: ChangeFeedDep,
) -> dict[str, int]:
    updated = notification_service.mark_all_read(db, current_user.id)
    commit_or_raise(db)
    if updated:
        feed.publish(notifications_topic(current_user.id), "read")
    return {"updated": updated}


@router.post("/{notification_id}/read", response_model=NotificationOut)
async def mark_read(
    notification_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    feed: ChangeFeedDep,
) -> NotificationOut:
    notification = notification_service.mark_read(db, current_user.id, notification_id)
    commit_or_raise(db)
    feed.publish(notifications_topic(current_user.id), "read")
    return NotificationOut.model_validate(notification)
