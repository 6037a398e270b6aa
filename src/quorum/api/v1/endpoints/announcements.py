# src/quorum/api/v1/endpoints/announcements.py
"""Public announcement feed."""

from fastapi import APIRouter

from quorum.schemas.admin import AnnouncementOut
from quorum.services import admin as admin_service

from ..dependencies import SessionDep

router = APIRouter(prefix="/announcements", tags=["announcements"])


@router.get("", response_model=list[AnnouncementOut])
async def list_active_announcements(db: SessionDep) -> list[AnnouncementOut]:
    """Active announcements, newest first."""
    return [
        AnnouncementOut.model_validate(item)
        for item in admin_service.list_announcements(db, active_only=True)
    ]
