from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.envelope import success_envelope
from app.api.routes.auth import get_current_user
from app.api.serializers import notification_to_dict
from app.core.database import get_db
from app.domain.errors import NotFound
from app.models.user import User
from app.repositories.event_repository import event_repository

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("")
async def list_notifications(
    unread_only: bool = Query(default=False),
    limit: int = Query(default=50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rows = await event_repository.list_notifications(
        db, current_user.id, unread_only=unread_only, limit=limit
    )
    return success_envelope([notification_to_dict(row) for row in rows])


@router.post("/{notification_id}/read")
async def mark_read(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    updated = await event_repository.mark_read(db, notification_id=notification_id, user_id=current_user.id)
    if not updated:
        raise NotFound("Notification not found", details={"notification_id": notification_id})
    await db.commit()
    return success_envelope({"id": notification_id, "is_read": True})
