from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import EventStatus, UserNotification, WorkflowEvent


class EventRepository:
    async def add_event(self, db: AsyncSession, event: WorkflowEvent) -> WorkflowEvent:
        db.add(event)
        await db.flush()
        return event

    async def lock_pending(self, db: AsyncSession, event_id: int) -> WorkflowEvent | None:
        """PENDING event under a row lock; None when it is settled or another dispatcher holds it."""
        row = await db.execute(
            select(WorkflowEvent)
            .where(WorkflowEvent.id == event_id, WorkflowEvent.status == EventStatus.PENDING)
            .with_for_update(skip_locked=True)
            .execution_options(populate_existing=True)
        )
        return row.scalar_one_or_none()

    async def list_pending_ids(self, db: AsyncSession, *, older_than: datetime, limit: int = 50) -> list[int]:
        rows = await db.execute(
            select(WorkflowEvent.id)
            .where(
                WorkflowEvent.status == EventStatus.PENDING,
                WorkflowEvent.created_at <= older_than,
            )
            .order_by(WorkflowEvent.created_at.asc())
            .limit(max(1, limit))
        )
        return [int(value) for value in rows.scalars().all()]

    async def add_notifications(self, db: AsyncSession, notifications: list[UserNotification]) -> None:
        db.add_all(notifications)
        await db.flush()

    async def list_notifications(
        self,
        db: AsyncSession,
        user_id: int,
        *,
        unread_only: bool = False,
        limit: int = 50,
    ) -> list[UserNotification]:
        query = select(UserNotification).where(UserNotification.user_id == user_id)
        if unread_only:
            query = query.where(UserNotification.is_read.is_(False))
        rows = await db.execute(
            query.order_by(UserNotification.created_at.desc(), UserNotification.id.desc()).limit(max(1, min(limit, 200)))
        )
        return list(rows.scalars().all())

    async def mark_read(self, db: AsyncSession, *, notification_id: int, user_id: int) -> bool:
        result = await db.execute(
            update(UserNotification)
            .where(UserNotification.id == notification_id, UserNotification.user_id == user_id)
            .values(is_read=True)
        )
        return (result.rowcount or 0) == 1


event_repository = EventRepository()
