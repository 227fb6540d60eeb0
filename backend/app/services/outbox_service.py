from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.logging import get_logger
from app.models import ContentItem, EventStatus, User, WorkflowEvent, WorkflowEventType
from app.queue.celery_app import celery_app
from app.repositories.event_repository import EventRepository, event_repository

logger = get_logger("services.outbox")
settings = get_settings()

DISPATCH_TASK_NAME = "app.queue.tasks.notification_tasks.dispatch_workflow_event"


class OutboxService:
    def __init__(self, repository: EventRepository | None = None):
        self.repository = repository or event_repository

    async def emit(
        self,
        db: AsyncSession,
        *,
        event_type: WorkflowEventType,
        item: ContentItem,
        actor: User | None,
        payload: dict[str, Any] | None = None,
    ) -> WorkflowEvent:
        """Append an outbound event inside the caller's transaction."""
        body = {
            "content_id": item.id,
            "title": item.title,
            "slug": item.slug,
            "author_id": item.author_id,
            "actor_id": actor.id if actor else None,
            "actor_name": actor.display_name if actor else "System",
        }
        body.update(payload or {})
        return await self.repository.add_event(
            db,
            WorkflowEvent(
                event_type=event_type.value,
                content_id=item.id,
                actor_id=actor.id if actor else None,
                payload_json=body,
                status=EventStatus.PENDING,
                attempts=0,
            ),
        )

    async def enqueue(self, event_ids: list[int]) -> int:
        """
        Hand committed events to the worker queue. Broker errors are logged only;
        the periodic dispatcher picks up anything still PENDING.
        """
        if not settings.queue_enabled:
            return 0
        sent = 0
        for event_id in event_ids:
            try:
                celery_app.send_task(
                    DISPATCH_TASK_NAME,
                    kwargs={"event_id": event_id},
                    queue=settings.notification_queue_name,
                )
                sent += 1
            except Exception as exc:  # noqa: BLE001
                logger.warning("workflow_event_enqueue_failed", event_id=event_id, error=str(exc))
        if sent:
            logger.info("workflow_events_enqueued", count=sent)
        return sent


outbox_service = OutboxService()
