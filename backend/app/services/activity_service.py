from __future__ import annotations

from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.correlation import get_correlation_id, get_request_id
from app.core.logging import get_logger
from app.models import ActivityAction, ActivityLogEntry
from app.models.user import User
from app.repositories.content_repository import ContentRepository, content_repository

logger = get_logger("services.activity")

SYSTEM_ACTOR_NAME = "System"
SYSTEM_ACTOR_ROLE = "SYSTEM"


class ActivityService:
    def __init__(self, repository: ContentRepository | None = None):
        self.repository = repository or content_repository

    async def record(
        self,
        db: AsyncSession,
        *,
        content_id: int,
        action: ActivityAction,
        actor: User | None = None,
        details: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """
        Append to the content audit trail inside the caller's transaction.
        A savepoint keeps a degraded audit table from aborting the transition.
        """
        try:
            async with db.begin_nested():
                await self.repository.add_activity(
                    db,
                    ActivityLogEntry(
                        content_id=content_id,
                        actor_id=actor.id if actor else None,
                        actor_name=actor.display_name if actor else SYSTEM_ACTOR_NAME,
                        actor_role=actor.role.value if actor else SYSTEM_ACTOR_ROLE,
                        action=action,
                        details=details,
                        metadata_json=metadata or {},
                        request_id=get_request_id() or None,
                        correlation_id=get_correlation_id() or None,
                    ),
                )
        except SQLAlchemyError as exc:
            logger.warning(
                "activity_log_write_failed",
                content_id=content_id,
                action=action.value,
                error=str(exc.__class__.__name__),
            )


activity_service = ActivityService()
