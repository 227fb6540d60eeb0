from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.errors import NotFound, TransitionConflict
from app.domain.workflow.state_machine import WorkflowAction, require_transition
from app.models import ContentItem, ContentStatus
from app.repositories.content_repository import ContentRepository, content_repository


class StateTransitionService:
    def __init__(self, repository: ContentRepository | None = None):
        self.repository = repository or content_repository

    async def transition_content(
        self,
        *,
        db: AsyncSession,
        item: ContentItem,
        action: WorkflowAction,
        values: dict[str, Any] | None = None,
    ) -> tuple[ContentItem, ContentStatus]:
        """
        Apply `action` to `item` with a compare-and-set on the status read by the caller.
        Returns the refreshed item and the status it left.
        """
        current_status = ContentStatus(item.status)
        target = require_transition(current_status, action)

        applied = await self.repository.compare_and_set_status(
            db,
            content_id=item.id,
            expected=current_status,
            target=target,
            values=values,
        )
        if not applied:
            actual = await self.repository.get_status(db, item.id)
            if actual is None:
                raise NotFound(f"Content {item.id} not found")
            raise TransitionConflict(
                expected=current_status.value,
                current=ContentStatus(actual).value,
                target=target.value,
                entity=f"content:{item.id}",
            )

        refreshed = await self.repository.get_content(db, item.id)
        return refreshed or item, current_status


state_transition_service = StateTransitionService()
