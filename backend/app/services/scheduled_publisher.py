"""
AfriVerse Editorial Desk - Scheduled Publisher
==============================================
Promotes SCHEDULED content whose publish time has passed.
Triggered by the cron endpoint, and optionally by the in-process scheduler.
"""

from __future__ import annotations

import asyncio
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

from app.core.config import get_settings
from app.core.database import async_session
from app.core.logging import get_logger
from app.domain.errors import DependencyFailure
from app.repositories.content_repository import ContentRepository, content_repository
from app.services.workflow_service import WorkflowService, workflow_service

logger = get_logger("services.scheduled_publisher")
settings = get_settings()


@dataclass(slots=True)
class SweepReport:
    published_count: int = 0
    error_count: int = 0
    published: list[dict[str, Any]] = field(default_factory=list)
    errors: list[dict[str, Any]] = field(default_factory=list)
    timestamp: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class ScheduledPublisher:
    def __init__(
        self,
        session_factory=None,
        workflow: WorkflowService | None = None,
        repository: ContentRepository | None = None,
    ):
        self.session_factory = session_factory or async_session
        self.workflow = workflow or workflow_service
        self.repository = repository or content_repository

    async def _due_items(self, now: datetime) -> list[tuple[int, str]]:
        async with self.session_factory() as db:
            try:
                items = await asyncio.wait_for(
                    self.repository.list_due_scheduled(
                        db, now=now, limit=settings.scheduled_publish_batch_limit
                    ),
                    timeout=settings.scheduled_publish_query_timeout_seconds,
                )
            except asyncio.TimeoutError as exc:
                logger.error(
                    "scheduled_publish_query_timeout",
                    timeout_seconds=settings.scheduled_publish_query_timeout_seconds,
                )
                raise DependencyFailure("Timed out loading scheduled content") from exc
            return [(item.id, item.title) for item in items]

    async def run_sweep(self, now: datetime | None = None) -> SweepReport:
        """Publish every due item, each in its own transaction. One failure never stops the batch."""
        now = now or datetime.now(timezone.utc)
        report = SweepReport(timestamp=now.isoformat())
        due = await self._due_items(now)
        if not due:
            logger.info("scheduled_publish_nothing_due")
            return report

        for content_id, title in due:
            try:
                async with self.session_factory() as db:
                    await self.workflow.release_scheduled(db, content_id=content_id, now=now)
            except Exception as exc:  # noqa: BLE001
                report.errors.append({"id": content_id, "title": title, "error": str(exc)})
                logger.warning("scheduled_publish_item_failed", content_id=content_id, error=str(exc))
                continue
            report.published.append({"id": content_id, "title": title})

        report.published_count = len(report.published)
        report.error_count = len(report.errors)
        logger.info(
            "scheduled_publish_sweep_done",
            published=report.published_count,
            errors=report.error_count,
        )
        return report


scheduled_publisher = ScheduledPublisher()
