"""Notification delivery tasks executed in workers."""

from __future__ import annotations

import structlog
from celery import Task

from app.core.logging import get_logger, setup_logging
from app.core.config import get_settings
from app.queue.async_runtime import run_async
from app.queue.celery_app import celery_app
from app.services.notification_service import notification_service

settings = get_settings()
logger = get_logger("queue.notification_tasks")
setup_logging(debug=settings.app_debug)

DEFAULT_TASK_SOFT_LIMIT_SEC = 60
DEFAULT_TASK_HARD_LIMIT_SEC = 90


@celery_app.task(
    bind=True,
    autoretry_for=(TimeoutError, ConnectionError),
    retry_backoff=True,
    retry_jitter=True,
    max_retries=5,
    soft_time_limit=DEFAULT_TASK_SOFT_LIMIT_SEC,
    time_limit=DEFAULT_TASK_HARD_LIMIT_SEC,
)
def dispatch_workflow_event(self: Task, event_id: int) -> dict:
    structlog.contextvars.bind_contextvars(event_id=event_id, task_id=self.request.id or "")
    try:
        status = run_async(notification_service.dispatch_event(int(event_id)))
        return {"ok": True, "event_id": event_id, "status": status}
    finally:
        structlog.contextvars.clear_contextvars()


@celery_app.task(
    soft_time_limit=DEFAULT_TASK_SOFT_LIMIT_SEC * 5,
    time_limit=DEFAULT_TASK_HARD_LIMIT_SEC * 5,
)
def dispatch_pending_events() -> dict:
    stats = run_async(notification_service.dispatch_pending())
    logger.info("pending_events_dispatched", **stats)
    return stats
