"""Celery application for notification delivery."""

from __future__ import annotations

from celery import Celery
from celery.signals import worker_process_shutdown

from app.core.config import get_settings
from app.queue.async_runtime import close_worker_loop

settings = get_settings()

celery_app = Celery(
    "afriverse_workers",
    broker=settings.redis_queue_url,
    backend=settings.redis_queue_url,
    include=[
        "app.queue.tasks.notification_tasks",
    ],
)

celery_app.conf.update(
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_reject_on_worker_lost=True,
    broker_connection_retry_on_startup=True,
    task_default_queue=settings.notification_queue_name,
    task_default_exchange=settings.notification_queue_name,
    task_default_routing_key=settings.notification_queue_name,
    task_routes={
        "app.queue.tasks.notification_tasks.*": {"queue": settings.notification_queue_name},
    },
)


@worker_process_shutdown.connect
def _close_worker_loop(**kwargs) -> None:
    close_worker_loop(**kwargs)
