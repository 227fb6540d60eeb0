"""In-process scheduled publishing job (off by default; the cron endpoint is the primary trigger)."""

from __future__ import annotations

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import get_settings
from app.core.logging import get_logger
from app.services.scheduled_publisher import scheduled_publisher

settings = get_settings()
logger = get_logger("services.scheduler")

_scheduler: AsyncIOScheduler | None = None


async def _run_scheduled_publish() -> None:
    report = await scheduled_publisher.run_sweep()
    if report.error_count:
        logger.warning("scheduled_publish_job_errors", errors=report.errors)


def start_publish_scheduler() -> None:
    global _scheduler
    if _scheduler is not None:
        return

    _scheduler = AsyncIOScheduler(timezone="UTC")
    _scheduler.add_job(
        _run_scheduled_publish,
        trigger=IntervalTrigger(minutes=max(1, settings.scheduled_publish_interval_minutes)),
        id="scheduled_publish_sweep",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    _scheduler.start()
    logger.info(
        "publish_scheduler_started",
        interval_minutes=settings.scheduled_publish_interval_minutes,
    )


def stop_publish_scheduler() -> None:
    global _scheduler
    if _scheduler is None:
        return
    _scheduler.shutdown(wait=False)
    _scheduler = None
    logger.info("publish_scheduler_stopped")
