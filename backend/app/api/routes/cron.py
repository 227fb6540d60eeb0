"""
AfriVerse Editorial Desk - Cron Routes
======================================
Endpoints called by an external scheduler with `Authorization: Bearer <cron secret>`.
"""

from __future__ import annotations

from fastapi import APIRouter, Header

from app.api.envelope import success_envelope
from app.core.config import get_settings
from app.core.logging import get_logger
from app.core.security import verify_cron_secret
from app.domain.errors import Unauthenticated
from app.services.scheduled_publisher import scheduled_publisher

router = APIRouter(prefix="/cron", tags=["Cron"])
logger = get_logger("cron")
settings = get_settings()


def _authorize(authorization: str | None) -> None:
    allowed = verify_cron_secret(
        authorization,
        secret=settings.cron_secret,
        allow_unconfigured=settings.is_development,
    )
    if not allowed:
        logger.warning("cron_unauthorized", configured=bool(settings.cron_secret))
        raise Unauthenticated("Invalid cron credentials")


@router.api_route("/publish-scheduled", methods=["GET", "POST"])
async def publish_scheduled(authorization: str | None = Header(default=None)):
    _authorize(authorization)
    report = await scheduled_publisher.run_sweep()
    message = (
        f"Published {report.published_count} scheduled post(s)"
        if report.published_count or report.error_count
        else "No scheduled posts to publish"
    )
    return success_envelope({**report.to_dict(), "message": message})
