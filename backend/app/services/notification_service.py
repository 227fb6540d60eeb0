"""
AfriVerse Editorial Desk - Notification Service.
Delivers outbound workflow events as in-app notifications and email.
Runs in the Celery worker (or the API periodic loop), never inside a transition.
"""

import html
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.core.database import async_session
from app.core.logging import get_logger
from app.models import EventStatus, UserNotification, WorkflowEvent, WorkflowEventType
from app.models.user import User
from app.repositories.content_repository import ContentRepository, content_repository
from app.repositories.event_repository import EventRepository, event_repository
from app.services.email_service import EmailService, email_service

logger = get_logger("services.notification")
settings = get_settings()


@dataclass(slots=True)
class RenderedMessage:
    kind: str
    title: str
    message: str
    link: str
    subject: str
    html_body: str


class NotificationService:
    """Resolve recipients, render, persist in-app rows and send email for one event."""

    def __init__(
        self,
        session_factory=None,
        events: EventRepository | None = None,
        content: ContentRepository | None = None,
        email: EmailService | None = None,
    ):
        self.session_factory = session_factory or async_session
        self.events = events or event_repository
        self.content = content or content_repository
        self.email = email or email_service

    @staticmethod
    def _clean_text(text: str, max_len: int = 600) -> str:
        if not text:
            return "-"
        normalized = re.sub(r"\s+", " ", text).strip()
        return html.escape(normalized[:max_len])

    async def _resolve_recipients(self, db, event: WorkflowEvent) -> list[User]:
        payload = event.payload_json or {}
        event_type = event.event_type
        actor_id = payload.get("actor_id")

        if event_type == WorkflowEventType.SUBMITTED.value:
            editors = await self.content.list_editors(db, limit=settings.workflow_max_editors_notified + 1)
            return [u for u in editors if u.id != actor_id][: settings.workflow_max_editors_notified]

        if event_type == WorkflowEventType.RESUBMITTED.value:
            reviewer_id = payload.get("reviewer_id")
            if reviewer_id:
                reviewer = await self.content.get_user(db, int(reviewer_id))
                if reviewer and reviewer.is_active:
                    return [reviewer]
            editors = await self.content.list_editors(db)
            return [u for u in editors if u.id != actor_id]

        author_id = payload.get("author_id")
        if not author_id:
            return []
        if event_type == WorkflowEventType.PUBLISHED.value and author_id == actor_id:
            return []
        if event_type not in {
            WorkflowEventType.APPROVED.value,
            WorkflowEventType.CHANGES_REQUESTED.value,
            WorkflowEventType.REJECTED.value,
            WorkflowEventType.PUBLISHED.value,
        }:
            return []
        author = await self.content.get_user(db, int(author_id))
        return [author] if author and author.is_active else []

    def render(self, event: WorkflowEvent) -> RenderedMessage:
        payload = event.payload_json or {}
        raw_title = str(payload.get("title") or "Untitled")
        title = self._clean_text(raw_title, 200)
        actor = self._clean_text(str(payload.get("actor_name") or "An editor"), 120)
        feedback = payload.get("feedback")
        site = settings.public_site_url.rstrip("/")
        desk_link = f"{site}/admin/editorial/{event.content_id}"
        writer_link = f"{site}/writer/drafts/{event.content_id}"
        feedback_html = f"<p><b>Feedback:</b> {self._clean_text(str(feedback), 1500)}</p>" if feedback else ""

        event_type = event.event_type
        if event_type == WorkflowEventType.SUBMITTED.value:
            kind, heading, message, link = (
                "EDITORIAL",
                "New post for review",
                f'"{raw_title}" by {payload.get("actor_name") or "a writer"} has been submitted for review.',
                desk_link,
            )
        elif event_type == WorkflowEventType.RESUBMITTED.value:
            kind, heading, message, link = (
                "EDITORIAL",
                "Revision submitted",
                f'"{raw_title}" has been revised and is back in the review queue.',
                desk_link,
            )
        elif event_type == WorkflowEventType.APPROVED.value:
            kind, heading, message, link = (
                "POST_STATUS",
                "Post approved",
                f'Your post "{raw_title}" has been approved by {payload.get("actor_name") or "an editor"}.',
                writer_link,
            )
        elif event_type == WorkflowEventType.CHANGES_REQUESTED.value:
            kind, heading, message, link = (
                "POST_STATUS",
                "Revisions requested",
                f'Your post "{raw_title}" needs some changes. Please review the editorial notes.',
                writer_link,
            )
        elif event_type == WorkflowEventType.REJECTED.value:
            kind, heading, message, link = (
                "POST_STATUS",
                "Post not approved",
                f'Your post "{raw_title}" was not approved.',
                writer_link,
            )
        else:
            kind, heading, message, link = (
                "POST_STATUS",
                "Post published",
                f'Great news! Your post "{raw_title}" is now live.',
                f"{site}/{payload.get('slug') or ''}".rstrip("/"),
            )

        html_body = (
            f"<h2>{html.escape(heading)}</h2>"
            f"<p><b>{title}</b></p>"
            f"<p>{self._clean_text(message, 800)}</p>"
            f"{feedback_html}"
            f"<p>Action by: {actor}</p>"
            f'<p><a href="{html.escape(link, quote=True)}">Open in AfriVerse</a></p>'
        )
        return RenderedMessage(
            kind=kind,
            title=heading,
            message=message[:1000],
            link=link,
            subject=f"[AfriVerse] {heading}: {raw_title[:120]}",
            html_body=html_body,
        )

    async def deliver(self, db, event: WorkflowEvent) -> EventStatus:
        """Deliver one PENDING event and record the outcome on it. Caller commits."""
        now = datetime.now(timezone.utc)
        event.attempts = int(event.attempts or 0) + 1
        payload = dict(event.payload_json or {})

        recipients = await self._resolve_recipients(db, event)
        if not recipients:
            event.status = EventStatus.SKIPPED
            event.last_error = "no_recipients"
            event.dispatched_at = now
            return event.status

        rendered = self.render(event)
        if not payload.get("in_app_delivered"):
            await self.events.add_notifications(
                db,
                [
                    UserNotification(
                        user_id=user.id,
                        event_id=event.id,
                        kind=rendered.kind,
                        title=rendered.title,
                        message=rendered.message,
                        link=rendered.link,
                        is_read=False,
                    )
                    for user in recipients
                ],
            )
            payload["in_app_delivered"] = True
            event.payload_json = payload

        if not self.email.configured:
            event.status = EventStatus.SKIPPED
            event.last_error = "email_not_configured"
            event.dispatched_at = now
            return event.status

        sent = await self.email.send([u.email for u in recipients], rendered.subject, rendered.html_body)
        if sent:
            event.status = EventStatus.SENT
            event.last_error = None
            event.dispatched_at = now
        elif event.attempts >= settings.notification_max_attempts:
            event.status = EventStatus.FAILED
            event.last_error = "email_delivery_failed"
            event.dispatched_at = now
        else:
            event.status = EventStatus.PENDING
            event.last_error = "email_delivery_failed"
        return event.status

    async def dispatch_event(self, event_id: int) -> str:
        async with self.session_factory() as db:
            # Celery and the API dispatch loop may race for the same event; only the lock holder sends.
            event = await self.events.lock_pending(db, event_id)
            if event is None:
                logger.debug("workflow_event_not_claimable", event_id=event_id)
                return "not_pending"
            try:
                status = await self.deliver(db, event)
                await db.commit()
            except SQLAlchemyError as exc:
                await db.rollback()
                logger.error("workflow_event_dispatch_failed", event_id=event_id, error=str(exc.__class__.__name__))
                raise
        logger.info("workflow_event_dispatched", event_id=event_id, event_type=event.event_type, status=status.value)
        return status.value

    async def dispatch_pending(self, *, limit: int | None = None) -> dict[str, int]:
        """Re-dispatch events still PENDING after the dispatch interval."""
        cutoff = datetime.now(timezone.utc) - timedelta(seconds=settings.notification_dispatch_interval_seconds)
        async with self.session_factory() as db:
            event_ids = await self.events.list_pending_ids(
                db,
                older_than=cutoff,
                limit=limit or settings.notification_dispatch_batch_limit,
            )
        stats = {"processed": 0, "errors": 0}
        for event_id in event_ids:
            try:
                await self.dispatch_event(event_id)
                stats["processed"] += 1
            except SQLAlchemyError:
                stats["errors"] += 1
        return stats


notification_service = NotificationService()
