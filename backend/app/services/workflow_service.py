"""
AfriVerse Editorial Desk - Workflow Service
===========================================
Every editorial transition: submit, claim, feedback, resubmit, review,
publish/unpublish/schedule, archive and the scheduled release.

Each operation checks its preconditions first, then writes content status
(compare-and-set), review, feedback, activity and outbound events in one
transaction. Events are handed to the worker queue only after commit.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.logging import get_logger
from app.domain.errors import Forbidden, InvalidStateTransition, NotFound, ValidationFailed
from app.domain.workflow.permissions import (
    is_desk_restricted,
    is_owner,
    require_actor,
    require_desk_permission,
    require_editor,
    require_min_role,
    require_owner_or_editor,
)
from app.domain.workflow.state_machine import WorkflowAction, require_transition
from app.models import (
    ActivityAction,
    ContentItem,
    ContentStatus,
    EditorialReview,
    FeedbackEntry,
    FeedbackType,
    PublishingRule,
    ReviewPriority,
    ReviewStatus,
    User,
    UserRole,
    WorkflowEventType,
    has_min_role,
    is_editor,
)
from app.repositories.content_repository import ContentRepository, content_repository
from app.repositories.policy_repository import PolicyRepository, policy_repository
from app.services.activity_service import ActivityService
from app.services.outbox_service import OutboxService, outbox_service
from app.services.state_transition_service import StateTransitionService
from app.utils.text_processing import count_words

logger = get_logger("services.workflow")
settings = get_settings()

REVIEW_ACTIONS = ("approve", "request_changes", "reject", "set_priority", "set_deadline")
PUBLISH_ACTIONS = ("publish", "unpublish", "schedule")
DEFAULT_QUEUE_STATUSES = [
    ContentStatus.PENDING_REVIEW,
    ContentStatus.IN_REVIEW,
    ContentStatus.CHANGES_REQUESTED,
]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_for_submission(item: ContentItem, rule: PublishingRule | None = None) -> list[str]:
    """
    Return every failing submission check; empty means the item may be submitted.
    A category rule only tightens the desk-wide checks, never relaxes them.
    """
    errors: list[str] = []
    title = (item.title or "").strip()
    if len(title) < settings.workflow_min_title_chars:
        errors.append(f"Title must be at least {settings.workflow_min_title_chars} characters")
    words = count_words(item.body or "")
    min_words = settings.workflow_min_words
    if rule is not None and rule.min_word_count:
        min_words = max(min_words, rule.min_word_count)
    if words < min_words:
        errors.append(f"Content must be at least {min_words} words (current: {words})")
    if rule is not None and rule.max_word_count and words > rule.max_word_count:
        errors.append(f"Content must be at most {rule.max_word_count} words (current: {words})")
    if not (item.excerpt or "").strip():
        errors.append("Excerpt is required")
    if not item.category:
        errors.append("Category is required")
    if rule is not None:
        if rule.requires_meta_description and not (item.meta_description or "").strip():
            errors.append("Meta description is required")
        tags = [tag for tag in (item.tags or []) if str(tag).strip()]
        if rule.required_tags and len(tags) < rule.required_tags:
            errors.append(f"At least {rule.required_tags} tags are required (current: {len(tags)})")
    return errors


class WorkflowService:
    def __init__(
        self,
        repository: ContentRepository | None = None,
        outbox: OutboxService | None = None,
        policies: PolicyRepository | None = None,
    ):
        self.repository = repository or content_repository
        self.policies = policies or policy_repository
        self.transitions = StateTransitionService(self.repository)
        self.activity = ActivityService(self.repository)
        self.outbox = outbox or outbox_service

    # ── helpers ──

    @asynccontextmanager
    async def _unit_of_work(self, db: AsyncSession):
        """Commit on success, roll back everything on any error."""
        try:
            yield
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    async def _load(self, db: AsyncSession, content_id: int) -> ContentItem:
        item = await self.repository.get_content(db, content_id)
        if item is None:
            raise NotFound(f"Content {content_id} not found", details={"content_id": content_id})
        return item

    async def _ensure_review(self, db: AsyncSession, item: ContentItem) -> EditorialReview:
        review = await self.repository.get_review(db, item.id)
        if review is None:
            review = await self.repository.add_review(
                db,
                EditorialReview(
                    content_id=item.id,
                    status=ReviewStatus.PENDING,
                    priority=ReviewPriority.NORMAL,
                ),
            )
        return review

    async def _add_feedback(
        self,
        db: AsyncSession,
        *,
        review: EditorialReview,
        actor: User,
        message: str,
        feedback_type: FeedbackType,
        is_internal: bool = False,
    ) -> FeedbackEntry:
        return await self.repository.add_feedback(
            db,
            FeedbackEntry(
                review_id=review.id,
                author_id=actor.id,
                author_name=actor.display_name,
                author_role=actor.role.value,
                type=feedback_type,
                content=message,
                is_internal=is_internal,
                created_at=utcnow(),
            ),
        )

    async def _after_commit(self, event_ids: list[int]) -> None:
        if event_ids:
            await self.outbox.enqueue(event_ids)

    async def _require_desk(
        self, db: AsyncSession, actor: User, item: ContentItem, permission: str | None = None
    ) -> None:
        if not is_desk_restricted(actor):
            return
        assignment = await self.policies.get_assignment(db, actor.id, item.category)
        require_desk_permission(actor, item, assignment, permission)

    # ── submit ──

    async def submit_for_review(
        self,
        db: AsyncSession,
        *,
        actor: User | None,
        content_id: int,
        notes: str | None = None,
    ) -> dict[str, Any]:
        actor = require_actor(actor)
        item = await self._load(db, content_id)
        require_owner_or_editor(actor, item)
        require_transition(item.status, WorkflowAction.SUBMIT)
        rule = await self.policies.get_rule(db, item.category)
        errors = validate_for_submission(item, rule)
        if errors:
            raise ValidationFailed(errors)

        notes = (notes or "").strip() or None
        if (
            rule is not None
            and rule.auto_approve_trusted
            and actor.role == UserRole.SENIOR_WRITER
            and is_owner(actor, item)
        ):
            return await self._auto_approve(db, actor=actor, item=item, notes=notes)

        event_ids: list[int] = []
        async with self._unit_of_work(db):
            item, previous = await self.transitions.transition_content(
                db=db, item=item, action=WorkflowAction.SUBMIT
            )
            review = await self._ensure_review(db, item)
            review.status = ReviewStatus.PENDING
            review.reviewer_id = None
            review.claimed_at = None
            review.reviewed_at = None
            if notes:
                review.notes = notes
            await self.repository.save(db, review)
            if notes:
                await self._add_feedback(
                    db, review=review, actor=actor, message=notes, feedback_type=FeedbackType.COMMENT
                )
            await self.activity.record(
                db,
                content_id=item.id,
                action=ActivityAction.SUBMITTED_FOR_REVIEW,
                actor=actor,
                details="Article submitted for editorial review",
                metadata={"from_state": previous.value, "word_count": item.word_count},
            )
            event = await self.outbox.emit(
                db,
                event_type=WorkflowEventType.SUBMITTED,
                item=item,
                actor=actor,
                payload={"resubmission": previous == ContentStatus.CHANGES_REQUESTED},
            )
            event_ids.append(event.id)

        await self._after_commit(event_ids)
        logger.info("content_submitted", content_id=item.id, actor_id=actor.id)
        return {"content_id": item.id, "status": ContentStatus.PENDING_REVIEW.value}

    async def _auto_approve(
        self,
        db: AsyncSession,
        *,
        actor: User,
        item: ContentItem,
        notes: str | None,
    ) -> dict[str, Any]:
        require_transition(item.status, WorkflowAction.AUTO_APPROVE)
        async with self._unit_of_work(db):
            item, previous = await self.transitions.transition_content(
                db=db, item=item, action=WorkflowAction.AUTO_APPROVE
            )
            review = await self._ensure_review(db, item)
            review.status = ReviewStatus.APPROVED
            review.reviewer_id = None
            review.claimed_at = None
            review.reviewed_at = utcnow()
            if notes:
                review.notes = notes
            await self.repository.save(db, review)
            await self.activity.record(
                db,
                content_id=item.id,
                action=ActivityAction.AUTO_APPROVED,
                actor=actor,
                details="Senior writer submission approved by category rule",
                metadata={"from_state": previous.value, "category": item.category.value},
            )

        logger.info("content_auto_approved", content_id=item.id, actor_id=actor.id, category=item.category.value)
        return {"content_id": item.id, "status": ContentStatus.APPROVED.value, "auto_approved": True}

    # ── claim ──

    async def claim(self, db: AsyncSession, *, actor: User | None, content_id: int) -> dict[str, Any]:
        actor = require_actor(actor)
        require_editor(actor, "Only editors can claim content for review")
        item = await self._load(db, content_id)
        await self._require_desk(db, actor, item)
        require_transition(item.status, WorkflowAction.CLAIM)

        async with self._unit_of_work(db):
            item, _ = await self.transitions.transition_content(db=db, item=item, action=WorkflowAction.CLAIM)
            review = await self._ensure_review(db, item)
            review.status = ReviewStatus.IN_REVIEW
            review.reviewer_id = actor.id
            review.claimed_at = utcnow()
            await self.repository.save(db, review)
            await self.activity.record(
                db,
                content_id=item.id,
                action=ActivityAction.CLAIMED,
                actor=actor,
                details=f"Claimed for review by {actor.display_name}",
            )

        logger.info("content_claimed", content_id=item.id, reviewer_id=actor.id)
        return {"success": True, "content_id": item.id, "reviewer_id": actor.id, "status": item.status.value}

    # ── feedback ──

    async def add_feedback(
        self,
        db: AsyncSession,
        *,
        actor: User | None,
        content_id: int,
        message: str,
        feedback_type: FeedbackType | None = None,
        is_internal: bool = False,
    ) -> FeedbackEntry:
        actor = require_actor(actor)
        message = (message or "").strip()
        if not message:
            raise ValidationFailed(["Feedback message is required"])
        item = await self._load(db, content_id)
        require_owner_or_editor(actor, item)
        review = await self.repository.get_review(db, item.id)
        if review is None:
            raise NotFound("No editorial review exists for this content", details={"content_id": content_id})
        if is_internal and not is_editor(actor):
            raise Forbidden("Only editors can add internal notes")

        owner = is_owner(actor, item)
        if feedback_type is None:
            if is_internal:
                feedback_type = FeedbackType.INTERNAL_NOTE
            else:
                feedback_type = FeedbackType.RESPONSE if owner else FeedbackType.COMMENT

        author_response = (
            owner
            and not is_internal
            and review.status == ReviewStatus.CHANGES_REQUESTED
            and item.status == ContentStatus.CHANGES_REQUESTED
        )

        event_ids: list[int] = []
        async with self._unit_of_work(db):
            entry = await self._add_feedback(
                db,
                review=review,
                actor=actor,
                message=message,
                feedback_type=feedback_type,
                is_internal=is_internal,
            )
            if author_response:
                item, _ = await self.transitions.transition_content(
                    db=db, item=item, action=WorkflowAction.AUTHOR_RESPONSE
                )
                review.status = ReviewStatus.REVISION_SUBMITTED
                await self.repository.save(db, review)
                await self.activity.record(
                    db,
                    content_id=item.id,
                    action=ActivityAction.REVISION_SUBMITTED,
                    actor=actor,
                    details="Author responded to requested changes",
                )
                event = await self.outbox.emit(
                    db,
                    event_type=WorkflowEventType.RESUBMITTED,
                    item=item,
                    actor=actor,
                    payload={"reviewer_id": review.reviewer_id, "feedback": message},
                )
                event_ids.append(event.id)
            else:
                await self.activity.record(
                    db,
                    content_id=item.id,
                    action=ActivityAction.INTERNAL_NOTE if is_internal else ActivityAction.FEEDBACK,
                    actor=actor,
                    details=f"{feedback_type.value} added",
                    metadata={"feedback_type": feedback_type.value},
                )

        await self._after_commit(event_ids)
        return entry

    async def list_feedback(self, db: AsyncSession, *, actor: User | None, content_id: int) -> list[FeedbackEntry]:
        actor = require_actor(actor)
        item = await self._load(db, content_id)
        require_owner_or_editor(actor, item)
        review = await self.repository.get_review(db, item.id)
        if review is None:
            return []
        return await self.repository.list_feedback(db, review.id, include_internal=is_editor(actor))

    # ── resubmit ──

    async def resubmit(
        self,
        db: AsyncSession,
        *,
        actor: User | None,
        content_id: int,
        response_note: str | None = None,
    ) -> dict[str, Any]:
        actor = require_actor(actor)
        item = await self._load(db, content_id)
        if not is_owner(actor, item):
            raise Forbidden("Only the author can resubmit this content")
        require_transition(item.status, WorkflowAction.RESUBMIT)

        note = (response_note or "").strip() or None
        event_ids: list[int] = []
        async with self._unit_of_work(db):
            item, _ = await self.transitions.transition_content(db=db, item=item, action=WorkflowAction.RESUBMIT)
            review = await self._ensure_review(db, item)
            review.status = ReviewStatus.REVISION_SUBMITTED
            if note:
                review.notes = f"Resubmission note: {note}\n\n{review.notes or ''}".strip()
            await self.repository.save(db, review)
            if note:
                await self._add_feedback(
                    db, review=review, actor=actor, message=note, feedback_type=FeedbackType.RESPONSE
                )
            await self.activity.record(
                db,
                content_id=item.id,
                action=ActivityAction.REVISION_SUBMITTED,
                actor=actor,
                details="Revised article resubmitted for review",
            )
            event = await self.outbox.emit(
                db,
                event_type=WorkflowEventType.RESUBMITTED,
                item=item,
                actor=actor,
                payload={"reviewer_id": review.reviewer_id, "feedback": note},
            )
            event_ids.append(event.id)

        await self._after_commit(event_ids)
        logger.info("content_resubmitted", content_id=item.id, actor_id=actor.id)
        return {"success": True, "content_id": item.id, "status": item.status.value}

    # ── review decisions ──

    async def review(
        self,
        db: AsyncSession,
        *,
        actor: User | None,
        content_id: int,
        action: str,
        feedback: str | None = None,
        priority: str | None = None,
        deadline: datetime | None = None,
    ) -> dict[str, Any]:
        actor = require_actor(actor)
        require_editor(actor, "Only editors can review content")
        if action not in REVIEW_ACTIONS:
            raise ValidationFailed([f"Unknown review action: {action}"])
        item = await self._load(db, content_id)
        await self._require_desk(db, actor, item, "approve" if action == "approve" else None)
        feedback = (feedback or "").strip() or None

        if action == "set_priority":
            return await self._set_priority(db, actor=actor, item=item, priority=priority)
        if action == "set_deadline":
            return await self._set_deadline(db, actor=actor, item=item, deadline=deadline)

        decision = {
            "approve": (
                WorkflowAction.APPROVE,
                ReviewStatus.APPROVED,
                FeedbackType.APPROVAL,
                ActivityAction.APPROVED,
                WorkflowEventType.APPROVED,
            ),
            "request_changes": (
                WorkflowAction.REQUEST_CHANGES,
                ReviewStatus.CHANGES_REQUESTED,
                FeedbackType.REVISION_REQUEST,
                ActivityAction.CHANGES_REQUESTED,
                WorkflowEventType.CHANGES_REQUESTED,
            ),
            "reject": (
                WorkflowAction.REJECT,
                ReviewStatus.REJECTED,
                FeedbackType.REJECTION,
                ActivityAction.REJECTED,
                WorkflowEventType.REJECTED,
            ),
        }
        wf_action, review_status, feedback_type, activity_action, event_type = decision[action]
        require_transition(item.status, wf_action)
        if action != "approve" and not feedback:
            raise ValidationFailed([f"Feedback is required to {action.replace('_', ' ')}"])

        event_ids: list[int] = []
        async with self._unit_of_work(db):
            item, _ = await self.transitions.transition_content(db=db, item=item, action=wf_action)
            review = await self._ensure_review(db, item)
            review.status = review_status
            review.reviewed_at = utcnow()
            if review.reviewer_id is None:
                review.reviewer_id = actor.id
            if feedback:
                review.notes = feedback
            await self.repository.save(db, review)
            if feedback:
                await self._add_feedback(
                    db, review=review, actor=actor, message=feedback, feedback_type=feedback_type
                )
            await self.activity.record(
                db,
                content_id=item.id,
                action=activity_action,
                actor=actor,
                details=feedback,
            )
            event = await self.outbox.emit(
                db,
                event_type=event_type,
                item=item,
                actor=actor,
                payload={"feedback": feedback},
            )
            event_ids.append(event.id)

        await self._after_commit(event_ids)
        logger.info("content_reviewed", content_id=item.id, action=action, reviewer_id=actor.id)
        return {"content_id": item.id, "status": item.status.value, "review_status": review_status.value}

    async def _set_priority(self, db: AsyncSession, *, actor: User, item: ContentItem, priority: str | None) -> dict:
        try:
            value = ReviewPriority(str(priority or "").upper())
        except ValueError:
            raise ValidationFailed(
                [f"Priority must be one of: {', '.join(p.value for p in ReviewPriority)}"]
            ) from None
        review = await self.repository.get_review(db, item.id)
        if review is None:
            raise NotFound("No editorial review exists for this content", details={"content_id": item.id})

        async with self._unit_of_work(db):
            previous = review.priority
            review.priority = value
            await self.repository.save(db, review)
            await self.activity.record(
                db,
                content_id=item.id,
                action=ActivityAction.PRIORITY_CHANGED,
                actor=actor,
                details=f"Priority set to {value.value}",
                metadata={"from": ReviewPriority(previous).value if previous else None, "to": value.value},
            )
        return {"content_id": item.id, "status": item.status.value, "priority": value.value}

    async def _set_deadline(
        self, db: AsyncSession, *, actor: User, item: ContentItem, deadline: datetime | None
    ) -> dict:
        if deadline is not None and deadline.tzinfo is None:
            raise ValidationFailed(["Deadline must include a timezone"])
        review = await self.repository.get_review(db, item.id)
        if review is None:
            raise NotFound("No editorial review exists for this content", details={"content_id": item.id})

        async with self._unit_of_work(db):
            review.deadline = deadline
            await self.repository.save(db, review)
            await self.activity.record(
                db,
                content_id=item.id,
                action=ActivityAction.DEADLINE_SET,
                actor=actor,
                details=f"Deadline set to {deadline.isoformat()}" if deadline else "Deadline cleared",
            )
        return {
            "content_id": item.id,
            "status": item.status.value,
            "deadline": deadline.isoformat() if deadline else None,
        }

    # ── publish / unpublish / schedule ──

    async def publish(
        self,
        db: AsyncSession,
        *,
        actor: User | None,
        content_id: int,
        action: str = "publish",
        scheduled_at: datetime | None = None,
        override: bool = False,
    ) -> ContentItem:
        actor = require_actor(actor)
        if action not in PUBLISH_ACTIONS:
            raise ValidationFailed([f"Unknown publish action: {action}"])
        item = await self._load(db, content_id)

        if action == "unpublish":
            return await self._unpublish(db, actor=actor, item=item)
        if action == "schedule":
            return await self._schedule(db, actor=actor, item=item, scheduled_at=scheduled_at)

        if override:
            require_min_role(actor, UserRole.ADMIN, "Only admins can publish without approval")
            wf_action = WorkflowAction.OVERRIDE_PUBLISH
        else:
            owner = is_owner(actor, item)
            allowed = is_editor(actor) or (
                owner
                and (has_min_role(actor, UserRole.SENIOR_WRITER) or item.status == ContentStatus.APPROVED)
            )
            if not allowed:
                raise Forbidden("You are not allowed to publish this content")
            if not owner:
                await self._require_desk(db, actor, item, "publish")
            wf_action = WorkflowAction.PUBLISH
        require_transition(item.status, wf_action)

        now = utcnow()
        event_ids: list[int] = []
        async with self._unit_of_work(db):
            item, previous = await self.transitions.transition_content(
                db=db,
                item=item,
                action=wf_action,
                values={"published_at": now, "scheduled_at": None},
            )
            review = await self._ensure_review(db, item)
            review.status = ReviewStatus.PUBLISHED
            review.published_at = now
            await self.repository.save(db, review)
            await self.activity.record(
                db,
                content_id=item.id,
                action=ActivityAction.PUBLISHED,
                actor=actor,
                details="Published with admin override" if override else "Published",
                metadata={"from_state": previous.value, "override": override},
            )
            event = await self.outbox.emit(db, event_type=WorkflowEventType.PUBLISHED, item=item, actor=actor)
            event_ids.append(event.id)

        await self._after_commit(event_ids)
        logger.info("content_published", content_id=item.id, actor_id=actor.id, override=override)
        return item

    async def _unpublish(self, db: AsyncSession, *, actor: User, item: ContentItem) -> ContentItem:
        require_editor(actor, "Only editors can unpublish content")
        await self._require_desk(db, actor, item, "publish")
        require_transition(item.status, WorkflowAction.UNPUBLISH)

        async with self._unit_of_work(db):
            item, previous = await self.transitions.transition_content(
                db=db,
                item=item,
                action=WorkflowAction.UNPUBLISH,
                values={"published_at": None, "scheduled_at": None},
            )
            review = await self.repository.get_review(db, item.id)
            if review is not None:
                review.status = ReviewStatus.APPROVED
                review.published_at = None
                await self.repository.save(db, review)
            await self.activity.record(
                db,
                content_id=item.id,
                action=ActivityAction.UNPUBLISHED,
                actor=actor,
                metadata={"from_state": previous.value},
            )

        logger.info("content_unpublished", content_id=item.id, actor_id=actor.id)
        return item

    async def _schedule(
        self,
        db: AsyncSession,
        *,
        actor: User,
        item: ContentItem,
        scheduled_at: datetime | None,
    ) -> ContentItem:
        if not (is_editor(actor) or is_owner(actor, item)):
            raise Forbidden("You are not allowed to schedule this content")
        if not is_owner(actor, item):
            await self._require_desk(db, actor, item, "publish")
        require_transition(item.status, WorkflowAction.SCHEDULE)
        if scheduled_at is None:
            raise ValidationFailed(["scheduled_at is required to schedule content"])
        if scheduled_at.tzinfo is None:
            raise ValidationFailed(["scheduled_at must include a timezone"])
        if scheduled_at <= utcnow():
            raise ValidationFailed(["scheduled_at must be in the future"])

        async with self._unit_of_work(db):
            item, _ = await self.transitions.transition_content(
                db=db,
                item=item,
                action=WorkflowAction.SCHEDULE,
                values={"scheduled_at": scheduled_at},
            )
            await self.activity.record(
                db,
                content_id=item.id,
                action=ActivityAction.SCHEDULED,
                actor=actor,
                details=f"Scheduled for {scheduled_at.isoformat()}",
                metadata={"scheduled_at": scheduled_at.isoformat()},
            )

        logger.info("content_scheduled", content_id=item.id, scheduled_at=scheduled_at.isoformat())
        return item

    async def release_scheduled(self, db: AsyncSession, *, content_id: int, now: datetime) -> ContentItem:
        """Publish one due SCHEDULED item on behalf of the system."""
        item = await self._load(db, content_id)
        require_transition(item.status, WorkflowAction.RELEASE_SCHEDULED)
        if item.scheduled_at is None or item.scheduled_at > now:
            raise InvalidStateTransition(
                current=item.status.value,
                action=WorkflowAction.RELEASE_SCHEDULED.value,
                message="Content is not due for publication yet",
            )

        event_ids: list[int] = []
        async with self._unit_of_work(db):
            item, _ = await self.transitions.transition_content(
                db=db,
                item=item,
                action=WorkflowAction.RELEASE_SCHEDULED,
                values={"published_at": now, "scheduled_at": None},
            )
            review = await self._ensure_review(db, item)
            review.status = ReviewStatus.PUBLISHED
            review.published_at = now
            await self.repository.save(db, review)
            await self.activity.record(
                db,
                content_id=item.id,
                action=ActivityAction.AUTO_PUBLISHED,
                actor=None,
                details="Published automatically at scheduled time",
            )
            event = await self.outbox.emit(db, event_type=WorkflowEventType.PUBLISHED, item=item, actor=None)
            event_ids.append(event.id)

        await self._after_commit(event_ids)
        return item

    # ── archive ──

    async def archive(self, db: AsyncSession, *, actor: User | None, content_id: int) -> ContentItem:
        actor = require_actor(actor)
        require_editor(actor, "Only editors can archive content")
        item = await self._load(db, content_id)
        await self._require_desk(db, actor, item)
        require_transition(item.status, WorkflowAction.ARCHIVE)

        async with self._unit_of_work(db):
            item, previous = await self.transitions.transition_content(
                db=db, item=item, action=WorkflowAction.ARCHIVE
            )
            await self.activity.record(
                db,
                content_id=item.id,
                action=ActivityAction.ARCHIVED,
                actor=actor,
                metadata={"from_state": previous.value},
            )
        return item

    # ── queries ──

    async def review_queue(
        self,
        db: AsyncSession,
        *,
        actor: User | None,
        status: str | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> dict[str, Any]:
        actor = require_actor(actor)
        require_editor(actor, "Only editors can view the review queue")
        if not status:
            statuses = list(DEFAULT_QUEUE_STATUSES)
        elif status.lower() == "all":
            statuses = list(ContentStatus)
        else:
            try:
                statuses = [ContentStatus(status.upper())]
            except ValueError:
                raise ValidationFailed([f"Unknown status filter: {status}"]) from None

        categories = None
        if is_desk_restricted(actor):
            categories = await self.policies.assigned_categories(db, actor.id)

        page = max(1, page)
        limit = max(1, min(limit, 100))
        rows, total = await self.repository.list_queue(
            db, statuses=statuses, categories=categories, offset=(page - 1) * limit, limit=limit
        )
        counts = await self.repository.status_counts(db, categories=categories)
        return {
            "items": rows,
            "total": total,
            "page": page,
            "limit": limit,
            "counts": counts,
            "categories": [category.value for category in categories] if categories is not None else None,
        }

    async def activity_log(
        self,
        db: AsyncSession,
        *,
        actor: User | None,
        content_id: int,
        limit: int = 100,
    ) -> list:
        actor = require_actor(actor)
        item = await self._load(db, content_id)
        require_owner_or_editor(actor, item)
        return await self.repository.list_activity(db, item.id, limit=limit)

    async def my_content(self, db: AsyncSession, *, actor: User | None, limit: int = 100) -> list[ContentItem]:
        actor = require_actor(actor)
        return await self.repository.list_by_author(db, actor.id, limit=limit)

    async def writer_notes(self, db: AsyncSession, *, actor: User | None, limit: int = 50) -> list:
        actor = require_actor(actor)
        return await self.repository.list_writer_notes(db, actor.id, limit=limit)


workflow_service = WorkflowService()
