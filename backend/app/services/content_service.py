from __future__ import annotations

from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.domain.errors import DuplicateEntity, InvalidStateTransition, NotFound, ValidationFailed
from app.domain.workflow.permissions import is_owner, require_actor, require_owner_or_editor
from app.domain.workflow.state_machine import EDITOR_EDITABLE, OWNER_EDITABLE, allowed_actions
from app.models import ActivityAction, ContentCategory, ContentItem, ContentStatus, User, is_editor
from app.repositories.content_repository import ContentRepository, content_repository
from app.services.activity_service import ActivityService
from app.utils.text_processing import count_words, slugify

logger = get_logger("services.content")

EDITABLE_FIELDS = ("title", "body", "excerpt", "meta_description", "category", "tags", "slug")
MAX_SLUG_ATTEMPTS = 1000


class ContentService:
    """Draft lifecycle outside the review workflow: create, edit, delete."""

    def __init__(self, repository: ContentRepository | None = None):
        self.repository = repository or content_repository
        self.activity = ActivityService(self.repository)

    async def unique_slug(self, db: AsyncSession, source: str, *, exclude_id: int | None = None) -> str:
        base = slugify(source) or "untitled"
        candidate = base
        for suffix in range(1, MAX_SLUG_ATTEMPTS + 1):
            if not await self.repository.slug_exists(db, candidate, exclude_id=exclude_id):
                return candidate
            candidate = f"{base}-{suffix}"
        raise ValidationFailed([f"Could not derive a unique slug from '{source}'"])

    @staticmethod
    def _slug_taken(source: str) -> DuplicateEntity:
        # Two writers derived the same free slug at once; the unique index kept one.
        return DuplicateEntity(
            "Another post claimed this slug at the same time, please retry",
            details={"slug": slugify(source) or "untitled"},
        )

    @staticmethod
    def _category(value: Any) -> ContentCategory | None:
        if value in (None, ""):
            return None
        try:
            return ContentCategory(str(value).lower())
        except ValueError:
            raise ValidationFailed(
                [f"Category must be one of: {', '.join(c.value for c in ContentCategory)}"]
            ) from None

    @staticmethod
    def _tags(value: Any) -> list[str]:
        if not value:
            return []
        seen: list[str] = []
        for tag in value:
            clean = str(tag).strip()
            if clean and clean not in seen:
                seen.append(clean)
        return seen[:20]

    async def get(self, db: AsyncSession, *, actor: User | None, content_id: int) -> ContentItem:
        actor = require_actor(actor)
        item = await self.repository.get_content(db, content_id)
        if item is None:
            raise NotFound(f"Content {content_id} not found", details={"content_id": content_id})
        require_owner_or_editor(actor, item)
        return item

    async def create_draft(
        self,
        db: AsyncSession,
        *,
        actor: User | None,
        title: str,
        body: str = "",
        excerpt: str | None = None,
        category: str | None = None,
        tags: list[str] | None = None,
        slug: str | None = None,
        meta_description: str | None = None,
    ) -> ContentItem:
        actor = require_actor(actor)
        title = (title or "").strip()
        if not title:
            raise ValidationFailed(["Title is required"])

        try:
            item = ContentItem(
                title=title,
                slug=await self.unique_slug(db, slug or title),
                excerpt=(excerpt or "").strip() or None,
                meta_description=(meta_description or "").strip() or None,
                body=body or "",
                category=self._category(category),
                tags=self._tags(tags),
                word_count=count_words(body or ""),
                author_id=actor.id,
                status=ContentStatus.DRAFT,
            )
            item = await self.repository.add_content(db, item)
            await self.activity.record(
                db,
                content_id=item.id,
                action=ActivityAction.CREATED,
                actor=actor,
                details="Draft created",
            )
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise self._slug_taken(slug or title) from None
        except Exception:
            await db.rollback()
            raise

        logger.info("content_draft_created", content_id=item.id, author_id=actor.id, slug=item.slug)
        return item

    async def update_draft(
        self,
        db: AsyncSession,
        *,
        actor: User | None,
        content_id: int,
        fields: dict[str, Any],
    ) -> ContentItem:
        actor = require_actor(actor)
        item = await self.get(db, actor=actor, content_id=content_id)

        editable = (is_owner(actor, item) and item.status in OWNER_EDITABLE) or (
            is_editor(actor) and item.status in EDITOR_EDITABLE
        )
        if not editable:
            raise InvalidStateTransition(
                current=item.status.value,
                action="EDIT",
                allowed_actions=[a.value for a in allowed_actions(item.status)],
                message=f"Content in state {item.status.value} cannot be edited",
            )

        changes = {key: value for key, value in fields.items() if key in EDITABLE_FIELDS}
        if "title" in changes and not (changes["title"] or "").strip():
            raise ValidationFailed(["Title is required"])
        slug_source = changes.get("slug") or item.title

        try:
            if "title" in changes:
                item.title = changes["title"].strip()
            if "body" in changes:
                item.body = changes["body"] or ""
                item.word_count = count_words(item.body)
            if "excerpt" in changes:
                item.excerpt = (changes["excerpt"] or "").strip() or None
            if "meta_description" in changes:
                item.meta_description = (changes["meta_description"] or "").strip() or None
            if "category" in changes:
                item.category = self._category(changes["category"])
            if "tags" in changes:
                item.tags = self._tags(changes["tags"])
            if changes.get("slug"):
                item.slug = await self.unique_slug(db, changes["slug"], exclude_id=item.id)
            await self.repository.save(db, item)
            if changes:
                await self.activity.record(
                    db,
                    content_id=item.id,
                    action=ActivityAction.EDITED,
                    actor=actor,
                    metadata={"fields": sorted(changes)},
                )
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise self._slug_taken(slug_source) from None
        except Exception:
            await db.rollback()
            raise
        return item

    async def delete_draft(self, db: AsyncSession, *, actor: User | None, content_id: int) -> None:
        actor = require_actor(actor)
        item = await self.get(db, actor=actor, content_id=content_id)
        if item.status != ContentStatus.DRAFT:
            raise InvalidStateTransition(
                current=item.status.value,
                action="DELETE",
                allowed_actions=[a.value for a in allowed_actions(item.status)],
                message="Only drafts can be deleted",
            )

        try:
            await self.activity.record(
                db,
                content_id=item.id,
                action=ActivityAction.DELETED,
                actor=actor,
                metadata={"title": item.title, "slug": item.slug},
            )
            await self.repository.delete_content(db, item)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("content_draft_deleted", content_id=content_id, actor_id=actor.id)


content_service = ContentService()
