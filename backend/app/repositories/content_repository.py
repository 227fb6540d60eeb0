from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import (
    ActivityLogEntry,
    ContentItem,
    ContentCategory,
    ContentStatus,
    EditorialReview,
    FeedbackEntry,
    User,
)
from app.models.user import ROLE_LEVELS, UserRole


class ContentRepository:
    # ── Content items ──

    async def get_content(self, db: AsyncSession, content_id: int) -> ContentItem | None:
        row = await db.execute(
            select(ContentItem)
            .where(ContentItem.id == content_id)
            .execution_options(populate_existing=True)
        )
        return row.unique().scalar_one_or_none()

    async def get_status(self, db: AsyncSession, content_id: int) -> ContentStatus | None:
        row = await db.execute(select(ContentItem.status).where(ContentItem.id == content_id))
        return row.scalar_one_or_none()

    async def slug_exists(self, db: AsyncSession, slug: str, *, exclude_id: int | None = None) -> bool:
        query = select(ContentItem.id).where(ContentItem.slug == slug)
        if exclude_id is not None:
            query = query.where(ContentItem.id != exclude_id)
        row = await db.execute(query.limit(1))
        return row.scalar_one_or_none() is not None

    async def add_content(self, db: AsyncSession, item: ContentItem) -> ContentItem:
        db.add(item)
        await db.flush()
        await db.refresh(item)
        return item

    async def delete_content(self, db: AsyncSession, item: ContentItem) -> None:
        await db.delete(item)
        await db.flush()

    async def compare_and_set_status(
        self,
        db: AsyncSession,
        *,
        content_id: int,
        expected: ContentStatus,
        target: ContentStatus,
        values: dict[str, Any] | None = None,
    ) -> bool:
        """Conditional status write. False when another writer moved the item first."""
        result = await db.execute(
            update(ContentItem)
            .where(ContentItem.id == content_id, ContentItem.status == expected)
            .values(status=target, **(values or {}))
            .execution_options(synchronize_session=False)
        )
        return (result.rowcount or 0) == 1

    async def list_by_author(self, db: AsyncSession, author_id: int, *, limit: int = 100) -> list[ContentItem]:
        rows = await db.execute(
            select(ContentItem)
            .where(ContentItem.author_id == author_id)
            .order_by(ContentItem.updated_at.desc(), ContentItem.id.desc())
            .limit(max(1, min(limit, 500)))
        )
        return list(rows.unique().scalars().all())

    async def list_due_scheduled(self, db: AsyncSession, *, now: datetime, limit: int) -> list[ContentItem]:
        rows = await db.execute(
            select(ContentItem)
            .where(
                ContentItem.status == ContentStatus.SCHEDULED,
                ContentItem.scheduled_at.is_not(None),
                ContentItem.scheduled_at <= now,
            )
            .order_by(ContentItem.scheduled_at.asc(), ContentItem.id.asc())
            .limit(max(1, limit))
        )
        return list(rows.unique().scalars().all())

    async def list_queue(
        self,
        db: AsyncSession,
        *,
        statuses: list[ContentStatus],
        categories: list[ContentCategory] | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[tuple[ContentItem, EditorialReview | None]], int]:
        """None for categories means every category; an empty list matches nothing."""
        filters = [ContentItem.status.in_(statuses)]
        if categories is not None:
            filters.append(ContentItem.category.in_(categories))
        base = (
            select(ContentItem, EditorialReview)
            .outerjoin(EditorialReview, EditorialReview.content_id == ContentItem.id)
            .where(*filters)
        )
        total_row = await db.execute(select(func.count(ContentItem.id)).where(*filters))
        rows = await db.execute(
            base.order_by(ContentItem.updated_at.asc(), ContentItem.id.asc()).offset(offset).limit(limit)
        )
        return [(item, review) for item, review in rows.unique().all()], int(total_row.scalar_one() or 0)

    async def status_counts(
        self,
        db: AsyncSession,
        *,
        categories: list[ContentCategory] | None = None,
    ) -> dict[str, int]:
        query = select(ContentItem.status, func.count(ContentItem.id))
        if categories is not None:
            query = query.where(ContentItem.category.in_(categories))
        rows = await db.execute(query.group_by(ContentItem.status))
        return {ContentStatus(status).value: int(count) for status, count in rows.all()}

    # ── Reviews ──

    async def get_review(self, db: AsyncSession, content_id: int) -> EditorialReview | None:
        row = await db.execute(
            select(EditorialReview)
            .where(EditorialReview.content_id == content_id)
            .execution_options(populate_existing=True)
        )
        return row.scalar_one_or_none()

    async def add_review(self, db: AsyncSession, review: EditorialReview) -> EditorialReview:
        db.add(review)
        await db.flush()
        return review

    async def save(self, db: AsyncSession, *objects: Any) -> None:
        for obj in objects:
            db.add(obj)
        await db.flush()

    # ── Feedback ──

    async def add_feedback(self, db: AsyncSession, entry: FeedbackEntry) -> FeedbackEntry:
        db.add(entry)
        await db.flush()
        await db.refresh(entry)
        return entry

    async def list_feedback(
        self,
        db: AsyncSession,
        review_id: int,
        *,
        include_internal: bool,
    ) -> list[FeedbackEntry]:
        query = select(FeedbackEntry).where(FeedbackEntry.review_id == review_id)
        if not include_internal:
            query = query.where(FeedbackEntry.is_internal.is_(False))
        rows = await db.execute(query.order_by(FeedbackEntry.created_at.desc(), FeedbackEntry.id.desc()))
        return list(rows.scalars().all())

    async def list_writer_notes(
        self,
        db: AsyncSession,
        author_id: int,
        *,
        limit: int = 50,
    ) -> list[tuple[FeedbackEntry, ContentItem]]:
        rows = await db.execute(
            select(FeedbackEntry, ContentItem)
            .join(EditorialReview, EditorialReview.id == FeedbackEntry.review_id)
            .join(ContentItem, ContentItem.id == EditorialReview.content_id)
            .where(
                ContentItem.author_id == author_id,
                FeedbackEntry.is_internal.is_(False),
                FeedbackEntry.author_id != author_id,
            )
            .order_by(FeedbackEntry.created_at.desc(), FeedbackEntry.id.desc())
            .limit(max(1, min(limit, 200)))
        )
        return [(entry, item) for entry, item in rows.unique().all()]

    # ── Activity ──

    async def add_activity(self, db: AsyncSession, entry: ActivityLogEntry) -> None:
        db.add(entry)
        await db.flush()

    async def list_activity(self, db: AsyncSession, content_id: int, *, limit: int = 100) -> list[ActivityLogEntry]:
        rows = await db.execute(
            select(ActivityLogEntry)
            .where(ActivityLogEntry.content_id == content_id)
            .order_by(ActivityLogEntry.created_at.asc(), ActivityLogEntry.id.asc())
            .limit(max(1, min(limit, 500)))
        )
        return list(rows.scalars().all())

    # ── Users ──

    async def get_user(self, db: AsyncSession, user_id: int) -> User | None:
        row = await db.execute(select(User).where(User.id == user_id))
        return row.scalar_one_or_none()

    async def list_editors(self, db: AsyncSession, *, limit: int | None = None) -> list[User]:
        editor_roles = [role for role, level in ROLE_LEVELS.items() if level >= ROLE_LEVELS[UserRole.EDITOR]]
        query = (
            select(User)
            .where(User.role.in_(editor_roles), User.is_active.is_(True))
            .order_by(User.id.asc())
        )
        if limit:
            query = query.limit(limit)
        rows = await db.execute(query)
        return list(rows.scalars().all())


content_repository = ContentRepository()
