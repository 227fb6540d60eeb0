from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import ContentCategory, EditorialAssignment, PublishingRule


class PolicyRepository:
    # ── Publishing rules ──

    async def get_rule(self, db: AsyncSession, category: ContentCategory | None) -> PublishingRule | None:
        if category is None:
            return None
        row = await db.execute(select(PublishingRule).where(PublishingRule.category == category))
        return row.scalar_one_or_none()

    async def list_rules(self, db: AsyncSession) -> list[PublishingRule]:
        rows = await db.execute(select(PublishingRule).order_by(PublishingRule.category.asc()))
        return list(rows.scalars().all())

    # ── Editor assignments ──

    async def get_assignment(
        self,
        db: AsyncSession,
        user_id: int,
        category: ContentCategory | None,
    ) -> EditorialAssignment | None:
        if category is None:
            return None
        row = await db.execute(
            select(EditorialAssignment).where(
                EditorialAssignment.user_id == user_id,
                EditorialAssignment.category == category,
            )
        )
        return row.scalar_one_or_none()

    async def get_assignment_by_id(self, db: AsyncSession, assignment_id: int) -> EditorialAssignment | None:
        row = await db.execute(select(EditorialAssignment).where(EditorialAssignment.id == assignment_id))
        return row.scalar_one_or_none()

    async def list_assignments(self, db: AsyncSession, *, user_id: int | None = None) -> list[EditorialAssignment]:
        query = select(EditorialAssignment)
        if user_id is not None:
            query = query.where(EditorialAssignment.user_id == user_id)
        rows = await db.execute(query.order_by(EditorialAssignment.user_id.asc(), EditorialAssignment.category.asc()))
        return list(rows.scalars().all())

    async def assigned_categories(self, db: AsyncSession, user_id: int) -> list[ContentCategory]:
        rows = await db.execute(
            select(EditorialAssignment.category).where(EditorialAssignment.user_id == user_id)
        )
        return [ContentCategory(value) for value in rows.scalars().all()]

    # ── Writes ──

    async def save(self, db: AsyncSession, *objects: Any) -> None:
        for obj in objects:
            db.add(obj)
        await db.flush()

    async def delete(self, db: AsyncSession, obj: Any) -> None:
        await db.delete(obj)
        await db.flush()


policy_repository = PolicyRepository()
