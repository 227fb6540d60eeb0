"""
AfriVerse Editorial Desk - Editorial Policy Routes
==================================================
Per-category publishing rules and editor desk assignments.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.envelope import success_envelope
from app.api.routes.auth import get_current_user
from app.api.serializers import assignment_to_dict, rule_to_dict
from app.core.database import get_db
from app.models import ContentCategory
from app.models.user import User
from app.services.editorial_policy_service import editorial_policy_service

router = APIRouter(prefix="/editorial", tags=["Editorial Policy"])


class RuleRequest(BaseModel):
    min_word_count: int | None = Field(default=None, ge=0, le=100000)
    max_word_count: int | None = Field(default=None, ge=1, le=100000)
    requires_meta_description: bool | None = None
    required_tags: int | None = Field(default=None, ge=0, le=50)
    auto_approve_trusted: bool | None = None


class AssignmentRequest(BaseModel):
    user_id: int
    category: ContentCategory
    can_approve: bool = False
    can_publish: bool = False


@router.get("/rules")
async def list_rules(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rules = await editorial_policy_service.list_rules(db, actor=current_user)
    return success_envelope([rule_to_dict(rule) for rule in rules])


@router.put("/rules/{category}")
async def save_rule(
    category: str,
    payload: RuleRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rule = await editorial_policy_service.save_rule(
        db,
        actor=current_user,
        category=category,
        fields=payload.model_dump(exclude_unset=True),
    )
    return success_envelope(rule_to_dict(rule))


@router.delete("/rules/{category}")
async def delete_rule(
    category: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await editorial_policy_service.delete_rule(db, actor=current_user, category=category)
    return success_envelope({"category": category.lower(), "deleted": True})


@router.get("/assignments")
async def list_assignments(
    user_id: int | None = Query(default=None, ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rows = await editorial_policy_service.list_assignments(db, actor=current_user, user_id=user_id)
    return success_envelope([assignment_to_dict(row) for row in rows])


@router.put("/assignments")
async def save_assignment(
    payload: AssignmentRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    assignment = await editorial_policy_service.save_assignment(
        db,
        actor=current_user,
        user_id=payload.user_id,
        category=payload.category,
        can_approve=payload.can_approve,
        can_publish=payload.can_publish,
    )
    return success_envelope(assignment_to_dict(assignment))


@router.delete("/assignments/{assignment_id}")
async def delete_assignment(
    assignment_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await editorial_policy_service.delete_assignment(db, actor=current_user, assignment_id=assignment_id)
    return success_envelope({"id": assignment_id, "deleted": True})
