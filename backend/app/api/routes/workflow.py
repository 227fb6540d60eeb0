"""
AfriVerse Editorial Desk - Editorial Workflow Routes
====================================================
Submit, claim, feedback, resubmit, review decisions, publishing and the desk queue.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.rbac import require_editor
from app.api.envelope import page_meta, success_envelope
from app.api.routes.auth import get_current_user
from app.api.serializers import activity_to_dict, content_to_dict, feedback_to_dict, review_to_dict
from app.core.database import get_db
from app.models import FeedbackType
from app.models.user import User
from app.services.workflow_service import workflow_service

router = APIRouter(prefix="/workflow", tags=["Editorial Workflow"])


class SubmitRequest(BaseModel):
    notes: str | None = Field(default=None, max_length=5000)


class FeedbackRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=10000)
    type: FeedbackType | None = None
    is_internal: bool = False


class ResubmitRequest(BaseModel):
    response_note: str | None = Field(default=None, max_length=5000)


class ReviewRequest(BaseModel):
    action: Literal["approve", "request_changes", "reject", "set_priority", "set_deadline"]
    feedback: str | None = Field(default=None, max_length=10000)
    priority: str | None = None
    deadline: datetime | None = None


class PublishRequest(BaseModel):
    action: Literal["publish", "unpublish", "schedule"] = "publish"
    scheduled_at: datetime | None = None
    override: bool = False


@router.get("/queue")
async def review_queue(
    status: str | None = Query(default=None, max_length=40),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_editor),
):
    result = await workflow_service.review_queue(
        db, actor=current_user, status=status, page=page, limit=limit
    )
    items = [
        {**content_to_dict(item, include_body=False), "review": review_to_dict(review)}
        for item, review in result["items"]
    ]
    return success_envelope(
        {"items": items, "counts": result["counts"], "categories": result["categories"]},
        meta=page_meta(total=result["total"], page=result["page"], limit=result["limit"]),
    )


@router.post("/{content_id}/submit")
async def submit_for_review(
    content_id: int,
    payload: SubmitRequest | None = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    result = await workflow_service.submit_for_review(
        db,
        actor=current_user,
        content_id=content_id,
        notes=payload.notes if payload else None,
    )
    return success_envelope({**result, "message": "Article submitted for editorial review"})


@router.post("/{content_id}/claim")
async def claim(
    content_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_editor),
):
    result = await workflow_service.claim(db, actor=current_user, content_id=content_id)
    return success_envelope(result)


@router.get("/{content_id}/feedback")
async def list_feedback(
    content_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    entries = await workflow_service.list_feedback(db, actor=current_user, content_id=content_id)
    return success_envelope([feedback_to_dict(entry) for entry in entries])


@router.post("/{content_id}/feedback")
async def add_feedback(
    content_id: int,
    payload: FeedbackRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    entry = await workflow_service.add_feedback(
        db,
        actor=current_user,
        content_id=content_id,
        message=payload.message,
        feedback_type=payload.type,
        is_internal=payload.is_internal,
    )
    return success_envelope({"feedback": feedback_to_dict(entry)})


@router.post("/{content_id}/resubmit")
async def resubmit(
    content_id: int,
    payload: ResubmitRequest | None = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    result = await workflow_service.resubmit(
        db,
        actor=current_user,
        content_id=content_id,
        response_note=payload.response_note if payload else None,
    )
    return success_envelope(result)


@router.post("/{content_id}/review")
async def review(
    content_id: int,
    payload: ReviewRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_editor),
):
    result = await workflow_service.review(
        db,
        actor=current_user,
        content_id=content_id,
        action=payload.action,
        feedback=payload.feedback,
        priority=payload.priority,
        deadline=payload.deadline,
    )
    return success_envelope(result)


@router.post("/{content_id}/publish")
async def publish(
    content_id: int,
    payload: PublishRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    item = await workflow_service.publish(
        db,
        actor=current_user,
        content_id=content_id,
        action=payload.action,
        scheduled_at=payload.scheduled_at,
        override=payload.override,
    )
    return success_envelope({"post": content_to_dict(item, include_body=False)})


@router.post("/{content_id}/archive")
async def archive(
    content_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_editor),
):
    item = await workflow_service.archive(db, actor=current_user, content_id=content_id)
    return success_envelope({"post": content_to_dict(item, include_body=False)})


@router.get("/{content_id}/activity")
async def activity(
    content_id: int,
    limit: int = Query(default=100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    entries = await workflow_service.activity_log(db, actor=current_user, content_id=content_id, limit=limit)
    return success_envelope([activity_to_dict(entry) for entry in entries])
