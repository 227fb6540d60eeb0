"""
AfriVerse Editorial Desk - Content Routes
=========================================
Writer drafts: create, read, edit, delete, plus the writer's own lists.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.envelope import success_envelope
from app.api.routes.auth import get_current_user
from app.api.serializers import content_to_dict, feedback_to_dict
from app.core.database import get_db
from app.models.user import User
from app.services.content_service import content_service
from app.services.workflow_service import workflow_service

router = APIRouter(prefix="/content", tags=["Content"])


class ContentCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    body: str = Field(default="", max_length=200_000)
    excerpt: str | None = Field(default=None, max_length=1000)
    meta_description: str | None = Field(default=None, max_length=320)
    category: str | None = Field(default=None, max_length=40)
    tags: list[str] = Field(default_factory=list, max_length=50)
    slug: str | None = Field(default=None, max_length=300)


class ContentUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=300)
    body: str | None = Field(default=None, max_length=200_000)
    excerpt: str | None = Field(default=None, max_length=1000)
    meta_description: str | None = Field(default=None, max_length=320)
    category: str | None = Field(default=None, max_length=40)
    tags: list[str] | None = Field(default=None, max_length=50)
    slug: str | None = Field(default=None, max_length=300)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_content(
    payload: ContentCreateRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    item = await content_service.create_draft(
        db,
        actor=current_user,
        title=payload.title,
        body=payload.body,
        excerpt=payload.excerpt,
        category=payload.category,
        tags=payload.tags,
        slug=payload.slug,
        meta_description=payload.meta_description,
    )
    return success_envelope(content_to_dict(item), status_code=status.HTTP_201_CREATED)


@router.get("/mine")
async def my_content(
    limit: int = Query(default=100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    items = await workflow_service.my_content(db, actor=current_user, limit=limit)
    return success_envelope([content_to_dict(item, include_body=False) for item in items])


@router.get("/notes")
async def writer_notes(
    limit: int = Query(default=50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rows = await workflow_service.writer_notes(db, actor=current_user, limit=limit)
    return success_envelope(
        [
            {
                **feedback_to_dict(entry),
                "post": {"id": item.id, "title": item.title, "status": item.status.value},
            }
            for entry, item in rows
        ]
    )


@router.get("/{content_id}")
async def get_content(
    content_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    item = await content_service.get(db, actor=current_user, content_id=content_id)
    return success_envelope(content_to_dict(item))


@router.patch("/{content_id}")
async def update_content(
    content_id: int,
    payload: ContentUpdateRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    item = await content_service.update_draft(
        db,
        actor=current_user,
        content_id=content_id,
        fields=payload.model_dump(exclude_unset=True),
    )
    return success_envelope(content_to_dict(item))


@router.delete("/{content_id}")
async def delete_content(
    content_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await content_service.delete_draft(db, actor=current_user, content_id=content_id)
    return success_envelope({"deleted": True, "content_id": content_id})
