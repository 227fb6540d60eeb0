"""Plain-dict views of workflow rows for the response envelope."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from app.models import (
    ActivityLogEntry,
    ContentItem,
    EditorialAssignment,
    EditorialReview,
    FeedbackEntry,
    PublishingRule,
    UserNotification,
)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if isinstance(value, datetime) else None


def _enum(value: Any) -> str | None:
    if value is None:
        return None
    return value.value if isinstance(value, Enum) else str(value)


def content_to_dict(item: ContentItem, *, include_body: bool = True) -> dict[str, Any]:
    author = item.__dict__.get("author")
    data = {
        "id": item.id,
        "title": item.title,
        "slug": item.slug,
        "excerpt": item.excerpt,
        "meta_description": item.meta_description,
        "category": _enum(item.category),
        "tags": list(item.tags or []),
        "word_count": item.word_count or 0,
        "status": _enum(item.status),
        "author_id": item.author_id,
        "author_name": author.display_name if author is not None else None,
        "created_at": _iso(item.created_at),
        "updated_at": _iso(item.updated_at),
        "published_at": _iso(item.published_at),
        "scheduled_at": _iso(item.scheduled_at),
    }
    if include_body:
        data["body"] = item.body
    return data


def review_to_dict(review: EditorialReview | None) -> dict[str, Any] | None:
    if review is None:
        return None
    return {
        "id": review.id,
        "content_id": review.content_id,
        "status": _enum(review.status),
        "priority": _enum(review.priority),
        "reviewer_id": review.reviewer_id,
        "notes": review.notes,
        "deadline": _iso(review.deadline),
        "created_at": _iso(review.created_at),
        "claimed_at": _iso(review.claimed_at),
        "reviewed_at": _iso(review.reviewed_at),
        "published_at": _iso(review.published_at),
    }


def feedback_to_dict(entry: FeedbackEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "review_id": entry.review_id,
        "author_id": entry.author_id,
        "author_name": entry.author_name,
        "author_role": entry.author_role,
        "type": _enum(entry.type),
        "content": entry.content,
        "is_internal": bool(entry.is_internal),
        "created_at": _iso(entry.created_at),
    }


def activity_to_dict(entry: ActivityLogEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "content_id": entry.content_id,
        "actor_id": entry.actor_id,
        "actor_name": entry.actor_name,
        "actor_role": entry.actor_role,
        "action": _enum(entry.action),
        "details": entry.details,
        "metadata": entry.metadata_json or {},
        "created_at": _iso(entry.created_at),
    }


def notification_to_dict(notification: UserNotification) -> dict[str, Any]:
    return {
        "id": notification.id,
        "kind": notification.kind,
        "title": notification.title,
        "message": notification.message,
        "link": notification.link,
        "is_read": bool(notification.is_read),
        "created_at": _iso(notification.created_at),
    }


def rule_to_dict(rule: PublishingRule) -> dict[str, Any]:
    return {
        "id": rule.id,
        "category": _enum(rule.category),
        "min_word_count": rule.min_word_count,
        "max_word_count": rule.max_word_count,
        "requires_meta_description": bool(rule.requires_meta_description),
        "required_tags": rule.required_tags,
        "auto_approve_trusted": bool(rule.auto_approve_trusted),
        "updated_at": _iso(rule.updated_at),
    }


def assignment_to_dict(assignment: EditorialAssignment) -> dict[str, Any]:
    return {
        "id": assignment.id,
        "user_id": assignment.user_id,
        "category": _enum(assignment.category),
        "can_approve": bool(assignment.can_approve),
        "can_publish": bool(assignment.can_publish),
        "created_at": _iso(assignment.created_at),
    }
