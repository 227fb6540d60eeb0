"""Models package."""
from app.models.user import User, UserRole, ROLE_LEVELS, role_level, has_min_role, is_editor
from app.models.content import (
    ContentItem, EditorialReview, FeedbackEntry, ActivityLogEntry,
    ContentStatus, ContentCategory, ReviewStatus, ReviewPriority,
    FeedbackType, ActivityAction,
)
from app.models.editorial_policy import PublishingRule, EditorialAssignment
from app.models.outbox import WorkflowEvent, WorkflowEventType, EventStatus
from app.models.notification import UserNotification

__all__ = [
    "User", "UserRole", "ROLE_LEVELS", "role_level", "has_min_role", "is_editor",
    "ContentItem", "EditorialReview", "FeedbackEntry", "ActivityLogEntry",
    "ContentStatus", "ContentCategory", "ReviewStatus", "ReviewPriority",
    "FeedbackType", "ActivityAction",
    "PublishingRule", "EditorialAssignment",
    "WorkflowEvent", "WorkflowEventType", "EventStatus",
    "UserNotification",
]
