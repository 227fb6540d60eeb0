"""
AfriVerse Editorial Desk - Content Models
=========================================
Articles and their editorial review trail.
Status Pipeline: DRAFT → PENDING_REVIEW → IN_REVIEW → APPROVED/CHANGES_REQUESTED/REJECTED
→ SCHEDULED → PUBLISHED → ARCHIVED
"""

import enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from app.core.database import Base


# ── Enums ──

class ContentStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PENDING_REVIEW = "PENDING_REVIEW"
    IN_REVIEW = "IN_REVIEW"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    SCHEDULED = "SCHEDULED"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class ContentCategory(str, enum.Enum):
    GENERAL = "general"
    BUSINESS = "business"
    POLITICS = "politics"
    TECHNOLOGY = "technology"
    CULTURE = "culture"
    SPORTS = "sports"
    HEALTH = "health"
    ENTERTAINMENT = "entertainment"
    OPINION = "opinion"
    LIFESTYLE = "lifestyle"


class ReviewStatus(str, enum.Enum):
    PENDING = "PENDING"
    IN_REVIEW = "IN_REVIEW"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    REVISION_SUBMITTED = "REVISION_SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    PUBLISHED = "PUBLISHED"


class ReviewPriority(str, enum.Enum):
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    URGENT = "URGENT"


class FeedbackType(str, enum.Enum):
    COMMENT = "COMMENT"
    RESPONSE = "RESPONSE"
    INTERNAL_NOTE = "INTERNAL_NOTE"
    REVISION_REQUEST = "REVISION_REQUEST"
    APPROVAL = "APPROVAL"
    REJECTION = "REJECTION"


class ActivityAction(str, enum.Enum):
    CREATED = "CREATED"
    EDITED = "EDITED"
    DELETED = "DELETED"
    SUBMITTED_FOR_REVIEW = "SUBMITTED_FOR_REVIEW"
    AUTO_APPROVED = "AUTO_APPROVED"
    CLAIMED = "CLAIMED"
    FEEDBACK = "FEEDBACK"
    INTERNAL_NOTE = "INTERNAL_NOTE"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    REVISION_SUBMITTED = "REVISION_SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    PUBLISHED = "PUBLISHED"
    UNPUBLISHED = "UNPUBLISHED"
    SCHEDULED = "SCHEDULED"
    AUTO_PUBLISHED = "AUTO_PUBLISHED"
    ARCHIVED = "ARCHIVED"
    PRIORITY_CHANGED = "PRIORITY_CHANGED"
    DEADLINE_SET = "DEADLINE_SET"


# ── Models ──

class ContentItem(Base):
    """A single article moving through the editorial workflow."""
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(300), nullable=False)
    slug = Column(String(320), nullable=False, unique=True, index=True)
    excerpt = Column(Text, nullable=True)
    meta_description = Column(String(320), nullable=True)
    body = Column(Text, nullable=False, default="")
    category = Column(Enum(ContentCategory, name="content_category"), nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    word_count = Column(Integer, nullable=False, default=0)

    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    status = Column(
        Enum(ContentStatus, name="content_status"),
        nullable=False,
        default=ContentStatus.DRAFT,
        index=True,
    )
    published_at = Column(DateTime(timezone=True), nullable=True)
    scheduled_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    author = relationship("User", lazy="joined")
    review = relationship("EditorialReview", back_populates="content", uselist=False, passive_deletes=True)

    __table_args__ = (
        Index("ix_posts_status_scheduled_at", "status", "scheduled_at"),
        Index("ix_posts_author_status", "author_id", "status"),
    )
    # Fetch updated_at in the flush so serializing after commit never lazy-loads.
    __mapper_args__ = {"eager_defaults": True}

    def __repr__(self):
        return f"<ContentItem(id={self.id}, slug='{self.slug}', status={self.status})>"


class EditorialReview(Base):
    """Review tracking record, exactly one per content item."""
    __tablename__ = "editorial_reviews"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content_id = Column(
        Integer,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    status = Column(Enum(ReviewStatus, name="review_status"), nullable=False, default=ReviewStatus.PENDING)
    priority = Column(
        Enum(ReviewPriority, name="review_priority"),
        nullable=False,
        default=ReviewPriority.NORMAL,
    )
    reviewer_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    notes = Column(Text, nullable=True)
    deadline = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    claimed_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    published_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    content = relationship("ContentItem", back_populates="review")
    reviewer = relationship("User")

    __table_args__ = (Index("ix_editorial_reviews_status_priority", "status", "priority"),)
    __mapper_args__ = {"eager_defaults": True}


class FeedbackEntry(Base):
    """Append-only note on a review."""
    __tablename__ = "editorial_feedback"

    id = Column(Integer, primary_key=True, autoincrement=True)
    review_id = Column(
        Integer,
        ForeignKey("editorial_reviews.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    author_name = Column(String(150), nullable=False)
    author_role = Column(String(32), nullable=False)
    type = Column(Enum(FeedbackType, name="feedback_type"), nullable=False, default=FeedbackType.COMMENT)
    content = Column(Text, nullable=False)
    is_internal = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    __table_args__ = (Index("ix_editorial_feedback_review_created", "review_id", "created_at"),)


class ActivityLogEntry(Base):
    """Write-once audit trail for content items."""
    __tablename__ = "editorial_activity_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Survives deletion of the content item so DELETED entries stay readable.
    content_id = Column(Integer, ForeignKey("posts.id", ondelete="SET NULL"), nullable=True, index=True)
    actor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    actor_name = Column(String(150), nullable=False)
    actor_role = Column(String(32), nullable=False)
    action = Column(Enum(ActivityAction, name="activity_action"), nullable=False, index=True)
    details = Column(Text, nullable=True)
    metadata_json = Column(JSON, nullable=True, default=dict)
    request_id = Column(String(64), nullable=True)
    correlation_id = Column(String(64), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    __table_args__ = (
        Index("ix_editorial_activity_content_created", "content_id", "created_at"),
    )
