"""editorial workflow initial schema

Revision ID: 20261019_editorial_workflow_initial
Revises:
Create Date: 2026-10-19 09:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_editorial_workflow_initial"
down_revision = None
branch_labels = None
depends_on = None

USER_ROLES = ("CONTRIBUTOR", "AUTHOR", "SENIOR_WRITER", "EDITOR", "ADMIN", "SUPER_ADMIN")
CONTENT_STATUSES = (
    "DRAFT",
    "PENDING_REVIEW",
    "IN_REVIEW",
    "CHANGES_REQUESTED",
    "APPROVED",
    "REJECTED",
    "SCHEDULED",
    "PUBLISHED",
    "ARCHIVED",
)
CONTENT_CATEGORIES = (
    "GENERAL",
    "BUSINESS",
    "POLITICS",
    "TECHNOLOGY",
    "CULTURE",
    "SPORTS",
    "HEALTH",
    "ENTERTAINMENT",
    "OPINION",
    "LIFESTYLE",
)
REVIEW_STATUSES = (
    "PENDING",
    "IN_REVIEW",
    "CHANGES_REQUESTED",
    "REVISION_SUBMITTED",
    "APPROVED",
    "REJECTED",
    "PUBLISHED",
)
REVIEW_PRIORITIES = ("LOW", "NORMAL", "HIGH", "URGENT")
FEEDBACK_TYPES = ("COMMENT", "RESPONSE", "INTERNAL_NOTE", "REVISION_REQUEST", "APPROVAL", "REJECTION")
ACTIVITY_ACTIONS = (
    "CREATED",
    "EDITED",
    "DELETED",
    "SUBMITTED_FOR_REVIEW",
    "CLAIMED",
    "FEEDBACK",
    "INTERNAL_NOTE",
    "CHANGES_REQUESTED",
    "REVISION_SUBMITTED",
    "APPROVED",
    "REJECTED",
    "PUBLISHED",
    "UNPUBLISHED",
    "SCHEDULED",
    "AUTO_PUBLISHED",
    "ARCHIVED",
    "PRIORITY_CHANGED",
    "DEADLINE_SET",
)
EVENT_STATUSES = ("PENDING", "SENT", "FAILED", "SKIPPED")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=True),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("role", sa.Enum(*USER_ROLES, name="user_role"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "posts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("slug", sa.String(length=320), nullable=False),
        sa.Column("excerpt", sa.Text(), nullable=True),
        sa.Column("body", sa.Text(), nullable=False, server_default=""),
        sa.Column("category", sa.Enum(*CONTENT_CATEGORIES, name="content_category"), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("word_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.Enum(*CONTENT_STATUSES, name="content_status"), nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_posts_slug", "posts", ["slug"], unique=True)
    op.create_index("ix_posts_author_id", "posts", ["author_id"], unique=False)
    op.create_index("ix_posts_status", "posts", ["status"], unique=False)
    op.create_index("ix_posts_status_scheduled_at", "posts", ["status", "scheduled_at"], unique=False)
    op.create_index("ix_posts_author_status", "posts", ["author_id", "status"], unique=False)

    op.create_table(
        "editorial_reviews",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("content_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.Enum(*REVIEW_STATUSES, name="review_status"), nullable=False),
        sa.Column("priority", sa.Enum(*REVIEW_PRIORITIES, name="review_priority"), nullable=False),
        sa.Column("reviewer_id", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("claimed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.ForeignKeyConstraint(["content_id"], ["posts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["reviewer_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_editorial_reviews_content_id", "editorial_reviews", ["content_id"], unique=True)
    op.create_index("ix_editorial_reviews_reviewer_id", "editorial_reviews", ["reviewer_id"], unique=False)
    op.create_index(
        "ix_editorial_reviews_status_priority",
        "editorial_reviews",
        ["status", "priority"],
        unique=False,
    )

    op.create_table(
        "editorial_feedback",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("review_id", sa.Integer(), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=True),
        sa.Column("author_name", sa.String(length=150), nullable=False),
        sa.Column("author_role", sa.String(length=32), nullable=False),
        sa.Column("type", sa.Enum(*FEEDBACK_TYPES, name="feedback_type"), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_internal", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.ForeignKeyConstraint(["review_id"], ["editorial_reviews.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_editorial_feedback_review_id", "editorial_feedback", ["review_id"], unique=False)
    op.create_index("ix_editorial_feedback_created_at", "editorial_feedback", ["created_at"], unique=False)
    op.create_index(
        "ix_editorial_feedback_review_created",
        "editorial_feedback",
        ["review_id", "created_at"],
        unique=False,
    )

    op.create_table(
        "editorial_activity_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("content_id", sa.Integer(), nullable=True),
        sa.Column("actor_id", sa.Integer(), nullable=True),
        sa.Column("actor_name", sa.String(length=150), nullable=False),
        sa.Column("actor_role", sa.String(length=32), nullable=False),
        sa.Column("action", sa.Enum(*ACTIVITY_ACTIONS, name="activity_action"), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("metadata_json", sa.JSON(), nullable=True),
        sa.Column("request_id", sa.String(length=64), nullable=True),
        sa.Column("correlation_id", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.ForeignKeyConstraint(["content_id"], ["posts.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["actor_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_editorial_activity_logs_content_id", "editorial_activity_logs", ["content_id"], unique=False)
    op.create_index("ix_editorial_activity_logs_actor_id", "editorial_activity_logs", ["actor_id"], unique=False)
    op.create_index("ix_editorial_activity_logs_action", "editorial_activity_logs", ["action"], unique=False)
    op.create_index(
        "ix_editorial_activity_logs_correlation_id",
        "editorial_activity_logs",
        ["correlation_id"],
        unique=False,
    )
    op.create_index("ix_editorial_activity_logs_created_at", "editorial_activity_logs", ["created_at"], unique=False)
    op.create_index(
        "ix_editorial_activity_content_created",
        "editorial_activity_logs",
        ["content_id", "created_at"],
        unique=False,
    )

    op.create_table(
        "workflow_events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("event_type", sa.String(length=64), nullable=False),
        sa.Column("content_id", sa.Integer(), nullable=False),
        sa.Column("actor_id", sa.Integer(), nullable=True),
        sa.Column("payload_json", sa.JSON(), nullable=False),
        sa.Column("status", sa.Enum(*EVENT_STATUSES, name="workflow_event_status"), nullable=False),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("dispatched_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["content_id"], ["posts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["actor_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workflow_events_event_type", "workflow_events", ["event_type"], unique=False)
    op.create_index("ix_workflow_events_content_id", "workflow_events", ["content_id"], unique=False)
    op.create_index("ix_workflow_events_created_at", "workflow_events", ["created_at"], unique=False)
    op.create_index("ix_workflow_events_status_created", "workflow_events", ["status", "created_at"], unique=False)

    op.create_table(
        "user_notifications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=True),
        sa.Column("kind", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("link", sa.String(length=500), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["event_id"], ["workflow_events.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_notifications_user_id", "user_notifications", ["user_id"], unique=False)
    op.create_index(
        "ix_user_notifications_user_read",
        "user_notifications",
        ["user_id", "is_read", "created_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_table("user_notifications")
    op.drop_table("workflow_events")
    op.drop_table("editorial_activity_logs")
    op.drop_table("editorial_feedback")
    op.drop_table("editorial_reviews")
    op.drop_table("posts")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    for enum_name in (
        "workflow_event_status",
        "activity_action",
        "feedback_type",
        "review_priority",
        "review_status",
        "content_status",
        "content_category",
        "user_role",
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
