"""add per-category publishing rules and editor desk assignments

Revision ID: 20261019_editorial_policy
Revises: 20261019_editorial_workflow_initial
Create Date: 2026-10-19 15:30:00
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "20261019_editorial_policy"
down_revision = "20261019_editorial_workflow_initial"
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Enum(ActivityAction) persists enum names; the label must exist before rows use it.
    op.execute("ALTER TYPE activity_action ADD VALUE IF NOT EXISTS 'AUTO_APPROVED'")

    op.add_column("posts", sa.Column("meta_description", sa.String(length=320), nullable=True))

    content_category = postgresql.ENUM(name="content_category", create_type=False)

    op.create_table(
        "publishing_rules",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("category", content_category, nullable=False),
        sa.Column("min_word_count", sa.Integer(), nullable=False, server_default="300"),
        sa.Column("max_word_count", sa.Integer(), nullable=True),
        sa.Column("requires_meta_description", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("required_tags", sa.Integer(), nullable=False, server_default="2"),
        sa.Column("auto_approve_trusted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.UniqueConstraint("category", name="uq_publishing_rules_category"),
    )

    op.create_table(
        "editorial_assignments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("category", content_category, nullable=False),
        sa.Column("can_approve", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("can_publish", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.UniqueConstraint("user_id", "category", name="uq_editorial_assignments_user_category"),
    )
    op.create_index("ix_editorial_assignments_user_id", "editorial_assignments", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_editorial_assignments_user_id", table_name="editorial_assignments")
    op.drop_table("editorial_assignments")
    op.drop_table("publishing_rules")
    op.drop_column("posts", "meta_description")
    # PostgreSQL cannot drop a single enum label; AUTO_APPROVED stays on activity_action.
