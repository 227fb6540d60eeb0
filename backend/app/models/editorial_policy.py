"""
AfriVerse Editorial Desk - Editorial Policy Models
==================================================
Per-category publishing rules and editor desk assignments.
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    UniqueConstraint,
    func,
)

from app.core.database import Base
from app.models.content import ContentCategory


class PublishingRule(Base):
    """Submission requirements for one category, layered on the desk-wide checks."""
    __tablename__ = "publishing_rules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    category = Column(Enum(ContentCategory, name="content_category"), nullable=False, unique=True)
    min_word_count = Column(Integer, nullable=False, default=300)
    max_word_count = Column(Integer, nullable=True)
    requires_meta_description = Column(Boolean, nullable=False, default=True)
    required_tags = Column(Integer, nullable=False, default=2)
    # Submissions by a SENIOR_WRITER owner skip review and land in APPROVED.
    auto_approve_trusted = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __mapper_args__ = {"eager_defaults": True}

    def __repr__(self):
        return f"<PublishingRule(category={self.category}, min_words={self.min_word_count})>"


class EditorialAssignment(Base):
    """Category an EDITOR covers, with the decisions they may take there."""
    __tablename__ = "editorial_assignments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category = Column(Enum(ContentCategory, name="content_category"), nullable=False)
    can_approve = Column(Boolean, nullable=False, default=False)
    can_publish = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (UniqueConstraint("user_id", "category", name="uq_editorial_assignments_user_category"),)
