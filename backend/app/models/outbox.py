"""
AfriVerse Editorial Desk - Workflow Event Outbox
================================================
Outbound notification events, written in the same transaction as the
state change that produced them and delivered later by a worker.
"""

import enum

from sqlalchemy import JSON, Column, DateTime, Enum, ForeignKey, Index, Integer, String, Text, func

from app.core.database import Base


class EventStatus(str, enum.Enum):
    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


class WorkflowEventType(str, enum.Enum):
    SUBMITTED = "content.submitted"
    RESUBMITTED = "content.resubmitted"
    APPROVED = "content.approved"
    CHANGES_REQUESTED = "content.changes_requested"
    REJECTED = "content.rejected"
    PUBLISHED = "content.published"


class WorkflowEvent(Base):
    __tablename__ = "workflow_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_type = Column(String(64), nullable=False, index=True)
    content_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    actor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    payload_json = Column(JSON, nullable=False, default=dict)
    status = Column(Enum(EventStatus, name="workflow_event_status"), nullable=False, default=EventStatus.PENDING)
    attempts = Column(Integer, nullable=False, default=0)
    last_error = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    dispatched_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("ix_workflow_events_status_created", "status", "created_at"),)

    def __repr__(self):
        return f"<WorkflowEvent(id={self.id}, type='{self.event_type}', status={self.status})>"
