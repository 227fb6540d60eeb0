from __future__ import annotations

import enum
from dataclasses import dataclass

from app.domain.errors import InvalidStateTransition
from app.models.content import ContentStatus


class WorkflowAction(str, enum.Enum):
    SUBMIT = "SUBMIT"
    AUTO_APPROVE = "AUTO_APPROVE"
    CLAIM = "CLAIM"
    APPROVE = "APPROVE"
    REQUEST_CHANGES = "REQUEST_CHANGES"
    REJECT = "REJECT"
    RESUBMIT = "RESUBMIT"
    AUTHOR_RESPONSE = "AUTHOR_RESPONSE"
    PUBLISH = "PUBLISH"
    OVERRIDE_PUBLISH = "OVERRIDE_PUBLISH"
    SCHEDULE = "SCHEDULE"
    RELEASE_SCHEDULED = "RELEASE_SCHEDULED"
    UNPUBLISH = "UNPUBLISH"
    ARCHIVE = "ARCHIVE"


S = ContentStatus
A = WorkflowAction

# (from_state, action) -> to_state. Missing pairs are invalid.
TRANSITIONS: dict[tuple[ContentStatus, WorkflowAction], ContentStatus] = {
    (S.DRAFT, A.SUBMIT): S.PENDING_REVIEW,
    (S.CHANGES_REQUESTED, A.SUBMIT): S.PENDING_REVIEW,
    (S.DRAFT, A.AUTO_APPROVE): S.APPROVED,
    (S.CHANGES_REQUESTED, A.AUTO_APPROVE): S.APPROVED,
    (S.PENDING_REVIEW, A.CLAIM): S.IN_REVIEW,
    (S.IN_REVIEW, A.APPROVE): S.APPROVED,
    (S.PENDING_REVIEW, A.APPROVE): S.APPROVED,
    (S.IN_REVIEW, A.REQUEST_CHANGES): S.CHANGES_REQUESTED,
    (S.PENDING_REVIEW, A.REQUEST_CHANGES): S.CHANGES_REQUESTED,
    (S.IN_REVIEW, A.REJECT): S.REJECTED,
    (S.PENDING_REVIEW, A.REJECT): S.REJECTED,
    (S.CHANGES_REQUESTED, A.RESUBMIT): S.PENDING_REVIEW,
    (S.CHANGES_REQUESTED, A.AUTHOR_RESPONSE): S.PENDING_REVIEW,
    (S.APPROVED, A.PUBLISH): S.PUBLISHED,
    (S.PENDING_REVIEW, A.OVERRIDE_PUBLISH): S.PUBLISHED,
    (S.IN_REVIEW, A.OVERRIDE_PUBLISH): S.PUBLISHED,
    (S.CHANGES_REQUESTED, A.OVERRIDE_PUBLISH): S.PUBLISHED,
    (S.APPROVED, A.OVERRIDE_PUBLISH): S.PUBLISHED,
    (S.SCHEDULED, A.OVERRIDE_PUBLISH): S.PUBLISHED,
    (S.APPROVED, A.SCHEDULE): S.SCHEDULED,
    (S.SCHEDULED, A.SCHEDULE): S.SCHEDULED,
    (S.SCHEDULED, A.RELEASE_SCHEDULED): S.PUBLISHED,
    (S.PUBLISHED, A.UNPUBLISH): S.APPROVED,
    (S.SCHEDULED, A.UNPUBLISH): S.APPROVED,
    (S.DRAFT, A.ARCHIVE): S.ARCHIVED,
    (S.REJECTED, A.ARCHIVE): S.ARCHIVED,
    (S.PUBLISHED, A.ARCHIVE): S.ARCHIVED,
}

# Statuses the owner may still edit.
OWNER_EDITABLE: frozenset[ContentStatus] = frozenset({S.DRAFT, S.CHANGES_REQUESTED})
EDITOR_EDITABLE: frozenset[ContentStatus] = frozenset(
    {S.DRAFT, S.PENDING_REVIEW, S.IN_REVIEW, S.CHANGES_REQUESTED, S.APPROVED}
)


@dataclass(slots=True)
class TransitionValidationResult:
    valid: bool
    from_state: ContentStatus
    action: WorkflowAction
    to_state: ContentStatus | None
    allowed_actions: list[WorkflowAction]


def allowed_actions(from_state: ContentStatus) -> list[WorkflowAction]:
    return sorted({action for (state, action) in TRANSITIONS if state == from_state}, key=lambda item: item.value)


def next_state(from_state: ContentStatus, action: WorkflowAction) -> ContentStatus | None:
    return TRANSITIONS.get((ContentStatus(from_state), WorkflowAction(action)))


def validate_transition(from_state: ContentStatus, action: WorkflowAction) -> TransitionValidationResult:
    target = next_state(from_state, action)
    return TransitionValidationResult(
        valid=target is not None,
        from_state=ContentStatus(from_state),
        action=WorkflowAction(action),
        to_state=target,
        allowed_actions=allowed_actions(ContentStatus(from_state)),
    )


def require_transition(from_state: ContentStatus, action: WorkflowAction) -> ContentStatus:
    """Return the target state or raise InvalidStateTransition."""
    result = validate_transition(from_state, action)
    if result.to_state is None:
        raise InvalidStateTransition(
            current=result.from_state.value,
            action=result.action.value,
            allowed_actions=[item.value for item in result.allowed_actions],
        )
    return result.to_state


def is_terminal(state: ContentStatus) -> bool:
    return not allowed_actions(state)
