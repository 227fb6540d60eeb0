"""Workflow error hierarchy, mapped onto the API error envelope in app.main."""

from __future__ import annotations

from typing import Any


class WorkflowError(Exception):
    status_code = 400
    code = "workflow_error"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if code:
            self.code = code

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class Unauthenticated(WorkflowError):
    status_code = 401
    code = "unauthenticated"


class Forbidden(WorkflowError):
    status_code = 403
    code = "forbidden"


class ValidationFailed(WorkflowError):
    status_code = 400
    code = "validation_failed"

    def __init__(self, errors: list[str], message: str = "Content failed submission checks"):
        super().__init__(message, details={"validation_errors": list(errors)})
        self.errors = list(errors)


class InvalidStateTransition(WorkflowError):
    status_code = 400
    code = "invalid_state_transition"

    def __init__(self, *, current: str, action: str, allowed_actions: list[str] | None = None, message: str | None = None):
        super().__init__(
            message or f"Cannot {action.lower()} content in state {current}",
            details={
                "current_state": current,
                "action": action,
                "allowed_actions": list(allowed_actions or []),
            },
        )
        self.current = current
        self.action = action


class NotFound(WorkflowError):
    status_code = 404
    code = "not_found"


class TransitionConflict(WorkflowError):
    status_code = 409
    code = "transition_conflict"

    def __init__(self, *, expected: str, current: str | None, target: str, entity: str):
        super().__init__(
            "The content state changed before the transition. Reload and retry.",
            details={
                "entity": entity,
                "expected_current_state": expected,
                "actual_current_state": current,
                "target_state": target,
            },
        )
        self.current = current


class DependencyFailure(WorkflowError):
    """Outbound dependency error. Logged by the caller, never surfaced by a transition."""
    status_code = 502
    code = "dependency_failure"


class DuplicateEntity(WorkflowError):
    status_code = 409
    code = "duplicate_entity"
