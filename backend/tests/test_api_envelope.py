import json

from app.api.envelope import error_envelope, page_meta, success_envelope, workflow_error_envelope
from app.domain.errors import InvalidStateTransition, TransitionConflict, ValidationFailed


def _body(response) -> dict:
    return json.loads(response.body.decode("utf-8"))


def test_success_envelope_shape() -> None:
    response = success_envelope({"value": 1})
    body = _body(response)
    assert body["ok"] is True
    assert body["data"] == {"value": 1}
    assert body["error"] is None
    assert isinstance(body.get("meta"), dict)
    assert "timestamp" in body["meta"]


def test_error_envelope_shape() -> None:
    response = error_envelope(code="bad_request", message="Invalid", status_code=400, details={"field": "x"})
    body = _body(response)
    assert body["ok"] is False
    assert body["data"] is None
    assert body["error"]["code"] == "bad_request"
    assert body["error"]["message"] == "Invalid"


def test_page_meta_counts_pages() -> None:
    assert page_meta(total=41, page=2, limit=20)["pagination"]["pages"] == 3
    assert page_meta(total=0, page=1, limit=20)["pagination"]["pages"] == 0


def test_validation_failure_lists_every_error() -> None:
    exc = ValidationFailed(["Excerpt is required", "Category is required"])
    response = workflow_error_envelope(exc, path="/api/v1/workflow/1/submit")
    body = _body(response)
    assert response.status_code == 400
    assert body["error"]["code"] == "validation_failed"
    assert body["error"]["details"]["validation_errors"] == ["Excerpt is required", "Category is required"]
    assert body["meta"]["path"] == "/api/v1/workflow/1/submit"


def test_invalid_transition_maps_to_400() -> None:
    exc = InvalidStateTransition(current="PUBLISHED", action="CLAIM", allowed_actions=["UNPUBLISH", "ARCHIVE"])
    response = workflow_error_envelope(exc)
    body = _body(response)
    assert response.status_code == 400
    assert body["error"]["code"] == "invalid_state_transition"
    assert body["error"]["details"]["current_state"] == "PUBLISHED"


def test_transition_conflict_maps_to_409() -> None:
    exc = TransitionConflict(expected="PENDING_REVIEW", current="IN_REVIEW", target="IN_REVIEW", entity="content:9")
    response = workflow_error_envelope(exc)
    body = _body(response)
    assert response.status_code == 409
    assert body["error"]["code"] == "transition_conflict"
    assert body["error"]["details"]["actual_current_state"] == "IN_REVIEW"
