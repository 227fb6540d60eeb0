from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from app.api.routes.auth import get_current_user
from app.core.config import get_settings
from app.core.database import get_db
from app.domain.errors import TransitionConflict
from app.main import app
from app.models import User, UserNotification, UserRole
from app.repositories.event_repository import event_repository
from app.services.scheduled_publisher import SweepReport, scheduled_publisher
from app.services.workflow_service import workflow_service


def _user(role: UserRole) -> User:
    return User(id=5, email="desk@afriverse.news", name="Desk", hashed_password="x", role=role, is_active=True)


@pytest.fixture
def client(db):
    async def _db():
        yield db

    app.dependency_overrides[get_db] = _db
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_missing_token_returns_401_envelope(client) -> None:
    response = client.get("/api/v1/auth/me")
    body = response.json()
    assert response.status_code == 401
    assert body["ok"] is False
    assert body["error"]["code"] == "unauthenticated"
    assert response.headers["x-request-id"]


def test_writer_cannot_reach_editor_routes(client) -> None:
    app.dependency_overrides[get_current_user] = lambda: _user(UserRole.SENIOR_WRITER)
    response = client.post("/api/v1/workflow/3/claim")
    assert response.status_code == 403
    assert response.json()["error"]["details"]["required_role"] == "EDITOR"


def test_lost_claim_race_returns_409(client, monkeypatch) -> None:
    async def losing_claim(db, *, actor, content_id):
        raise TransitionConflict(
            expected="PENDING_REVIEW", current="IN_REVIEW", target="IN_REVIEW", entity=f"content:{content_id}"
        )

    app.dependency_overrides[get_current_user] = lambda: _user(UserRole.EDITOR)
    monkeypatch.setattr(workflow_service, "claim", losing_claim)

    response = client.post("/api/v1/workflow/3/claim")

    assert response.status_code == 409
    assert response.json()["error"]["details"]["entity"] == "content:3"


def test_cron_rejects_bad_secret(client, monkeypatch) -> None:
    monkeypatch.setattr(get_settings(), "cron_secret", "s3cret-token")
    response = client.post("/api/v1/cron/publish-scheduled", headers={"Authorization": "Bearer wrong"})
    assert response.status_code == 401


def test_cron_runs_sweep_with_valid_secret(client, monkeypatch) -> None:
    async def fake_sweep(now=None):
        return SweepReport(published_count=2, error_count=0, published=[{"id": 1}, {"id": 2}])

    monkeypatch.setattr(get_settings(), "cron_secret", "s3cret-token")
    monkeypatch.setattr(scheduled_publisher, "run_sweep", fake_sweep)

    response = client.get("/api/v1/cron/publish-scheduled", headers={"Authorization": "Bearer s3cret-token"})
    body = response.json()

    assert response.status_code == 200
    assert body["data"]["published_count"] == 2
    assert body["data"]["message"] == "Published 2 scheduled post(s)"


def test_notifications_list_for_current_user(client, monkeypatch) -> None:
    calls = []

    async def fake_list(db, user_id, *, unread_only, limit):
        calls.append((user_id, unread_only, limit))
        return [
            UserNotification(
                id=11,
                user_id=user_id,
                kind="content.approved",
                title="Article approved",
                message="Lagos fintech startups raise record funding was approved",
                link="/content/3",
                is_read=False,
                created_at=datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc),
            )
        ]

    app.dependency_overrides[get_current_user] = lambda: _user(UserRole.AUTHOR)
    monkeypatch.setattr(event_repository, "list_notifications", fake_list)

    response = client.get("/api/v1/notifications", params={"unread_only": "true", "limit": 5})
    body = response.json()

    assert response.status_code == 200
    assert body["ok"] is True
    assert calls == [(5, True, 5)]
    assert body["data"] == [
        {
            "id": 11,
            "kind": "content.approved",
            "title": "Article approved",
            "message": "Lagos fintech startups raise record funding was approved",
            "link": "/content/3",
            "is_read": False,
            "created_at": "2026-10-19T09:30:00+00:00",
        }
    ]


def test_mark_notification_read(client, db, monkeypatch) -> None:
    async def fake_mark_read(db, *, notification_id, user_id):
        return notification_id == 11 and user_id == 5

    app.dependency_overrides[get_current_user] = lambda: _user(UserRole.AUTHOR)
    monkeypatch.setattr(event_repository, "mark_read", fake_mark_read)

    response = client.post("/api/v1/notifications/11/read")
    assert response.status_code == 200
    assert response.json()["data"] == {"id": 11, "is_read": True}
    assert db.commits == 1

    missing = client.post("/api/v1/notifications/12/read")
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "not_found"
    assert db.commits == 1


def test_publishing_rules_are_super_admin_writes(client) -> None:
    app.dependency_overrides[get_current_user] = lambda: _user(UserRole.ADMIN)
    response = client.put("/api/v1/editorial/rules/business", json={"min_word_count": 500})
    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Only a super admin can modify publishing rules"

    app.dependency_overrides[get_current_user] = lambda: _user(UserRole.SUPER_ADMIN)
    invalid = client.put("/api/v1/editorial/rules/business", json={"required_tags": -1})
    assert invalid.status_code == 422
