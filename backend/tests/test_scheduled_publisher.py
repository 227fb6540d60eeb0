from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from app.core.config import get_settings
from app.domain.errors import DependencyFailure
from app.models import ContentStatus
from app.services.scheduled_publisher import ScheduledPublisher

NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


class _FlakyWorkflow:
    def __init__(self, inner, failing: set[int]):
        self.inner = inner
        self.failing = failing

    async def release_scheduled(self, db, *, content_id, now):
        if content_id in self.failing:
            raise RuntimeError("database hiccup")
        return await self.inner.release_scheduled(db, content_id=content_id, now=now)


def _publisher(repo, workflow, session_factory) -> ScheduledPublisher:
    return ScheduledPublisher(session_factory=session_factory, workflow=workflow, repository=repo)


@pytest.mark.asyncio
async def test_sweep_publishes_due_items_and_isolates_failures(workflow, repo, newsroom, session_factory) -> None:
    writer = newsroom.user()
    due = [
        newsroom.item(writer, status=ContentStatus.SCHEDULED, scheduled_at=NOW - timedelta(minutes=m))
        for m in (30, 20, 10)
    ]
    later = newsroom.item(writer, status=ContentStatus.SCHEDULED, scheduled_at=NOW + timedelta(hours=1))
    approved = newsroom.item(writer, status=ContentStatus.APPROVED)

    publisher = _publisher(repo, _FlakyWorkflow(workflow, failing={due[1].id}), session_factory)
    report = await publisher.run_sweep(now=NOW)

    assert report.published_count == 2
    assert report.error_count == 1
    assert [row["id"] for row in report.published] == [due[0].id, due[2].id]
    assert report.errors[0]["id"] == due[1].id
    assert report.errors[0]["error"] == "database hiccup"
    assert due[0].status == ContentStatus.PUBLISHED
    assert due[1].status == ContentStatus.SCHEDULED
    assert later.status == ContentStatus.SCHEDULED
    assert approved.status == ContentStatus.APPROVED
    assert report.to_dict()["timestamp"] == NOW.isoformat()


@pytest.mark.asyncio
async def test_sweep_with_nothing_due_reports_zero(workflow, repo, newsroom, session_factory) -> None:
    newsroom.item(newsroom.user(), status=ContentStatus.SCHEDULED, scheduled_at=NOW + timedelta(days=1))
    report = await _publisher(repo, workflow, session_factory).run_sweep(now=NOW)
    assert report.published_count == 0
    assert report.error_count == 0
    assert report.published == []


@pytest.mark.asyncio
async def test_sweep_query_timeout_is_a_dependency_failure(workflow, repo, monkeypatch, session_factory) -> None:
    async def slow_due(db, *, now, limit):
        await asyncio.sleep(1)
        return []

    monkeypatch.setattr(repo, "list_due_scheduled", slow_due)
    monkeypatch.setattr(get_settings(), "scheduled_publish_query_timeout_seconds", 0.01)

    with pytest.raises(DependencyFailure):
        await _publisher(repo, workflow, session_factory).run_sweep(now=NOW)
