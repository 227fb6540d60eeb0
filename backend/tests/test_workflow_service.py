from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.domain.errors import (
    Forbidden,
    InvalidStateTransition,
    NotFound,
    TransitionConflict,
    Unauthenticated,
    ValidationFailed,
)
from app.models import (
    ActivityAction,
    ContentStatus,
    FeedbackType,
    ReviewPriority,
    ReviewStatus,
    UserRole,
)
from app.services.workflow_service import validate_for_submission


@pytest.mark.asyncio
async def test_full_editorial_round_trip(workflow, repo, outbox, db, newsroom) -> None:
    writer = newsroom.user(UserRole.AUTHOR)
    editor = newsroom.user(UserRole.EDITOR)
    item = newsroom.item(writer, title="Lagos tech week draws crowds!")
    assert len(item.title) == 29

    await workflow.submit_for_review(db, actor=writer, content_id=item.id, notes="ready")
    assert item.status == ContentStatus.PENDING_REVIEW
    assert repo.reviews[item.id].status == ReviewStatus.PENDING

    await workflow.claim(db, actor=editor, content_id=item.id)
    assert item.status == ContentStatus.IN_REVIEW
    assert repo.reviews[item.id].reviewer_id == editor.id

    await workflow.review(db, actor=editor, content_id=item.id, action="request_changes", feedback="fix lede")
    assert item.status == ContentStatus.CHANGES_REQUESTED
    revision_request = repo.feedback[-1]
    assert revision_request.type == FeedbackType.REVISION_REQUEST
    assert revision_request.is_internal is False

    await workflow.resubmit(db, actor=writer, content_id=item.id, response_note="fixed lede")
    assert item.status == ContentStatus.PENDING_REVIEW
    review = repo.reviews[item.id]
    assert review.status == ReviewStatus.REVISION_SUBMITTED
    assert review.notes.startswith("Resubmission note: fixed lede")
    assert repo.feedback[-1].type == FeedbackType.RESPONSE

    await workflow.review(db, actor=editor, content_id=item.id, action="approve")
    assert item.status == ContentStatus.APPROVED

    published = await workflow.publish(db, actor=editor, content_id=item.id, action="publish")
    assert published.status == ContentStatus.PUBLISHED
    assert published.published_at is not None
    assert repo.reviews[item.id].status == ReviewStatus.PUBLISHED

    assert outbox.types() == [
        "content.submitted",
        "content.changes_requested",
        "content.resubmitted",
        "content.approved",
        "content.published",
    ]
    assert outbox.enqueued == [event.id for event in outbox.events]
    assert [entry.action for entry in repo.activity] == [
        ActivityAction.SUBMITTED_FOR_REVIEW,
        ActivityAction.CLAIMED,
        ActivityAction.CHANGES_REQUESTED,
        ActivityAction.REVISION_SUBMITTED,
        ActivityAction.APPROVED,
        ActivityAction.PUBLISHED,
    ]
    assert db.rollbacks == 0


@pytest.mark.asyncio
async def test_submit_reports_every_failing_check(workflow, db, newsroom, outbox) -> None:
    writer = newsroom.user(UserRole.AUTHOR)
    item = newsroom.item(writer, title="Short", body="only a few words", excerpt=None, category=None)

    with pytest.raises(ValidationFailed) as exc_info:
        await workflow.submit_for_review(db, actor=writer, content_id=item.id)

    errors = exc_info.value.errors
    assert len(errors) == 4
    assert any("Title" in error for error in errors)
    assert any("(current: 4)" in error for error in errors)
    assert item.status == ContentStatus.DRAFT
    assert outbox.events == []


def test_word_count_ignores_markup(newsroom) -> None:
    writer = newsroom.user()
    body = "<p>" + " ".join(["<b>word</b>"] * 300) + "</p>"
    item = newsroom.item(writer, body=body)
    assert validate_for_submission(item) == []


@pytest.mark.asyncio
async def test_submit_requires_authentication(workflow, db, newsroom) -> None:
    item = newsroom.item(newsroom.user())
    with pytest.raises(Unauthenticated):
        await workflow.submit_for_review(db, actor=None, content_id=item.id)


@pytest.mark.asyncio
async def test_submit_by_stranger_is_forbidden(workflow, db, newsroom) -> None:
    item = newsroom.item(newsroom.user())
    stranger = newsroom.user(UserRole.SENIOR_WRITER)
    with pytest.raises(Forbidden):
        await workflow.submit_for_review(db, actor=stranger, content_id=item.id)


@pytest.mark.asyncio
async def test_submit_missing_content_is_not_found(workflow, db, newsroom) -> None:
    with pytest.raises(NotFound):
        await workflow.submit_for_review(db, actor=newsroom.user(), content_id=404)


@pytest.mark.asyncio
async def test_second_claim_is_rejected(workflow, repo, db, newsroom) -> None:
    writer = newsroom.user()
    first, second = newsroom.user(UserRole.EDITOR), newsroom.user(UserRole.EDITOR)
    item = newsroom.item(writer)
    await workflow.submit_for_review(db, actor=writer, content_id=item.id)

    await workflow.claim(db, actor=first, content_id=item.id)
    with pytest.raises(InvalidStateTransition):
        await workflow.claim(db, actor=second, content_id=item.id)

    assert repo.reviews[item.id].reviewer_id == first.id


@pytest.mark.asyncio
async def test_claim_losing_race_returns_conflict_and_rolls_back(workflow, repo, db, newsroom) -> None:
    writer = newsroom.user()
    editor = newsroom.user(UserRole.EDITOR)
    item = newsroom.item(writer)
    await workflow.submit_for_review(db, actor=writer, content_id=item.id)
    activity_before = len(repo.activity)

    repo.race_to = ContentStatus.IN_REVIEW
    with pytest.raises(TransitionConflict) as exc_info:
        await workflow.claim(db, actor=editor, content_id=item.id)

    assert exc_info.value.status_code == 409
    assert exc_info.value.details["actual_current_state"] == "IN_REVIEW"
    assert exc_info.value.details["expected_current_state"] == "PENDING_REVIEW"
    assert repo.reviews[item.id].reviewer_id is None
    assert len(repo.activity) == activity_before
    assert db.rollbacks == 1


@pytest.mark.asyncio
async def test_writers_cannot_claim(workflow, db, newsroom) -> None:
    writer = newsroom.user(UserRole.SENIOR_WRITER)
    item = newsroom.item(writer)
    await workflow.submit_for_review(db, actor=writer, content_id=item.id)
    with pytest.raises(Forbidden):
        await workflow.claim(db, actor=writer, content_id=item.id)


@pytest.mark.asyncio
async def test_request_changes_and_reject_need_feedback(workflow, db, newsroom) -> None:
    writer, editor = newsroom.user(), newsroom.user(UserRole.EDITOR)
    item = newsroom.item(writer)
    await workflow.submit_for_review(db, actor=writer, content_id=item.id)

    for action in ("request_changes", "reject"):
        with pytest.raises(ValidationFailed):
            await workflow.review(db, actor=editor, content_id=item.id, action=action, feedback="  ")
    assert item.status == ContentStatus.PENDING_REVIEW


@pytest.mark.asyncio
async def test_editor_can_decide_without_claiming(workflow, repo, db, newsroom, outbox) -> None:
    writer, editor = newsroom.user(), newsroom.user(UserRole.EDITOR)
    item = newsroom.item(writer)
    await workflow.submit_for_review(db, actor=writer, content_id=item.id)

    result = await workflow.review(
        db, actor=editor, content_id=item.id, action="reject", feedback="Off-topic for the desk"
    )

    assert result["status"] == "REJECTED"
    assert repo.reviews[item.id].reviewer_id == editor.id
    assert repo.feedback[-1].type == FeedbackType.REJECTION
    assert outbox.types()[-1] == "content.rejected"


@pytest.mark.asyncio
async def test_author_response_moves_item_back_to_queue(workflow, repo, db, newsroom, outbox) -> None:
    writer, editor = newsroom.user(), newsroom.user(UserRole.EDITOR)
    item = newsroom.item(writer)
    await workflow.submit_for_review(db, actor=writer, content_id=item.id)
    await workflow.review(db, actor=editor, content_id=item.id, action="request_changes", feedback="Add sources")

    entry = await workflow.add_feedback(db, actor=writer, content_id=item.id, message="Sources added")

    assert entry.type == FeedbackType.RESPONSE
    assert item.status == ContentStatus.PENDING_REVIEW
    assert repo.reviews[item.id].status == ReviewStatus.REVISION_SUBMITTED
    assert outbox.types()[-1] == "content.resubmitted"
    assert outbox.events[-1].payload["reviewer_id"] == editor.id


@pytest.mark.asyncio
async def test_only_author_can_resubmit(workflow, db, newsroom) -> None:
    writer, editor = newsroom.user(), newsroom.user(UserRole.EDITOR)
    item = newsroom.item(writer, status=ContentStatus.CHANGES_REQUESTED)
    with pytest.raises(Forbidden):
        await workflow.resubmit(db, actor=editor, content_id=item.id)


@pytest.mark.asyncio
async def test_author_publish_requires_approval_or_seniority(workflow, db, newsroom) -> None:
    author = newsroom.user(UserRole.AUTHOR)
    senior = newsroom.user(UserRole.SENIOR_WRITER)

    pending = newsroom.item(author, status=ContentStatus.PENDING_REVIEW)
    with pytest.raises(Forbidden):
        await workflow.publish(db, actor=author, content_id=pending.id)

    approved = newsroom.item(author, status=ContentStatus.APPROVED)
    result = await workflow.publish(db, actor=author, content_id=approved.id)
    assert result.status == ContentStatus.PUBLISHED

    senior_draft = newsroom.item(senior, status=ContentStatus.DRAFT)
    with pytest.raises(InvalidStateTransition):
        await workflow.publish(db, actor=senior, content_id=senior_draft.id)


@pytest.mark.asyncio
async def test_admin_override_publishes_unapproved_content(workflow, repo, db, newsroom) -> None:
    writer = newsroom.user()
    editor = newsroom.user(UserRole.EDITOR)
    admin = newsroom.user(UserRole.ADMIN)
    item = newsroom.item(writer, status=ContentStatus.PENDING_REVIEW)

    with pytest.raises(Forbidden):
        await workflow.publish(db, actor=editor, content_id=item.id, override=True)

    result = await workflow.publish(db, actor=admin, content_id=item.id, override=True)
    assert result.status == ContentStatus.PUBLISHED
    assert repo.activity[-1].metadata_json["override"] is True


@pytest.mark.asyncio
async def test_unpublish_is_editor_only_and_returns_to_approved(workflow, repo, db, newsroom) -> None:
    writer, editor = newsroom.user(UserRole.SENIOR_WRITER), newsroom.user(UserRole.EDITOR)
    item = newsroom.item(writer, status=ContentStatus.APPROVED)
    await workflow.publish(db, actor=editor, content_id=item.id)

    with pytest.raises(Forbidden):
        await workflow.publish(db, actor=writer, content_id=item.id, action="unpublish")

    result = await workflow.publish(db, actor=editor, content_id=item.id, action="unpublish")
    assert result.status == ContentStatus.APPROVED
    assert result.published_at is None
    assert repo.reviews[item.id].status == ReviewStatus.APPROVED
    assert repo.activity[-1].action == ActivityAction.UNPUBLISHED


@pytest.mark.asyncio
async def test_unpublish_of_a_draft_is_rejected(workflow, db, newsroom) -> None:
    editor = newsroom.user(UserRole.EDITOR)
    item = newsroom.item(newsroom.user())
    with pytest.raises(InvalidStateTransition):
        await workflow.publish(db, actor=editor, content_id=item.id, action="unpublish")


@pytest.mark.asyncio
async def test_schedule_validates_time(workflow, db, newsroom) -> None:
    editor = newsroom.user(UserRole.EDITOR)
    item = newsroom.item(newsroom.user(), status=ContentStatus.APPROVED)

    with pytest.raises(ValidationFailed):
        await workflow.publish(db, actor=editor, content_id=item.id, action="schedule")
    with pytest.raises(ValidationFailed):
        await workflow.publish(
            db,
            actor=editor,
            content_id=item.id,
            action="schedule",
            scheduled_at=datetime.now(timezone.utc) - timedelta(minutes=1),
        )
    with pytest.raises(ValidationFailed):
        await workflow.publish(
            db, actor=editor, content_id=item.id, action="schedule", scheduled_at=datetime(2030, 1, 1)
        )

    when = datetime.now(timezone.utc) + timedelta(hours=2)
    result = await workflow.publish(db, actor=editor, content_id=item.id, action="schedule", scheduled_at=when)
    assert result.status == ContentStatus.SCHEDULED
    assert result.scheduled_at == when


@pytest.mark.asyncio
async def test_release_scheduled_uses_system_actor(workflow, repo, db, newsroom, outbox) -> None:
    writer = newsroom.user()
    due = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)
    item = newsroom.item(writer, status=ContentStatus.SCHEDULED, scheduled_at=due)

    await workflow.release_scheduled(db, content_id=item.id, now=due + timedelta(minutes=1))

    assert item.status == ContentStatus.PUBLISHED
    assert item.scheduled_at is None
    entry = repo.activity[-1]
    assert entry.action == ActivityAction.AUTO_PUBLISHED
    assert entry.actor_id is None
    assert entry.actor_name == "System"
    assert outbox.events[-1].actor_id is None


@pytest.mark.asyncio
async def test_release_scheduled_refuses_items_not_yet_due(workflow, db, newsroom) -> None:
    due = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)
    item = newsroom.item(newsroom.user(), status=ContentStatus.SCHEDULED, scheduled_at=due)
    with pytest.raises(InvalidStateTransition):
        await workflow.release_scheduled(db, content_id=item.id, now=due - timedelta(minutes=1))
    assert item.status == ContentStatus.SCHEDULED


@pytest.mark.asyncio
async def test_archive_from_published(workflow, db, newsroom) -> None:
    editor = newsroom.user(UserRole.EDITOR)
    item = newsroom.item(newsroom.user(), status=ContentStatus.PUBLISHED)
    result = await workflow.archive(db, actor=editor, content_id=item.id)
    assert result.status == ContentStatus.ARCHIVED

    with pytest.raises(InvalidStateTransition):
        await workflow.archive(db, actor=editor, content_id=item.id)


@pytest.mark.asyncio
async def test_priority_and_deadline_updates(workflow, repo, db, newsroom) -> None:
    writer, editor = newsroom.user(), newsroom.user(UserRole.EDITOR)
    item = newsroom.item(writer)
    await workflow.submit_for_review(db, actor=writer, content_id=item.id)

    result = await workflow.review(db, actor=editor, content_id=item.id, action="set_priority", priority="urgent")
    assert result["priority"] == "URGENT"
    assert repo.reviews[item.id].priority == ReviewPriority.URGENT

    with pytest.raises(ValidationFailed):
        await workflow.review(db, actor=editor, content_id=item.id, action="set_priority", priority="someday")

    deadline = datetime(2026, 10, 21, 17, 0, tzinfo=timezone.utc)
    await workflow.review(db, actor=editor, content_id=item.id, action="set_deadline", deadline=deadline)
    assert repo.reviews[item.id].deadline == deadline
    assert item.status == ContentStatus.PENDING_REVIEW


@pytest.mark.asyncio
async def test_review_queue_defaults_to_open_states(workflow, db, newsroom) -> None:
    writer, editor = newsroom.user(), newsroom.user(UserRole.EDITOR)
    newsroom.item(writer, status=ContentStatus.PENDING_REVIEW)
    newsroom.item(writer, status=ContentStatus.IN_REVIEW)
    newsroom.item(writer, status=ContentStatus.PUBLISHED)

    result = await workflow.review_queue(db, actor=editor)
    assert result["total"] == 2
    assert result["counts"]["PUBLISHED"] == 1

    everything = await workflow.review_queue(db, actor=editor, status="all")
    assert everything["total"] == 3

    with pytest.raises(Forbidden):
        await workflow.review_queue(db, actor=writer)
    with pytest.raises(ValidationFailed):
        await workflow.review_queue(db, actor=editor, status="LIMBO")


@pytest.mark.asyncio
async def test_claim_creates_missing_review(workflow, repo, db, newsroom) -> None:
    editor = newsroom.user(UserRole.EDITOR)
    item = newsroom.item(newsroom.user(), status=ContentStatus.PENDING_REVIEW)
    assert item.id not in repo.reviews

    result = await workflow.claim(db, actor=editor, content_id=item.id)

    assert result == {"success": True, "content_id": item.id, "reviewer_id": editor.id, "status": "IN_REVIEW"}
    review = repo.reviews[item.id]
    assert review.status == ReviewStatus.IN_REVIEW
    assert review.claimed_at is not None
