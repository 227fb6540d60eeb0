from __future__ import annotations

import pytest

from app.domain.errors import Forbidden, InvalidStateTransition, ValidationFailed
from app.models import ActivityAction, ContentCategory, ContentStatus, UserRole
from app.services.content_service import ContentService


@pytest.fixture
def content(repo) -> ContentService:
    return ContentService(repository=repo)


@pytest.mark.asyncio
async def test_create_draft_derives_unique_slugs(content, db, newsroom) -> None:
    writer = newsroom.user()

    first = await content.create_draft(db, actor=writer, title="Lagos Tech Week 2026!")
    second = await content.create_draft(db, actor=writer, title="Lagos Tech Week 2026")
    third = await content.create_draft(db, actor=writer, title="lagos tech week 2026")

    assert [first.slug, second.slug, third.slug] == [
        "lagos-tech-week-2026",
        "lagos-tech-week-2026-1",
        "lagos-tech-week-2026-2",
    ]
    assert first.status == ContentStatus.DRAFT
    assert first.author_id == writer.id


@pytest.mark.asyncio
async def test_create_draft_normalizes_fields(content, repo, db, newsroom) -> None:
    writer = newsroom.user()
    item = await content.create_draft(
        db,
        actor=writer,
        title="  Afrobeats goes global  ",
        body="one two three",
        category="Culture",
        tags=["music", " music ", "", "lagos"],
    )
    assert item.title == "Afrobeats goes global"
    assert item.category == ContentCategory.CULTURE
    assert item.tags == ["music", "lagos"]
    assert item.word_count == 3
    assert repo.activity[-1].action == ActivityAction.CREATED


@pytest.mark.asyncio
async def test_create_draft_rejects_blank_title_and_unknown_category(content, db, newsroom) -> None:
    writer = newsroom.user()
    with pytest.raises(ValidationFailed):
        await content.create_draft(db, actor=writer, title="   ")
    with pytest.raises(ValidationFailed):
        await content.create_draft(db, actor=writer, title="Valid title", category="astrology")


@pytest.mark.asyncio
async def test_owner_cannot_edit_while_in_review(content, db, newsroom) -> None:
    writer = newsroom.user()
    item = newsroom.item(writer, status=ContentStatus.PENDING_REVIEW)

    with pytest.raises(InvalidStateTransition) as exc_info:
        await content.update_draft(db, actor=writer, content_id=item.id, fields={"title": "New title here"})
    assert exc_info.value.details["action"] == "EDIT"

    editor = newsroom.user(UserRole.EDITOR)
    updated = await content.update_draft(
        db, actor=editor, content_id=item.id, fields={"body": "a b c d", "title": "Desk-edited title"}
    )
    assert updated.word_count == 4
    assert updated.title == "Desk-edited title"


@pytest.mark.asyncio
async def test_strangers_cannot_read_drafts(content, db, newsroom) -> None:
    item = newsroom.item(newsroom.user())
    with pytest.raises(Forbidden):
        await content.get(db, actor=newsroom.user(UserRole.SENIOR_WRITER), content_id=item.id)


@pytest.mark.asyncio
async def test_delete_only_applies_to_drafts(content, repo, db, newsroom) -> None:
    writer = newsroom.user()
    submitted = newsroom.item(writer, status=ContentStatus.PENDING_REVIEW)
    with pytest.raises(InvalidStateTransition) as exc_info:
        await content.delete_draft(db, actor=writer, content_id=submitted.id)
    assert exc_info.value.details["action"] == "DELETE"
    assert submitted.id in repo.items

    draft = newsroom.item(writer)
    await content.delete_draft(db, actor=writer, content_id=draft.id)
    assert draft.id not in repo.items
    deleted = repo.activity[-1]
    assert deleted.action == ActivityAction.DELETED
    assert deleted.content_id == draft.id
    assert deleted.metadata_json["slug"] == draft.slug
