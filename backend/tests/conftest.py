from __future__ import annotations

import itertools
import os
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

os.environ.setdefault("AFRIVERSE_APP_SECRET_KEY", "test-secret-key-for-afriverse-desk-0123456789")
os.environ.setdefault("AFRIVERSE_POSTGRES_PASSWORD", "test-password")
os.environ.setdefault("AFRIVERSE_QUEUE_ENABLED", "false")
os.environ.setdefault("AFRIVERSE_NOTIFICATION_DISPATCH_ENABLED", "false")

from app.models import (  # noqa: E402
    ContentCategory,
    ContentItem,
    ContentStatus,
    EditorialAssignment,
    PublishingRule,
    User,
    UserRole,
)

LONG_BODY = " ".join(["word"] * 320)


class _Nested:
    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class SessionStub:
    """Stands in for AsyncSession; repositories are faked so only transaction calls land here."""

    def __init__(self):
        self.commits = 0
        self.rollbacks = 0
        self.closed = False

    def begin_nested(self):
        return _Nested()

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True
        return False


class FakeContentRepository:
    def __init__(self):
        self.items: dict[int, ContentItem] = {}
        self.reviews: dict[int, object] = {}
        self.feedback: list = []
        self.activity: list = []
        self.users: dict[int, User] = {}
        self._ids = itertools.count(1)
        self._clock = itertools.count(0)
        # Simulates a concurrent writer: the next compare-and-set finds this status instead.
        self.race_to: ContentStatus | None = None

    def _stamp(self) -> datetime:
        return datetime(2026, 10, 1, tzinfo=timezone.utc) + timedelta(seconds=next(self._clock))

    async def get_content(self, db, content_id):
        return self.items.get(content_id)

    async def get_status(self, db, content_id):
        item = self.items.get(content_id)
        return item.status if item else None

    async def slug_exists(self, db, slug, *, exclude_id=None):
        return any(item.slug == slug and item.id != exclude_id for item in self.items.values())

    async def add_content(self, db, item):
        item.id = item.id or next(self._ids)
        item.created_at = item.updated_at = self._stamp()
        self.items[item.id] = item
        return item

    async def delete_content(self, db, item):
        self.items.pop(item.id, None)
        self.reviews.pop(item.id, None)

    async def compare_and_set_status(self, db, *, content_id, expected, target, values=None):
        item = self.items.get(content_id)
        if item is None:
            return False
        if self.race_to is not None:
            item.status, self.race_to = self.race_to, None
            return False
        if item.status != expected:
            return False
        item.status = target
        for key, value in (values or {}).items():
            setattr(item, key, value)
        item.updated_at = self._stamp()
        return True

    async def list_by_author(self, db, author_id, *, limit=100):
        return [item for item in self.items.values() if item.author_id == author_id][:limit]

    async def list_due_scheduled(self, db, *, now, limit):
        due = [
            item
            for item in self.items.values()
            if item.status == ContentStatus.SCHEDULED and item.scheduled_at and item.scheduled_at <= now
        ]
        return sorted(due, key=lambda item: (item.scheduled_at, item.id))[:limit]

    async def list_queue(self, db, *, statuses, categories=None, offset=0, limit=20):
        matching = [
            item
            for item in self.items.values()
            if item.status in statuses and (categories is None or item.category in categories)
        ]
        page = matching[offset : offset + limit]
        return [(item, self.reviews.get(item.id)) for item in page], len(matching)

    async def status_counts(self, db, *, categories=None):
        counts: dict[str, int] = {}
        for item in self.items.values():
            if categories is not None and item.category not in categories:
                continue
            counts[item.status.value] = counts.get(item.status.value, 0) + 1
        return counts

    async def get_review(self, db, content_id):
        return self.reviews.get(content_id)

    async def add_review(self, db, review):
        if review.content_id in self.reviews:
            raise AssertionError(f"duplicate review for content {review.content_id}")
        review.id = next(self._ids)
        review.created_at = self._stamp()
        self.reviews[review.content_id] = review
        return review

    async def save(self, db, *objects):
        return None

    async def add_feedback(self, db, entry):
        entry.id = next(self._ids)
        entry.created_at = self._stamp()
        self.feedback.append(entry)
        return entry

    async def list_feedback(self, db, review_id, *, include_internal):
        rows = [
            entry
            for entry in self.feedback
            if entry.review_id == review_id and (include_internal or not entry.is_internal)
        ]
        return sorted(rows, key=lambda entry: (entry.created_at, entry.id), reverse=True)

    async def list_writer_notes(self, db, author_id, *, limit=50):
        by_review = {review.id: review for review in self.reviews.values()}
        notes = []
        for entry in reversed(self.feedback):
            review = by_review.get(entry.review_id)
            item = self.items.get(review.content_id) if review else None
            if item and item.author_id == author_id and not entry.is_internal and entry.author_id != author_id:
                notes.append((entry, item))
        return notes[:limit]

    async def add_activity(self, db, entry):
        entry.id = next(self._ids)
        entry.created_at = self._stamp()
        self.activity.append(entry)

    async def list_activity(self, db, content_id, *, limit=100):
        return [entry for entry in self.activity if entry.content_id == content_id][:limit]

    async def get_user(self, db, user_id):
        return self.users.get(user_id)

    async def list_editors(self, db, *, limit=None):
        from app.models import is_editor

        editors = sorted(
            (user for user in self.users.values() if is_editor(user) and user.is_active),
            key=lambda user: user.id,
        )
        return editors[:limit] if limit else editors


class FakePolicyRepository:
    def __init__(self):
        self.rules: dict[ContentCategory, PublishingRule] = {}
        self.assignments: list[EditorialAssignment] = []
        self._ids = itertools.count(1)

    async def get_rule(self, db, category):
        return self.rules.get(category)

    async def list_rules(self, db):
        return sorted(self.rules.values(), key=lambda rule: rule.category.value)

    async def get_assignment(self, db, user_id, category):
        return next(
            (a for a in self.assignments if a.user_id == user_id and a.category == category),
            None,
        )

    async def get_assignment_by_id(self, db, assignment_id):
        return next((a for a in self.assignments if a.id == assignment_id), None)

    async def list_assignments(self, db, *, user_id=None):
        return [a for a in self.assignments if user_id is None or a.user_id == user_id]

    async def assigned_categories(self, db, user_id):
        return [a.category for a in self.assignments if a.user_id == user_id]

    async def save(self, db, *objects):
        for obj in objects:
            if isinstance(obj, PublishingRule):
                self.rules[obj.category] = obj
            elif obj not in self.assignments:
                obj.id = next(self._ids)
                self.assignments.append(obj)

    async def delete(self, db, obj):
        if isinstance(obj, PublishingRule):
            self.rules.pop(obj.category, None)
        else:
            self.assignments.remove(obj)


class FakeOutbox:
    def __init__(self):
        self.events: list[SimpleNamespace] = []
        self.enqueued: list[int] = []

    async def emit(self, db, *, event_type, item, actor, payload=None):
        event = SimpleNamespace(
            id=len(self.events) + 1,
            event_type=event_type,
            content_id=item.id,
            actor_id=actor.id if actor else None,
            payload=payload or {},
        )
        self.events.append(event)
        return event

    async def enqueue(self, event_ids):
        self.enqueued.extend(event_ids)
        return len(event_ids)

    def types(self) -> list[str]:
        return [event.event_type.value for event in self.events]


class Newsroom:
    """
    Builds users, content items and editorial policy directly into the fakes.
    EDITORs get the business desk with approve and publish rights unless `desk` says otherwise.
    """

    def __init__(self, repo: FakeContentRepository, policies: FakePolicyRepository):
        self.repo = repo
        self.policies = policies
        self._user_ids = itertools.count(1)

    def user(
        self,
        role: UserRole = UserRole.AUTHOR,
        *,
        name: str | None = None,
        active: bool = True,
        desk: tuple[ContentCategory, ...] = (ContentCategory.BUSINESS,),
    ) -> User:
        user_id = next(self._user_ids)
        user = User(
            id=user_id,
            email=f"user{user_id}@afriverse.news",
            name=name or f"{role.value.title()} {user_id}",
            hashed_password="x",
            role=role,
            is_active=active,
        )
        self.repo.users[user_id] = user
        if role == UserRole.EDITOR:
            for category in desk:
                self.assign(user, category)
        return user

    def assign(
        self,
        editor: User,
        category: ContentCategory,
        *,
        can_approve: bool = True,
        can_publish: bool = True,
    ) -> EditorialAssignment:
        assignment = EditorialAssignment(
            id=next(self.policies._ids),
            user_id=editor.id,
            category=category,
            can_approve=can_approve,
            can_publish=can_publish,
        )
        self.policies.assignments.append(assignment)
        return assignment

    def rule(self, category: ContentCategory = ContentCategory.BUSINESS, **fields) -> PublishingRule:
        values = {
            "min_word_count": 300,
            "max_word_count": None,
            "requires_meta_description": True,
            "required_tags": 2,
            "auto_approve_trusted": False,
            **fields,
        }
        rule = PublishingRule(category=category, **values)
        self.policies.rules[category] = rule
        return rule

    def item(
        self,
        author: User,
        *,
        status: ContentStatus = ContentStatus.DRAFT,
        title: str = "Lagos fintech startups raise record funding",
        body: str = LONG_BODY,
        excerpt: str | None = "A record quarter for West African fintech.",
        category: ContentCategory | None = ContentCategory.BUSINESS,
        tags: list[str] | None = None,
        meta_description: str | None = None,
        scheduled_at: datetime | None = None,
    ) -> ContentItem:
        item = ContentItem(
            id=next(self.repo._ids),
            title=title,
            slug=f"post-{len(self.repo.items) + 1}",
            excerpt=excerpt,
            body=body,
            category=category,
            tags=list(tags or []),
            meta_description=meta_description,
            word_count=len(body.split()),
            author_id=author.id,
            status=status,
            scheduled_at=scheduled_at,
        )
        item.created_at = item.updated_at = self.repo._stamp()
        self.repo.items[item.id] = item
        return item


@pytest.fixture
def repo() -> FakeContentRepository:
    return FakeContentRepository()


@pytest.fixture
def db() -> SessionStub:
    return SessionStub()


@pytest.fixture
def outbox() -> FakeOutbox:
    return FakeOutbox()


@pytest.fixture
def policies() -> FakePolicyRepository:
    return FakePolicyRepository()


@pytest.fixture
def newsroom(repo, policies) -> Newsroom:
    return Newsroom(repo, policies)


@pytest.fixture
def workflow(repo, outbox, policies):
    from app.services.workflow_service import WorkflowService

    return WorkflowService(repository=repo, outbox=outbox, policies=policies)


@pytest.fixture
def session_factory():
    return SessionStub
