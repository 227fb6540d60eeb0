"""
AfriVerse Editorial Desk - Editorial Policy Service
===================================================
Per-category publishing rules and editor desk assignments.
Reads are open to admins, writes to super admins only.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.domain.errors import DuplicateEntity, NotFound, ValidationFailed
from app.domain.workflow.permissions import require_actor, require_min_role
from app.models import ContentCategory, EditorialAssignment, PublishingRule, User, UserRole, has_min_role, is_editor
from app.repositories.content_repository import ContentRepository, content_repository
from app.repositories.policy_repository import PolicyRepository, policy_repository

logger = get_logger("services.editorial_policy")

RULE_DEFAULTS: dict[str, Any] = {
    "min_word_count": 300,
    "max_word_count": None,
    "requires_meta_description": True,
    "required_tags": 2,
    "auto_approve_trusted": False,
}


class EditorialPolicyService:
    def __init__(
        self,
        policies: PolicyRepository | None = None,
        content: ContentRepository | None = None,
    ):
        self.policies = policies or policy_repository
        self.content = content or content_repository

    @staticmethod
    def _category(value: Any) -> ContentCategory:
        if isinstance(value, ContentCategory):
            return value
        try:
            return ContentCategory(str(value or "").lower())
        except ValueError:
            raise ValidationFailed(
                [f"Category must be one of: {', '.join(c.value for c in ContentCategory)}"]
            ) from None

    # ── publishing rules ──

    async def list_rules(self, db: AsyncSession, *, actor: User | None) -> list[PublishingRule]:
        actor = require_actor(actor)
        require_min_role(actor, UserRole.ADMIN)
        return await self.policies.list_rules(db)

    async def save_rule(
        self,
        db: AsyncSession,
        *,
        actor: User | None,
        category: Any,
        fields: dict[str, Any],
    ) -> PublishingRule:
        """Create or update the rule for one category; unset fields keep their current value."""
        actor = require_actor(actor)
        require_min_role(actor, UserRole.SUPER_ADMIN, "Only a super admin can modify publishing rules")
        category = self._category(category)

        rule = await self.policies.get_rule(db, category)
        created = rule is None
        if rule is None:
            rule = PublishingRule(category=category, **RULE_DEFAULTS)
        for key in RULE_DEFAULTS:
            if key in fields:
                setattr(rule, key, fields[key])

        errors: list[str] = []
        if rule.min_word_count is None or rule.min_word_count < 0:
            errors.append("Minimum word count cannot be negative")
        if rule.max_word_count is not None and rule.max_word_count < (rule.min_word_count or 0):
            errors.append("Maximum word count must not be below the minimum")
        if rule.required_tags is None or rule.required_tags < 0:
            errors.append("Required tag count cannot be negative")
        if errors:
            raise ValidationFailed(errors, message="Publishing rule is invalid")

        try:
            await self.policies.save(db, rule)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise DuplicateEntity(
                "A rule for this category was created concurrently",
                details={"category": category.value},
            ) from None

        logger.info("publishing_rule_saved", category=category.value, created=created, actor_id=actor.id)
        return rule

    async def delete_rule(self, db: AsyncSession, *, actor: User | None, category: Any) -> None:
        actor = require_actor(actor)
        require_min_role(actor, UserRole.SUPER_ADMIN, "Only a super admin can delete publishing rules")
        category = self._category(category)
        rule = await self.policies.get_rule(db, category)
        if rule is None:
            raise NotFound("No publishing rule for this category", details={"category": category.value})
        await self.policies.delete(db, rule)
        await db.commit()
        logger.info("publishing_rule_deleted", category=category.value, actor_id=actor.id)

    # ── desk assignments ──

    async def list_assignments(
        self,
        db: AsyncSession,
        *,
        actor: User | None,
        user_id: int | None = None,
    ) -> list[EditorialAssignment]:
        actor = require_actor(actor)
        if not has_min_role(actor, UserRole.ADMIN):
            # Editors may look up their own desks and nobody else's.
            require_min_role(actor, UserRole.EDITOR)
            user_id = actor.id
        return await self.policies.list_assignments(db, user_id=user_id)

    async def save_assignment(
        self,
        db: AsyncSession,
        *,
        actor: User | None,
        user_id: int,
        category: Any,
        can_approve: bool = False,
        can_publish: bool = False,
    ) -> EditorialAssignment:
        actor = require_actor(actor)
        require_min_role(actor, UserRole.SUPER_ADMIN, "Only a super admin can manage editorial assignments")
        category = self._category(category)

        target = await self.content.get_user(db, user_id)
        if target is None:
            raise NotFound("User not found", details={"user_id": user_id})
        if not is_editor(target):
            raise ValidationFailed(
                ["User must be an editor or admin to hold a desk assignment"],
                message="Assignment is invalid",
            )

        assignment = await self.policies.get_assignment(db, user_id, category)
        if assignment is None:
            assignment = EditorialAssignment(user_id=user_id, category=category)
        assignment.can_approve = bool(can_approve)
        assignment.can_publish = bool(can_publish)

        try:
            await self.policies.save(db, assignment)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise DuplicateEntity(
                "This desk assignment was created concurrently",
                details={"user_id": user_id, "category": category.value},
            ) from None

        logger.info(
            "editorial_assignment_saved",
            user_id=user_id,
            category=category.value,
            can_approve=assignment.can_approve,
            can_publish=assignment.can_publish,
            actor_id=actor.id,
        )
        return assignment

    async def delete_assignment(self, db: AsyncSession, *, actor: User | None, assignment_id: int) -> None:
        actor = require_actor(actor)
        require_min_role(actor, UserRole.SUPER_ADMIN, "Only a super admin can manage editorial assignments")
        assignment = await self.policies.get_assignment_by_id(db, assignment_id)
        if assignment is None:
            raise NotFound("Assignment not found", details={"assignment_id": assignment_id})
        await self.policies.delete(db, assignment)
        await db.commit()
        logger.info("editorial_assignment_deleted", assignment_id=assignment_id, actor_id=actor.id)


editorial_policy_service = EditorialPolicyService()
