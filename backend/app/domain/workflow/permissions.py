"""Role and ownership checks shared by the content and workflow services."""

from __future__ import annotations

from app.domain.errors import Forbidden, Unauthenticated
from app.models import ContentItem, EditorialAssignment, User, UserRole, has_min_role, is_editor


def require_actor(actor: User | None) -> User:
    if actor is None or not getattr(actor, "is_active", False):
        raise Unauthenticated("Authentication required")
    return actor


def is_owner(actor: User, item: ContentItem) -> bool:
    return actor.id is not None and actor.id == item.author_id


def require_editor(actor: User, message: str = "Editor role required") -> None:
    if not is_editor(actor):
        raise Forbidden(message, details={"required_role": UserRole.EDITOR.value})


def require_min_role(actor: User, role: UserRole, message: str | None = None) -> None:
    if not has_min_role(actor, role):
        raise Forbidden(message or f"{role.value} role required", details={"required_role": role.value})


def require_owner_or_editor(actor: User, item: ContentItem) -> None:
    if not (is_owner(actor, item) or is_editor(actor)):
        raise Forbidden("You do not have access to this content")


def is_desk_restricted(actor: User) -> bool:
    """EDITORs work only the categories they are assigned; ADMIN and above cover every desk."""
    return actor.role == UserRole.EDITOR


def require_desk_permission(
    actor: User,
    item: ContentItem,
    assignment: EditorialAssignment | None,
    permission: str | None = None,
) -> None:
    """permission is None (any assignment), "approve" or "publish"."""
    if not is_desk_restricted(actor):
        return
    category = item.category.value if item.category is not None else None
    if assignment is None:
        raise Forbidden("Not assigned to this category", details={"category": category})
    if permission == "approve" and not assignment.can_approve:
        raise Forbidden("No approval permission for this category", details={"category": category})
    if permission == "publish" and not assignment.can_publish:
        raise Forbidden("No publish permission for this category", details={"category": category})
