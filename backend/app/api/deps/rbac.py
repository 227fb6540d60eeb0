from __future__ import annotations

from fastapi import Depends

from app.api.routes.auth import get_current_user
from app.domain.workflow.permissions import require_min_role
from app.models.user import User, UserRole


def require_role(min_role: UserRole):
    """Dependency factory: the current user must hold `min_role` or any role above it."""

    async def _dependency(current_user: User = Depends(get_current_user)) -> User:
        require_min_role(current_user, min_role)
        return current_user

    return _dependency


require_editor = require_role(UserRole.EDITOR)
