"""
AfriVerse Editorial Desk - Authentication and Membership Routes
===============================================================
Login, current user, and admin-managed accounts.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.envelope import success_envelope
from app.core.database import get_db
from app.core.logging import get_logger
from app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from app.domain.errors import DuplicateEntity, Forbidden, Unauthenticated
from app.domain.workflow.permissions import require_min_role
from app.models.user import User, UserRole
from app.schemas.auth import (
    LoginRequest,
    TokenResponse,
    UserCreateRequest,
    UserListItem,
    UserProfile,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])
logger = get_logger("auth")
security = HTTPBearer(auto_error=False)


# -- Dependency: current user --
async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    if credentials is None:
        raise Unauthenticated("Authentication required")

    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise Unauthenticated("Invalid or expired token")

    subject = payload.get("sub")
    if not subject or not str(subject).isdigit():
        raise Unauthenticated("Invalid token")

    result = await db.execute(select(User).where(User.id == int(subject)))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        raise Unauthenticated("Account not found or disabled")
    return user


# -- Login --
@router.post("/login")
async def login(request: LoginRequest, db: AsyncSession = Depends(get_db)):
    email = request.email.strip().lower()
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(request.password, user.hashed_password):
        logger.warning("login_failed", email=email)
        raise Unauthenticated("Invalid email or password")

    if not user.is_active:
        raise Forbidden("Account is disabled. Contact an administrator")

    now = datetime.now(timezone.utc)
    await db.execute(update(User).where(User.id == user.id).values(last_login_at=now))
    await db.commit()

    token = create_access_token(
        data={
            "sub": str(user.id),
            "role": user.role.value,
            "name": user.display_name,
        }
    )

    logger.info("login_success", user_id=user.id, role=user.role.value)
    body = TokenResponse(access_token=token, user=UserProfile.model_validate(user))
    return success_envelope(body.model_dump(mode="json"))


# -- Current user --
@router.get("/me")
async def get_me(current_user: User = Depends(get_current_user)):
    return success_envelope(UserProfile.model_validate(current_user).model_dump(mode="json"))


# -- Users list (admin view) --
@router.get("/users")
async def list_users(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    require_min_role(current_user, UserRole.ADMIN)
    result = await db.execute(select(User).order_by(User.role, User.email))
    users = result.scalars().all()
    return success_envelope([UserListItem.model_validate(u).model_dump(mode="json") for u in users])


# -- Create user (admin only) --
@router.post("/users", status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    require_min_role(current_user, UserRole.ADMIN)
    if payload.role == UserRole.SUPER_ADMIN:
        require_min_role(current_user, UserRole.SUPER_ADMIN, "Only a super admin can create super admins")

    user = User(
        email=payload.email.strip().lower(),
        name=payload.name.strip(),
        hashed_password=hash_password(payload.password),
        role=payload.role,
        is_active=payload.is_active,
    )
    db.add(user)

    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise DuplicateEntity(
            "Email is already registered",
            details={"email": payload.email},
        ) from None

    await db.commit()
    await db.refresh(user)
    logger.info("user_created", user_id=user.id, role=user.role.value, actor_id=current_user.id)
    return success_envelope(
        UserListItem.model_validate(user).model_dump(mode="json"),
        status_code=status.HTTP_201_CREATED,
    )
