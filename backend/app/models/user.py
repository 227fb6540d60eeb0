"""
AfriVerse Editorial Desk - User Model
=====================================
Writer and editor accounts with an ordered role hierarchy.
"""

import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, Integer, String, func

from app.core.database import Base


class UserRole(str, enum.Enum):
    CONTRIBUTOR = "CONTRIBUTOR"
    AUTHOR = "AUTHOR"
    SENIOR_WRITER = "SENIOR_WRITER"
    EDITOR = "EDITOR"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


# Total order over roles; compare levels, never role names.
ROLE_LEVELS: dict[UserRole, int] = {
    UserRole.CONTRIBUTOR: 10,
    UserRole.AUTHOR: 20,
    UserRole.SENIOR_WRITER: 30,
    UserRole.EDITOR: 40,
    UserRole.ADMIN: 50,
    UserRole.SUPER_ADMIN: 60,
}


def role_level(role: UserRole | str | None) -> int:
    if role is None:
        return 0
    try:
        return ROLE_LEVELS[UserRole(role)]
    except ValueError:
        return 0


def has_min_role(user, min_role: UserRole) -> bool:
    return role_level(getattr(user, "role", None)) >= role_level(min_role)


def is_editor(user) -> bool:
    return has_min_role(user, UserRole.EDITOR)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Identity
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(150), nullable=True)
    hashed_password = Column(String(255), nullable=False)

    # Role
    role = Column(Enum(UserRole, name="user_role"), nullable=False, default=UserRole.AUTHOR)

    # Status
    is_active = Column(Boolean, default=True, nullable=False)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    # Metadata
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def display_name(self) -> str:
        return self.name or self.email

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
