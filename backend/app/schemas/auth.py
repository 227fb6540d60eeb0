"""
AfriVerse Editorial Desk - Authentication Schemas
=================================================
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from app.models.user import UserRole


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: "UserProfile"


class UserProfile(BaseModel):
    id: int
    email: str
    name: Optional[str]
    role: UserRole
    is_active: bool
    last_login_at: Optional[datetime]

    class Config:
        from_attributes = True


class UserListItem(UserProfile):
    created_at: Optional[datetime] = None


class UserCreateRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    name: str = Field(..., min_length=2, max_length=150)
    password: str = Field(..., min_length=8, max_length=128)
    role: UserRole = UserRole.AUTHOR
    is_active: bool = True


# Rebuild model to resolve forward reference
TokenResponse.model_rebuild()
