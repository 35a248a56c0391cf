"""
Test Planner - User Schemas
Pydantic schemas for user registration, authentication, and profiles
"""
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.models.user import UserRole
from app.schemas.common import IdStr


# ============================================================================
# Base Schemas
# ============================================================================

class UserBase(BaseModel):
    """Base user schema with common fields."""
    email: EmailStr
    first_name: Annotated[str, Field(min_length=1, max_length=100)]
    last_name: Annotated[str, Field(min_length=1, max_length=100)]


# ============================================================================
# Registration & Authentication
# ============================================================================

class UserCreate(UserBase):
    """Schema for user registration."""
    password: Annotated[str, Field(min_length=8, max_length=72)]
    role: UserRole = UserRole.STUDENT

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        if not any(c.isupper() for c in v):
            raise ValueError("Password must contain at least one uppercase letter")
        if not any(c.islower() for c in v):
            raise ValueError("Password must contain at least one lowercase letter")
        if not any(c.isdigit() for c in v):
            raise ValueError("Password must contain at least one digit")
        return v

    @field_validator("role")
    @classmethod
    def validate_self_assignable_role(cls, v: UserRole) -> UserRole:
        if v == UserRole.ADMIN:
            raise ValueError("Admin accounts cannot be self-registered")
        return v


class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    """Schema for authentication token response."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int = 1800  # 30 minutes in seconds


# ============================================================================
# User Response Schemas
# ============================================================================

class UserResponse(UserBase):
    """Schema for user response (public data)."""
    model_config = ConfigDict(from_attributes=True)

    id: IdStr
    role: UserRole
    is_active: bool
    created_at: datetime


class UserSummary(BaseModel):
    """Compact user reference embedded in plan views."""
    model_config = ConfigDict(from_attributes=True)

    id: IdStr
    email: str
    first_name: str
    last_name: str
