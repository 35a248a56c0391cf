"""
Test Planner - Authentication Service
Business logic for user registration, login, and token issuing
"""
import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import ValidationError
from app.core.security import create_access_token, get_password_hash, verify_password
from app.models.user import User
from app.schemas.user import TokenResponse, UserCreate
from app.services.access import normalize_identity

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Base authentication error."""
    pass


class InvalidCredentialsError(AuthenticationError):
    """Invalid email or password."""
    pass


class AuthService:
    """Service for authentication operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register_user(self, user_data: UserCreate) -> User:
        """
        Register a new user.

        Raises:
            ValueError: If email already exists
        """
        existing = await self.db.execute(
            select(User).where(User.email == user_data.email)
        )
        if existing.scalar_one_or_none():
            raise ValueError("Email already registered")

        user = User(
            email=user_data.email,
            hashed_password=get_password_hash(user_data.password),
            first_name=user_data.first_name,
            last_name=user_data.last_name,
            role=user_data.role.value,
        )

        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)

        logger.info("Registered user %s with role %s", user.id, user.role)
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """
        Authenticate user with email and password.

        Raises:
            InvalidCredentialsError: If credentials are invalid or the account is inactive
        """
        result = await self.db.execute(
            select(User).where(User.email == email)
        )
        user = result.scalar_one_or_none()

        if not user or not verify_password(password, user.hashed_password):
            raise InvalidCredentialsError("Invalid email or password")
        if not user.is_active:
            raise InvalidCredentialsError("Account is deactivated")

        user.last_login = datetime.now(timezone.utc)
        await self.db.flush()
        return user

    def create_token(self, user: User) -> TokenResponse:
        """Issue an access token carrying the user's role."""
        # Handle both enum and string role values
        role_value = user.role.value if hasattr(user.role, "value") else user.role
        access_token = create_access_token(
            subject=user.id,
            additional_claims={"role": role_value},
        )
        return TokenResponse(
            access_token=access_token,
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        )

    async def get_user_by_id(self, user_id: Any) -> User | None:
        """Get user by ID; malformed ids find nobody."""
        try:
            user_id = normalize_identity(user_id, "user_id")
        except ValidationError:
            return None
        return await self.db.get(User, user_id)
