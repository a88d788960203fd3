"""User Repository - Data access layer for identity records."""
from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import AlreadyExistsError
from ..models.enums import UserRole
from ..models.user import User

log = structlog.get_logger(__name__)

UPDATABLE_FIELDS = ("fullname", "phone", "gender", "profile_image", "username")


class UserRepository:
    """Repository for User CRUD operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    async def get_by_id(self, user_id: str) -> User | None:
        return await self.session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        """Emails are stored lower-cased."""
        query = select(User).where(User.email == email.strip().lower())
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_all(self, role: str | None = None) -> Sequence[User]:
        query = select(User)
        if role:
            query = query.where(User.role == role)
        query = query.order_by(User.created_at.desc())
        result = await self.session.execute(query)
        return result.scalars().all()

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    async def create(
        self,
        *,
        fullname: str,
        email: str,
        username: str,
        role: str = UserRole.USER.value,
        phone: str | None = None,
        gender: str | None = None,
    ) -> User:
        """Create a new user.

        Raises:
            AlreadyExistsError: email or username is taken
        """
        email = email.strip().lower()
        query = select(User).where(or_(User.email == email, User.username == username))
        existing = (await self.session.execute(query)).scalars().first()
        if existing:
            field, value = ("email", email) if existing.email == email else ("username", username)
            raise AlreadyExistsError("User", field, value)

        user = User(
            fullname=fullname,
            email=email,
            username=username,
            role=role,
            phone=phone,
            gender=gender,
        )
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)

        log.info("user_created", user_id=user.id, role=role)
        return user

    async def update_fields(self, user: User, changes: dict[str, Any]) -> User:
        """Apply a partial update; unknown keys are ignored."""
        applied = [key for key in UPDATABLE_FIELDS if key in changes]
        for key in applied:
            setattr(user, key, changes[key])

        await self.session.flush()
        await self.session.refresh(user)
        log.info("user_updated", user_id=user.id, fields=applied)
        return user
