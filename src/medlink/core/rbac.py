"""Actor resolution for authenticated requests.

The session only carries an email. Handlers that need a domain identity
re-look it up: the base ``User`` record, the ``Doctor`` profile, or both.
A single email may have a User record and, optionally, a Doctor profile.

Usage:
    @router.post("")
    async def create(doctor: CurrentDoctor):
        ...
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Annotated

import structlog
from fastapi import Depends

from ..db.session import DbSession
from ..models.doctor import Doctor
from ..models.user import User
from ..repositories.doctor_repository import DoctorRepository
from ..repositories.user_repository import UserRepository
from .exceptions import ForbiddenError, UnauthorizedError, UserNotFoundError
from .security import SessionEmail

logger = structlog.get_logger(__name__)


def _email_hash(email: str) -> str:
    # Never log the raw email.
    return hashlib.sha256(email.encode()).hexdigest()[:12]


@dataclass(frozen=True)
class Actor:
    """Everything known about the caller's identity."""

    email: str
    user: User | None
    doctor: Doctor | None

    @property
    def is_doctor(self) -> bool:
        return self.doctor is not None


async def get_current_user(email: SessionEmail, db: DbSession) -> User:
    """Return the User record for the session email (401 when absent)."""
    user = await UserRepository(db).get_by_email(email)
    if not user:
        logger.warning("session_user_not_found", email_hash=_email_hash(email))
        raise UnauthorizedError(
            message="User not found. Please sign up first.",
            error_code="USER_NOT_FOUND",
        )
    return user


async def get_current_doctor(email: SessionEmail, db: DbSession) -> Doctor:
    """Return the Doctor profile for the session email (403 when absent)."""
    doctor = await DoctorRepository(db).get_by_email(email)
    if not doctor:
        logger.warning("doctor_profile_required", email_hash=_email_hash(email))
        raise ForbiddenError(
            message="Only doctors can perform this action",
            error_code="DOCTOR_REQUIRED",
        )
    return doctor


async def resolve_actor(email: SessionEmail, db: DbSession) -> Actor:
    """Dual lookup: doctor profile first, then base user.

    Fails with 404 only when neither record exists.
    """
    doctor = await DoctorRepository(db).get_by_email(email)
    user = await UserRepository(db).get_by_email(email)
    if doctor is None and user is None:
        raise UserNotFoundError(message="User not found")
    return Actor(email=email, user=user, doctor=doctor)


CurrentUser = Annotated[User, Depends(get_current_user)]
CurrentDoctor = Annotated[Doctor, Depends(get_current_doctor)]
CurrentActor = Annotated[Actor, Depends(resolve_actor)]
