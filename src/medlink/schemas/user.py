"""User schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import EmailStr, Field

from ..models.enums import UserRole
from .common import ORMModel, RequestModel


class UserSignup(RequestModel):
    fullname: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=100)
    role: UserRole = UserRole.USER
    phone: str | None = Field(default=None, max_length=20)
    gender: str | None = Field(default=None, max_length=20)


class UserUpdate(RequestModel):
    """Partial profile update; omitted fields are left unchanged."""

    fullname: str | None = Field(default=None, min_length=1, max_length=200)
    phone: str | None = Field(default=None, max_length=20)
    gender: str | None = Field(default=None, max_length=20)
    profile_image: str | None = Field(default=None, max_length=1000)


class UserSummary(ORMModel):
    """Display fields joined into appointment and prescription payloads."""

    id: str
    fullname: str
    email: str


class UserResponse(ORMModel):
    id: str
    fullname: str
    email: str
    username: str
    role: str
    phone: str | None = None
    gender: str | None = None
    profile_image: str | None = None
    created_at: datetime


class CurrentUserResponse(UserResponse):
    has_doctor_profile: bool = False
    has_hospital_profile: bool = False
