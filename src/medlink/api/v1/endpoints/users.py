"""
User Endpoints.

Exposed routes (all under /api/v1/users):
  POST  /signup  - Create the base identity record (public)
  GET   /me      - Caller's record plus doctor/hospital profile flags
  PATCH /me      - Partial profile update
  GET   /me/stats - Mood, journal and chat counts plus wellness score
  GET   ""       - List users, optional role filter

!! NO router-level auth dependency: /signup must stay public. Every other
route declares CurrentUser or require_authentication itself. !!
"""
from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Query, status

from ....core.rbac import CurrentUser
from ....core.responses import GenericResponse
from ....core.security import require_authentication
from ....db.session import DbSession
from ....models.enums import UserRole
from ....repositories.doctor_repository import DoctorRepository
from ....repositories.hospital_repository import HospitalRepository
from ....repositories.user_repository import UserRepository
from ....schemas.user import CurrentUserResponse, UserResponse, UserSignup, UserUpdate
from ....schemas.wellness import UserStatsResponse
from ....services.wellness_service import WellnessService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/users")


def _get_user_repo(db: DbSession) -> UserRepository:
    """DI factory, returns a UserRepository bound to the request session."""
    return UserRepository(db)


UserRepoDep = Annotated[UserRepository, Depends(_get_user_repo)]


@router.post(
    "/signup",
    response_model=GenericResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Sign up",
    responses={409: {"description": "Email or username already taken"}},
)
async def signup(body: UserSignup, repo: UserRepoDep) -> GenericResponse[UserResponse]:
    user = await repo.create(
        fullname=body.fullname,
        email=body.email,
        username=body.username,
        role=body.role.value,
        phone=body.phone,
        gender=body.gender,
    )
    return GenericResponse(message="User created successfully", data=UserResponse.model_validate(user))


@router.get(
    "/me",
    response_model=GenericResponse[CurrentUserResponse],
    summary="Current user",
)
async def get_me(user: CurrentUser, db: DbSession) -> GenericResponse[CurrentUserResponse]:
    doctor = await DoctorRepository(db).get_by_email(user.email)
    hospital = await HospitalRepository(db).get_by_email(user.email)

    data = CurrentUserResponse.model_validate(user).model_copy(
        update={
            "has_doctor_profile": doctor is not None,
            "has_hospital_profile": hospital is not None,
        }
    )
    return GenericResponse(message="User retrieved", data=data)


@router.patch(
    "/me",
    response_model=GenericResponse[UserResponse],
    summary="Update current user",
)
async def update_me(
    body: UserUpdate,
    user: CurrentUser,
    repo: UserRepoDep,
) -> GenericResponse[UserResponse]:
    user = await repo.update_fields(user, body.model_dump(exclude_unset=True, exclude_none=True))
    return GenericResponse(message="Profile updated successfully", data=UserResponse.model_validate(user))


@router.get(
    "",
    response_model=GenericResponse[list[UserResponse]],
    summary="List users",
    dependencies=[Depends(require_authentication)],
)
async def list_users(
    repo: UserRepoDep,
    role: UserRole | None = Query(default=None),
) -> GenericResponse[list[UserResponse]]:
    users = await repo.get_all(role=role.value if role else None)
    return GenericResponse(
        message=f"Found {len(users)} user(s)",
        data=[UserResponse.model_validate(u) for u in users],
    )


@router.get(
    "/me/stats",
    response_model=GenericResponse[UserStatsResponse],
    summary="Current user's activity stats",
)
async def get_my_stats(user: CurrentUser, db: DbSession) -> GenericResponse[UserStatsResponse]:
    stats = await WellnessService(db).stats(user.id)
    return GenericResponse(
        message="User stats retrieved",
        data=UserStatsResponse(
            mood_entries=stats.mood_entries,
            journal_posts=stats.journal_posts,
            chat_sessions=stats.chat_sessions,
            wellness_score=stats.wellness_score,
        ),
    )
