"""
Mood Endpoints.

Exposed routes (all under /api/v1/moods), scoped to the caller:
  POST ""  - Log a mood check-in
  GET  ""  - Caller's check-ins, newest first
"""
from __future__ import annotations

from fastapi import APIRouter, status

from ....core.rbac import CurrentUser
from ....core.responses import GenericResponse
from ....schemas.wellness import MoodCreate, MoodResponse
from .journals import WellnessServiceDep

router = APIRouter(prefix="/moods")


@router.post(
    "",
    response_model=GenericResponse[MoodResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Log a mood",
)
async def log_mood(body: MoodCreate, user: CurrentUser, service: WellnessServiceDep) -> GenericResponse[MoodResponse]:
    entry = await service.log_mood(user.id, body.mood, body.date)
    return GenericResponse(message="Mood logged", data=MoodResponse.model_validate(entry))


@router.get(
    "",
    response_model=GenericResponse[list[MoodResponse]],
    summary="List moods",
)
async def list_moods(user: CurrentUser, service: WellnessServiceDep) -> GenericResponse[list[MoodResponse]]:
    moods = await service.list_moods(user.id)
    return GenericResponse(
        message=f"Found {len(moods)} mood check-in(s)",
        data=[MoodResponse.model_validate(m) for m in moods],
    )
