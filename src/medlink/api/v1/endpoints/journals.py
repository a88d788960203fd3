"""
Journal Endpoints.

Exposed routes (all under /api/v1/journals), scoped to the caller:
  POST ""  - Save a journal entry (title and content required, mood optional)
  GET  ""  - Caller's entries, newest first
"""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from ....core.rbac import CurrentUser
from ....core.responses import GenericResponse
from ....db.session import DbSession
from ....schemas.wellness import JournalCreate, JournalResponse
from ....services.wellness_service import WellnessService

router = APIRouter(prefix="/journals")


def get_wellness_service(db: DbSession) -> WellnessService:
    return WellnessService(db)


WellnessServiceDep = Annotated[WellnessService, Depends(get_wellness_service)]


@router.post(
    "",
    response_model=GenericResponse[JournalResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Add a journal entry",
)
async def add_journal(
    body: JournalCreate,
    user: CurrentUser,
    service: WellnessServiceDep,
) -> GenericResponse[JournalResponse]:
    journal = await service.add_journal(user.id, title=body.title, content=body.content, mood=body.mood)
    return GenericResponse(
        message="Journal entry saved successfully",
        data=JournalResponse.model_validate(journal),
    )


@router.get(
    "",
    response_model=GenericResponse[list[JournalResponse]],
    summary="List journal entries",
)
async def list_journals(user: CurrentUser, service: WellnessServiceDep) -> GenericResponse[list[JournalResponse]]:
    journals = await service.list_journals(user.id)
    return GenericResponse(
        message="Journals fetched successfully",
        data=[JournalResponse.model_validate(j) for j in journals],
    )
