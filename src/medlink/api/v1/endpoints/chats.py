"""
Chat History Endpoints.

Exposed routes (all under /api/v1/chats), scoped to the caller:
  POST   ""                 - Start a chat
  GET    ""                 - Caller's chats, most recently active first
  GET    /{chat_id}         - Chat with messages
  DELETE /{chat_id}         - Delete a chat
  POST   /{chat_id}/messages - Send a message and get the assistant's answer
"""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from ....core.rbac import CurrentUser
from ....core.responses import GenericResponse
from ....db.session import DbSession
from ....schemas.assistant import (
    ChatCreate,
    ChatExchange,
    ChatMessageCreate,
    ChatMessageResponse,
    ChatResponse,
    ChatSummary,
)
from ....schemas.common import MessageResponse
from ....services.assistant_service import AssistantService, ChatService
from .assistant import get_assistant_service

router = APIRouter(prefix="/chats")


def _get_chat_service(
    db: DbSession,
    assistant: Annotated[AssistantService, Depends(get_assistant_service)],
) -> ChatService:
    return ChatService(db, assistant)


ChatServiceDep = Annotated[ChatService, Depends(_get_chat_service)]


@router.post(
    "",
    response_model=GenericResponse[ChatResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Start a chat",
)
async def create_chat(
    body: ChatCreate,
    user: CurrentUser,
    service: ChatServiceDep,
) -> GenericResponse[ChatResponse]:
    chat = await service.create(user.id, body.title)
    return GenericResponse(message="Chat created", data=ChatResponse.model_validate(chat))


@router.get(
    "",
    response_model=GenericResponse[list[ChatSummary]],
    summary="List chats",
)
async def list_chats(user: CurrentUser, service: ChatServiceDep) -> GenericResponse[list[ChatSummary]]:
    chats = await service.list_for_user(user.id)
    return GenericResponse(
        message=f"Found {len(chats)} chat(s)",
        data=[ChatSummary.model_validate(c) for c in chats],
    )


@router.get(
    "/{chat_id}",
    response_model=GenericResponse[ChatResponse],
    summary="Get a chat",
)
async def get_chat(chat_id: str, user: CurrentUser, service: ChatServiceDep) -> GenericResponse[ChatResponse]:
    chat = await service.get(chat_id, user.id)
    return GenericResponse(message="Chat retrieved", data=ChatResponse.model_validate(chat))


@router.delete(
    "/{chat_id}",
    response_model=GenericResponse[MessageResponse],
    summary="Delete a chat",
)
async def delete_chat(chat_id: str, user: CurrentUser, service: ChatServiceDep) -> GenericResponse[MessageResponse]:
    await service.delete(chat_id, user.id)
    return GenericResponse(
        message="Chat deleted",
        data=MessageResponse(message="Chat deleted successfully"),
    )


@router.post(
    "/{chat_id}/messages",
    response_model=GenericResponse[ChatExchange],
    summary="Send a message",
    description="The first exchange renames the chat after the opening message.",
)
async def send_message(
    chat_id: str,
    body: ChatMessageCreate,
    user: CurrentUser,
    service: ChatServiceDep,
) -> GenericResponse[ChatExchange]:
    chat, user_message, bot_message, voice_summary = await service.send(chat_id, user.id, body.message)
    return GenericResponse(
        message="Message sent",
        data=ChatExchange(
            user_message=ChatMessageResponse.model_validate(user_message),
            bot_message=ChatMessageResponse.model_validate(bot_message),
            voice_summary=voice_summary,
            title=chat.title,
        ),
    )
