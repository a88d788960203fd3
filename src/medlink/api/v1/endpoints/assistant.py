"""
Assistant Endpoints.

Exposed routes (all under /api/v1/assistant):
  POST /chatbot          - General healthcare assistant reply with a voice summary
  POST /symptom-checker  - Structured symptom analysis

Both answer 200 with ``fallback: true`` and canned text when Gemini fails.
"""
from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from ....core.prompts import get_prompt_manager
from ....core.responses import GenericResponse
from ....schemas.assistant import ChatbotReply, ChatbotRequest, SymptomCheckReply, SymptomCheckRequest
from ....services.assistant_service import AssistantService
from ....services.gemini_service import get_gemini_service

router = APIRouter(prefix="/assistant")


def get_assistant_service(
    gemini: Annotated[Any, Depends(get_gemini_service)],
    prompts: Annotated[Any, Depends(get_prompt_manager)],
) -> AssistantService:
    return AssistantService(gemini, prompts)


AssistantServiceDep = Annotated[AssistantService, Depends(get_assistant_service)]


@router.post(
    "/chatbot",
    response_model=GenericResponse[ChatbotReply],
    summary="Chat with the healthcare assistant",
)
async def chatbot(body: ChatbotRequest, assistant: AssistantServiceDep) -> GenericResponse[ChatbotReply]:
    answer = await assistant.chatbot(body.message)
    return GenericResponse(
        message="Assistant replied",
        data=ChatbotReply(reply=answer.reply, voice_summary=answer.voice_summary, fallback=answer.fallback),
    )


@router.post(
    "/symptom-checker",
    response_model=GenericResponse[SymptomCheckReply],
    summary="Analyze symptoms",
    responses={400: {"description": "No symptoms supplied"}},
)
async def symptom_checker(
    body: SymptomCheckRequest,
    assistant: AssistantServiceDep,
) -> GenericResponse[SymptomCheckReply]:
    reply, fallback = await assistant.check_symptoms(body.symptoms)
    return GenericResponse(
        message="Symptom analysis complete",
        data=SymptomCheckReply(reply=reply, fallback=fallback),
    )
