"""
Assistant Service.

Gemini-backed chatbot and symptom checker, plus persisted chat history.
Upstream failures never surface to the caller: both flows log the error
and answer with the configured fallback text instead.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import get_settings
from ..core.exceptions import AIServiceError, BadRequestError, NotFoundError
from ..core.prompts import PromptManager
from ..models.chat import DEFAULT_CHAT_TITLE, Chat, ChatMessage
from ..models.enums import MessageSender
from ..models.mixins import utc_now
from ..repositories.chat_repository import ChatRepository
from .gemini_service import GeminiService

log = structlog.get_logger(__name__)

FULL_RESPONSE_MARKER = "FULL RESPONSE:"
VOICE_SUMMARY_MARKER = "VOICE SUMMARY:"
TITLE_LENGTH = 30


@dataclass(frozen=True)
class ChatbotAnswer:
    reply: str
    voice_summary: str
    fallback: bool = False


def split_voice_summary(text: str, default_summary: str) -> tuple[str, str]:
    """Separate the display reply from the spoken summary.

    Only applies when the model used both markers; otherwise the whole text
    is the reply and ``default_summary`` is spoken.
    """
    if FULL_RESPONSE_MARKER in text and VOICE_SUMMARY_MARKER in text:
        head, _, tail = text.partition(VOICE_SUMMARY_MARKER)
        return head.replace(FULL_RESPONSE_MARKER, "").strip(), tail.strip()
    return text, default_summary


def chat_title_from(message: str) -> str:
    message = message.strip()
    if len(message) > TITLE_LENGTH:
        return message[:TITLE_LENGTH] + "..."
    return message


class AssistantService:
    def __init__(self, gemini: GeminiService, prompts: PromptManager) -> None:
        self.gemini = gemini
        self.prompts = prompts
        self.settings = get_settings()

    async def chatbot(self, message: str) -> ChatbotAnswer:
        message = (message or "").strip()
        if not message:
            raise BadRequestError(message="Message is required", error_code="MISSING_REQUIRED_FIELDS")

        try:
            text = await self.gemini.generate_with_retry(
                self.prompts.format("chatbot.user_template", message=message),
                system_instruction=self.prompts.get("chatbot.system_prompt"),
                max_tokens=self.settings.CHATBOT_MAX_TOKENS,
            )
        except AIServiceError as e:
            log.error("chatbot_upstream_failed", error=e.message, detail=e.details)
            return ChatbotAnswer(
                reply=self.prompts.get("chatbot.fallback_reply"),
                voice_summary=self.prompts.get("chatbot.fallback_voice_summary"),
                fallback=True,
            )

        text = text or self.prompts.get("chatbot.empty_reply")
        reply, summary = split_voice_summary(text, self.prompts.get("chatbot.default_voice_summary"))
        return ChatbotAnswer(reply=reply, voice_summary=summary)

    async def check_symptoms(self, symptoms: str | None) -> tuple[str, bool]:
        """Returns (analysis, fallback)."""
        symptoms = (symptoms or "").strip()
        if not symptoms:
            raise BadRequestError(message="Symptoms are required", error_code="MISSING_REQUIRED_FIELDS")

        try:
            text = await self.gemini.generate_with_retry(
                self.prompts.format("symptom_checker.user_template", symptoms=symptoms),
                system_instruction=self.prompts.get("symptom_checker.system_prompt"),
                max_tokens=self.settings.SYMPTOM_CHECKER_MAX_TOKENS,
            )
        except AIServiceError as e:
            log.error("symptom_checker_upstream_failed", error=e.message, detail=e.details)
            return self.prompts.get("symptom_checker.fallback_reply"), True
        return text, False


class ChatService:
    """Per-user chat threads with the assistant."""

    def __init__(self, session: AsyncSession, assistant: AssistantService) -> None:
        self.chats = ChatRepository(session)
        self.assistant = assistant

    async def create(self, user_id: str, title: str | None = None) -> Chat:
        return await self.chats.create(user_id, (title or "").strip() or DEFAULT_CHAT_TITLE)

    async def list_for_user(self, user_id: str) -> Sequence[Chat]:
        return await self.chats.list_for_user(user_id)

    async def get(self, chat_id: str, user_id: str) -> Chat:
        chat = await self.chats.get_for_user(chat_id, user_id)
        if not chat:
            raise NotFoundError(
                message="Chat not found",
                error_code="CHAT_NOT_FOUND",
                resource_type="chat",
                resource_id=chat_id,
            )
        return chat

    async def delete(self, chat_id: str, user_id: str) -> None:
        await self.chats.delete(await self.get(chat_id, user_id))

    async def send(self, chat_id: str, user_id: str, text: str) -> tuple[Chat, ChatMessage, ChatMessage, str]:
        """
        Append the user's message and the assistant's answer.

        Returns:
            (chat, user_message, bot_message, voice_summary)
        """
        chat = await self.get(chat_id, user_id)
        text = (text or "").strip()
        if not text:
            raise BadRequestError(message="Message is required", error_code="MISSING_REQUIRED_FIELDS")

        user_message = await self.chats.append_message(chat, MessageSender.USER.value, text)
        answer = await self.assistant.chatbot(text)
        bot_message = await self.chats.append_message(
            chat,
            MessageSender.BOT.value,
            answer.reply or self.assistant.prompts.get("chat.bot_default_reply"),
        )

        if len(chat.messages) == 2:
            chat.title = chat_title_from(text)
        chat.updated_at = utc_now()
        chat = await self.chats.save(chat)

        log.info("chat_exchange", chat_id=chat.id, messages=len(chat.messages), fallback=answer.fallback)
        return chat, user_message, bot_message, answer.voice_summary
