"""Chat Repository."""
from __future__ import annotations

from collections.abc import Sequence

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.chat import Chat, ChatMessage

log = structlog.get_logger(__name__)


class ChatRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_for_user(self, chat_id: str, user_id: str) -> Chat | None:
        query = select(Chat).where(Chat.id == chat_id, Chat.user_id == user_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: str) -> Sequence[Chat]:
        query = select(Chat).where(Chat.user_id == user_id).order_by(Chat.updated_at.desc())
        result = await self.session.execute(query)
        return result.scalars().all()

    async def count_for_user(self, user_id: str) -> int:
        query = select(func.count(Chat.id)).where(Chat.user_id == user_id)
        return int((await self.session.execute(query)).scalar_one())

    async def create(self, user_id: str, title: str) -> Chat:
        chat = Chat(user_id=user_id, title=title, messages=[])
        self.session.add(chat)
        await self.session.flush()
        await self.session.refresh(chat)
        log.info("chat_created", chat_id=chat.id)
        return chat

    async def append_message(self, chat: Chat, sender: str, text: str) -> ChatMessage:
        message = ChatMessage(sender=sender, text=text, position=len(chat.messages))
        chat.messages.append(message)
        await self.session.flush()
        return message

    async def save(self, chat: Chat) -> Chat:
        await self.session.flush()
        await self.session.refresh(chat)
        return chat

    async def delete(self, chat: Chat) -> None:
        await self.session.delete(chat)
        await self.session.flush()
        log.info("chat_deleted", chat_id=chat.id)
