"""Chatbot, symptom checker and chat history schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from .common import ORMModel, RequestModel


class ChatbotRequest(RequestModel):
    message: str = Field(..., min_length=1, max_length=4000)


class ChatbotReply(BaseModel):
    reply: str
    voice_summary: str
    fallback: bool = False


class SymptomCheckRequest(RequestModel):
    symptoms: str | None = Field(default=None, max_length=4000)


class SymptomCheckReply(BaseModel):
    reply: str
    fallback: bool = False


class ChatCreate(RequestModel):
    title: str | None = Field(default=None, max_length=200)


class ChatMessageCreate(RequestModel):
    message: str = Field(..., min_length=1, max_length=4000)


class ChatMessageResponse(ORMModel):
    id: str
    sender: str
    text: str
    timestamp: datetime


class ChatResponse(ORMModel):
    id: str
    title: str
    messages: list[ChatMessageResponse]
    created_at: datetime
    updated_at: datetime


class ChatSummary(ORMModel):
    id: str
    title: str
    created_at: datetime
    updated_at: datetime


class ChatExchange(BaseModel):
    user_message: ChatMessageResponse
    bot_message: ChatMessageResponse
    voice_summary: str
    title: str
