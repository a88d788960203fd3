"""Journal, mood and user stats schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from .common import ORMModel, RequestModel


class JournalCreate(RequestModel):
    """Blank title or content is reported as 400 by the service."""

    title: str | None = Field(default=None, max_length=200)
    content: str | None = Field(default=None, max_length=20000)
    mood: str | None = None


class JournalResponse(ORMModel):
    id: str
    title: str
    content: str
    mood: str | None = None
    created_at: datetime
    updated_at: datetime


class MoodCreate(RequestModel):
    mood: str | None = None
    date: datetime | None = Field(default=None, description="Defaults to now")


class MoodResponse(ORMModel):
    id: str
    mood: str
    date: datetime


class UserStatsResponse(BaseModel):
    mood_entries: int
    journal_posts: int
    chat_sessions: int
    wellness_score: int
