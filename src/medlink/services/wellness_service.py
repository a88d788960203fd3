"""
Wellness Service.

Journal entries, mood check-ins and the per-user activity summary shown on
the patient dashboard.

The wellness score is the mean of the last 30 days of moods, each mapped
to a 1..10 score, scaled to a percentage. Unknown moods score 5; a user
with no recent moods gets the baseline of 85.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import BadRequestError
from ..models.journal import MAX_MOOD_LENGTH, Journal, MoodEntry
from ..models.mixins import utc_now
from ..repositories.chat_repository import ChatRepository
from ..repositories.journal_repository import JournalRepository, MoodRepository

log = structlog.get_logger(__name__)

BASELINE_WELLNESS_SCORE = 85
UNKNOWN_MOOD_SCORE = 5
WELLNESS_WINDOW = timedelta(days=30)

MOOD_SCORES: dict[str, int] = {
    "very-happy": 10,
    "happy": 8,
    "neutral": 6,
    "sad": 4,
    "very-sad": 2,
    "anxious": 3,
    "stressed": 3,
    "excited": 9,
    "calm": 7,
    "angry": 2,
    "frustrated": 3,
    "grateful": 9,
    "hopeful": 8,
    "tired": 4,
    "energetic": 8,
}


def wellness_score(moods: Sequence[str]) -> int:
    """
    >>> wellness_score(["happy", "sad"])
    60
    >>> wellness_score([])
    85
    """
    if not moods:
        return BASELINE_WELLNESS_SCORE
    total = sum(MOOD_SCORES.get(mood, UNKNOWN_MOOD_SCORE) for mood in moods)
    percent = Decimal(total) * 10 / Decimal(len(moods))
    return int(percent.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class UserStats:
    mood_entries: int
    journal_posts: int
    chat_sessions: int
    wellness_score: int


def _clean_mood(mood: str | None) -> str | None:
    if mood is None or not mood.strip():
        return None
    mood = mood.strip().lower()
    if len(mood) > MAX_MOOD_LENGTH:
        raise BadRequestError(
            message=f"Mood must be at most {MAX_MOOD_LENGTH} characters",
            error_code="INVALID_MOOD",
        )
    return mood


class WellnessService:
    def __init__(self, session: AsyncSession) -> None:
        self.journals = JournalRepository(session)
        self.moods = MoodRepository(session)
        self.chats = ChatRepository(session)

    async def add_journal(
        self,
        user_id: str,
        *,
        title: str | None,
        content: str | None,
        mood: str | None = None,
    ) -> Journal:
        if not title or not content:
            raise BadRequestError(
                message="Title and content are required",
                error_code="MISSING_REQUIRED_FIELDS",
            )
        return await self.journals.create(user_id, title, content, _clean_mood(mood))

    async def list_journals(self, user_id: str) -> Sequence[Journal]:
        return await self.journals.list_for_user(user_id)

    async def log_mood(self, user_id: str, mood: str | None, date: datetime | None = None) -> MoodEntry:
        cleaned = _clean_mood(mood)
        if cleaned is None:
            raise BadRequestError(message="Mood is required", error_code="MISSING_REQUIRED_FIELDS")
        entry = await self.moods.create(user_id, cleaned, date)
        log.info("mood_logged", mood=cleaned)
        return entry

    async def list_moods(self, user_id: str) -> Sequence[MoodEntry]:
        return await self.moods.list_for_user(user_id)

    async def stats(self, user_id: str, now: datetime | None = None) -> UserStats:
        """Counts of moods, journals and chats plus the 30-day wellness score."""
        since = (now or utc_now()) - WELLNESS_WINDOW
        recent = await self.moods.list_for_user(user_id, since=since)
        return UserStats(
            mood_entries=await self.moods.count_for_user(user_id),
            journal_posts=await self.journals.count_for_user(user_id),
            chat_sessions=await self.chats.count_for_user(user_id),
            wellness_score=wellness_score([m.mood for m in recent]),
        )
