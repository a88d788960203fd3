"""Journal and mood repositories."""
from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.journal import Journal, MoodEntry

log = structlog.get_logger(__name__)


class JournalRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, user_id: str, title: str, content: str, mood: str | None = None) -> Journal:
        journal = Journal(user_id=user_id, title=title, content=content, mood=mood)
        self.session.add(journal)
        await self.session.flush()
        await self.session.refresh(journal)
        log.info("journal_created", journal_id=journal.id)
        return journal

    async def list_for_user(self, user_id: str) -> Sequence[Journal]:
        query = select(Journal).where(Journal.user_id == user_id).order_by(Journal.created_at.desc())
        result = await self.session.execute(query)
        return result.scalars().all()

    async def count_for_user(self, user_id: str) -> int:
        query = select(func.count(Journal.id)).where(Journal.user_id == user_id)
        return int((await self.session.execute(query)).scalar_one())


class MoodRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, user_id: str, mood: str, date: datetime | None = None) -> MoodEntry:
        entry = MoodEntry(user_id=user_id, mood=mood)
        if date is not None:
            entry.date = date
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)
        return entry

    async def list_for_user(self, user_id: str, since: datetime | None = None) -> Sequence[MoodEntry]:
        """Newest first; ``since`` keeps entries dated at or after it."""
        query = select(MoodEntry).where(MoodEntry.user_id == user_id)
        if since is not None:
            query = query.where(MoodEntry.date >= since)
        result = await self.session.execute(query.order_by(MoodEntry.date.desc()))
        return result.scalars().all()

    async def count_for_user(self, user_id: str) -> int:
        query = select(func.count(MoodEntry.id)).where(MoodEntry.user_id == user_id)
        return int((await self.session.execute(query)).scalar_one())
