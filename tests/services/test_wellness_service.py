"""Tests for WellnessService journals, moods and the wellness score."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from src.medlink.core.exceptions import BadRequestError
from src.medlink.services.wellness_service import WellnessService, wellness_score


@pytest.mark.parametrize(
    ("moods", "expected"),
    [
        ([], 85),
        (["happy", "sad"], 60),
        (["very-happy"], 100),
        (["daydreaming"], 50),
        (["calm", "calm", "anxious"], 57),
        (["happy", "happy", "calm", "very-sad"], 63),
    ],
)
def test_wellness_score(moods, expected):
    assert wellness_score(moods) == expected


async def test_add_journal_validates(db_session: AsyncSession, patient):
    service = WellnessService(db_session)

    with pytest.raises(BadRequestError):
        await service.add_journal(patient.id, title="", content="Nothing")
    with pytest.raises(BadRequestError):
        await service.add_journal(patient.id, title="Empty", content=None)

    journal = await service.add_journal(patient.id, title="Day one", content="Started a new routine", mood=" Hopeful ")
    assert journal.mood == "hopeful"
    assert [j.id for j in await service.list_journals(patient.id)] == [journal.id]


async def test_stats_uses_last_thirty_days(db_session: AsyncSession, patient):
    service = WellnessService(db_session)
    now = datetime(2025, 6, 30, 12, 0, tzinfo=UTC)

    await service.log_mood(patient.id, "grateful", now - timedelta(days=1))
    await service.log_mood(patient.id, "excited", now - timedelta(days=29))
    await service.log_mood(patient.id, "very-sad", now - timedelta(days=45))

    stats = await service.stats(patient.id, now=now)

    assert stats.mood_entries == 3
    assert stats.journal_posts == 0
    assert stats.chat_sessions == 0
    assert stats.wellness_score == 90
