"""Tests for RatingService submission and aggregate recomputation."""
from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from src.medlink.core.exceptions import BadRequestError, NotFoundError, UserNotFoundError
from src.medlink.repositories.doctor_repository import DoctorRepository
from src.medlink.repositories.hospital_repository import HospitalRepository
from src.medlink.repositories.user_repository import UserRepository
from src.medlink.services.rating_service import RatingService


async def _users(session: AsyncSession, count: int) -> list:
    repo = UserRepository(session)
    return [
        await repo.create(fullname=f"Rater {i}", email=f"rater{i}@example.com", username=f"rater{i}")
        for i in range(count)
    ]


async def test_average_rounds_half_up(db_session: AsyncSession, doctor):
    service = RatingService(db_session)
    raters = await _users(db_session, 4)

    for user, value in zip(raters, [1, 2, 3, 3]):
        _, aggregate = await service.submit(user_id=user.id, target_type="doctor", target_id=doctor.id, rating=value)

    assert aggregate.total_ratings == 4
    assert aggregate.average_rating == 2.3

    stored = await DoctorRepository(db_session).get_by_id(doctor.id)
    assert stored.average_rating == 2.3
    assert stored.total_ratings == 4


async def test_resubmission_replaces_previous_value(db_session: AsyncSession, patient, doctor):
    service = RatingService(db_session)
    await service.submit(user_id=patient.id, target_type="doctor", target_id=doctor.id, rating=1)
    row, aggregate = await service.submit(
        user_id=patient.id, target_type="doctor", target_id=doctor.id, rating=5, review="Much better"
    )

    assert row.rating == 5
    assert aggregate.total_ratings == 1
    assert aggregate.average_rating == 5.0


async def test_hospital_target(db_session: AsyncSession, patient, hospital):
    _, aggregate = await RatingService(db_session).submit(
        user_id=patient.id, target_type="hospital", target_id=hospital.id, rating=4
    )
    assert aggregate.average_rating == 4.0
    assert (await HospitalRepository(db_session).get_by_id(hospital.id)).total_ratings == 1


@pytest.mark.parametrize(
    ("kwargs", "code"),
    [
        ({"target_type": "doctor", "target_id": None, "rating": 3}, "MISSING_REQUIRED_FIELDS"),
        ({"target_type": "clinic", "target_id": "x", "rating": 3}, "INVALID_TARGET_TYPE"),
        ({"target_type": "doctor", "target_id": "x", "rating": 6}, "INVALID_RATING"),
        ({"target_type": "doctor", "target_id": "x", "rating": 3, "review": "x" * 501}, "REVIEW_TOO_LONG"),
    ],
)
async def test_rejects_bad_input(db_session: AsyncSession, patient, kwargs, code):
    with pytest.raises(BadRequestError) as exc:
        await RatingService(db_session).submit(user_id=patient.id, **kwargs)
    assert exc.value.error_code == code


async def test_unknown_target(db_session: AsyncSession, patient):
    with pytest.raises(NotFoundError) as exc:
        await RatingService(db_session).submit(user_id=patient.id, target_type="doctor", target_id="nope", rating=3)
    assert exc.value.error_code == "TARGET_NOT_FOUND"


async def test_unknown_rater(db_session: AsyncSession, doctor):
    service = RatingService(db_session)

    with pytest.raises(UserNotFoundError):
        await service.submit(user_id="no-such-user", target_type="doctor", target_id=doctor.id, rating=3)

    ratings, aggregate, _ = await service.get(target_type="doctor", target_id=doctor.id)
    assert ratings == []
    assert aggregate.total_ratings == 0


async def test_get_includes_callers_rating(db_session: AsyncSession, patient, doctor):
    service = RatingService(db_session)
    other = (await _users(db_session, 1))[0]
    await service.submit(user_id=patient.id, target_type="doctor", target_id=doctor.id, rating=4)
    await service.submit(user_id=other.id, target_type="doctor", target_id=doctor.id, rating=5)

    ratings, aggregate, mine = await service.get(target_type="doctor", target_id=doctor.id, user_id=patient.id)
    assert len(ratings) == 2
    assert aggregate.average_rating == 4.5
    assert mine.rating == 4

    _, empty, none = await service.get(target_type="hospital", target_id="no-ratings")
    assert empty.total_ratings == 0
    assert empty.average_rating == 0.0
    assert none is None
