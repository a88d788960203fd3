"""Integration tests for FileRepository sharing."""
from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from src.medlink.models.stored_file import StoredFile
from src.medlink.repositories.file_repository import FileRepository
from src.medlink.repositories.user_repository import UserRepository


def _stored(owner_id: str, key: str, category: str = "Lab Reports") -> StoredFile:
    return StoredFile(
        file_name=key,
        storage_key=key,
        file_url=f"/api/v1/files/download?key={key}",
        file_type="application/pdf",
        size_bytes=128,
        category=category,
        tags=["blood"],
        owner_id=owner_id,
    )


async def test_share_is_idempotent(db_session: AsyncSession, patient):
    friend = await UserRepository(db_session).create(fullname="Friend", email="friend@example.com", username="friend")
    repo = FileRepository(db_session)
    stored = await repo.create(_stored(patient.id, "1700000000000_cbc.pdf"))

    assert await repo.share(stored, friend) is True
    assert await repo.share(stored, friend) is False
    assert [u.email for u in stored.shared_with] == ["friend@example.com"]

    shared = await repo.shared_with(friend.id)
    assert [f.id for f in shared] == [stored.id]


async def test_search_filters(db_session: AsyncSession, patient):
    repo = FileRepository(db_session)
    await repo.create(_stored(patient.id, "a.pdf", category="Lab Reports"))
    await repo.create(_stored(patient.id, "b.pdf", category="Imaging"))

    assert len(await repo.search(owner_id=patient.id)) == 2
    imaging = await repo.search(owner_id=patient.id, category="Imaging")
    assert [f.storage_key for f in imaging] == ["b.pdf"]
    assert await repo.search(owner_id="someone-else") == []
