"""Stored File Repository - metadata and sharing for uploaded files."""
from __future__ import annotations

from collections.abc import Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.stored_file import StoredFile, file_shares
from ..models.user import User

log = structlog.get_logger(__name__)


class FileRepository:
    """Repository for StoredFile operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, file_id: str) -> StoredFile | None:
        return await self.session.get(StoredFile, file_id)

    async def search(
        self,
        *,
        owner_id: str | None = None,
        doctor_id: str | None = None,
        category: str | None = None,
    ) -> Sequence[StoredFile]:
        """Newest upload first."""
        query = select(StoredFile)
        if owner_id:
            query = query.where(StoredFile.owner_id == owner_id)
        if doctor_id:
            query = query.where(StoredFile.doctor_id == doctor_id)
        if category:
            query = query.where(StoredFile.category == category)
        query = query.order_by(StoredFile.upload_date.desc())
        result = await self.session.execute(query)
        return result.scalars().all()

    async def shared_with(self, user_id: str) -> Sequence[StoredFile]:
        query = (
            select(StoredFile)
            .join(file_shares, file_shares.c.file_id == StoredFile.id)
            .where(file_shares.c.user_id == user_id)
            .order_by(StoredFile.upload_date.desc())
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    async def create(self, stored_file: StoredFile) -> StoredFile:
        self.session.add(stored_file)
        await self.session.flush()
        await self.session.refresh(stored_file)

        log.info(
            "file_recorded",
            file_id=stored_file.id,
            owner_id=stored_file.owner_id,
            size_bytes=stored_file.size_bytes,
        )
        return stored_file

    async def share(self, stored_file: StoredFile, user: User) -> bool:
        """Append ``user`` to the share set. Returns False if already present."""
        if any(existing.id == user.id for existing in stored_file.shared_with):
            return False
        stored_file.shared_with.append(user)
        await self.session.flush()

        log.info("file_shared", file_id=stored_file.id, user_id=user.id)
        return True
