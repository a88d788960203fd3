"""
File Service.

Patient file uploads, listing, sharing and download. Blobs go to the
configured storage backend; metadata and the share set live in the
database.
"""
from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import PurePath

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import get_settings
from ..core.exceptions import (
    BadRequestError,
    DoctorNotFoundError,
    FileValidationError,
    ForbiddenError,
    StoredFileNotFoundError,
    UserNotFoundError,
)
from ..models.stored_file import DEFAULT_CATEGORY, StoredFile
from ..models.user import User
from ..repositories.doctor_repository import DoctorRepository
from ..repositories.file_repository import FileRepository
from ..repositories.user_repository import UserRepository
from .blob_storage_service import BlobMetadata, BlobStorage, detect_mime_type

log = structlog.get_logger(__name__)


def parse_tags(raw: str | None) -> list[str]:
    """Split a comma-separated tag string, dropping blanks and duplicates."""
    if not raw:
        return []
    tags: list[str] = []
    for tag in raw.split(","):
        tag = tag.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def storage_key_for(file_name: str, now: datetime | None = None) -> str:
    """``{epoch_millis}_{base name}``."""
    now = now or datetime.now(UTC)
    return f"{int(now.timestamp() * 1000)}_{PurePath(file_name).name}"


class FileService:
    def __init__(self, session: AsyncSession, storage: BlobStorage) -> None:
        self.files = FileRepository(session)
        self.users = UserRepository(session)
        self.doctors = DoctorRepository(session)
        self.storage = storage

    async def upload(
        self,
        owner: User,
        *,
        file_name: str | None,
        content: bytes,
        mime_type: str | None = None,
        category: str | None = None,
        doctor_id: str | None = None,
        tags: str | None = None,
    ) -> StoredFile:
        settings = get_settings()
        if not file_name:
            raise FileValidationError(message="Filename is required")
        if not content:
            raise FileValidationError(message="File is empty", filename=file_name)
        if len(content) > settings.max_file_size_bytes:
            raise FileValidationError(
                message=f"File too large. Maximum size: {settings.MAX_FILE_SIZE_MB}MB",
                filename=file_name,
            )
        if doctor_id and not await self.doctors.get_by_id(doctor_id):
            raise DoctorNotFoundError(doctor_id)

        mime_type = mime_type or detect_mime_type(file_name)
        result = await self.storage.upload_bytes(storage_key_for(file_name), content, mime_type)

        stored = StoredFile(
            file_name=PurePath(file_name).name,
            storage_key=result.key,
            file_url=result.file_uri,
            file_type=mime_type,
            size_bytes=result.file_size,
            category=(category or "").strip() or DEFAULT_CATEGORY,
            tags=parse_tags(tags),
            owner_id=owner.id,
            doctor_id=doctor_id,
        )
        try:
            return await self.files.create(stored)
        except SQLAlchemyError:
            # No orphaned blob without a metadata row.
            await self.storage.delete_blob(result.key)
            raise

    async def list_files(
        self,
        *,
        owner_id: str | None = None,
        doctor_id: str | None = None,
        category: str | None = None,
    ) -> Sequence[StoredFile]:
        return await self.files.search(owner_id=owner_id, doctor_id=doctor_id, category=category)

    async def share(self, owner: User, file_id: str | None, email: str | None) -> tuple[StoredFile, bool]:
        """
        Add the user with ``email`` to the file's share set.

        Returns:
            (file, already_shared)

        Raises:
            ForbiddenError: requester does not own the file
        """
        if not file_id or not email:
            raise BadRequestError(message="File ID and email are required", error_code="MISSING_REQUIRED_FIELDS")

        stored = await self.files.get_by_id(file_id)
        if not stored:
            raise StoredFileNotFoundError(file_id)
        if stored.owner_id != owner.id:
            raise ForbiddenError(message="Only the owner can share this file")

        target = await self.users.get_by_email(email)
        if not target:
            raise UserNotFoundError(email)

        added = await self.files.share(stored, target)
        return stored, not added

    async def shared_with(self, user: User) -> Sequence[StoredFile]:
        return await self.files.shared_with(user.id)

    async def download(self, key: str | None) -> tuple[bytes, BlobMetadata]:
        if not key:
            raise BadRequestError(message="Missing file key", error_code="MISSING_REQUIRED_FIELDS")
        return await self.storage.get_blob(key)
