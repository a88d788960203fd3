"""Stored file schemas."""
from __future__ import annotations

from datetime import datetime

from .common import ORMModel, RequestModel
from .doctor import DoctorSummary
from .user import UserSummary


class FileShareRequest(RequestModel):
    file_id: str | None = None
    email: str | None = None


class StoredFileResponse(ORMModel):
    id: str
    file_name: str
    storage_key: str
    file_url: str
    file_type: str | None = None
    size_bytes: int
    category: str
    tags: list[str]
    owner: UserSummary
    doctor: DoctorSummary | None = None
    shared_with: list[UserSummary]
    upload_date: datetime


class FileList(ORMModel):
    files: list[StoredFileResponse]


class FileShareResult(ORMModel):
    file: StoredFileResponse
    already_shared: bool
