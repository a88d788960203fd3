"""
Blob Storage Service.

Key-addressed object storage for uploaded patient files, doctor profile
images and exported prescription PDFs. Two interchangeable backends:

- Local filesystem (development and tests), files under BLOB_STORAGE_PATH
- AWS S3 via aioboto3, with presigned GET URLs for time-limited sharing

Callers choose the key; the backend never renames.
"""
from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Protocol
from urllib.parse import quote

import aioboto3
import aiofiles
from botocore.exceptions import BotoCoreError, ClientError

from ..core.exceptions import BadRequestError, StorageError, StoredFileNotFoundError

logger = logging.getLogger(__name__)


class StorageBackend(str, Enum):
    LOCAL = "local"
    S3 = "s3"


@dataclass(frozen=True)
class BlobMetadata:
    """Metadata for a stored blob."""

    key: str
    file_size: int
    mime_type: str
    created_at: datetime
    storage_backend: StorageBackend


@dataclass(frozen=True)
class UploadResult:
    """Result of a blob upload operation."""

    key: str
    file_uri: str
    file_size: int
    mime_type: str


def detect_mime_type(file_name: str) -> str:
    mime_type, _ = mimetypes.guess_type(file_name)
    return mime_type or "application/octet-stream"


def normalize_key(key: str) -> str:
    """Reject absolute keys and parent traversal."""
    cleaned = key.strip().lstrip("/")
    parts = PurePosixPath(cleaned).parts
    if not cleaned or any(part in ("..", ".") for part in parts):
        raise BadRequestError(message="Invalid file key", error_code="INVALID_KEY")
    return "/".join(parts)


class BlobStorage(Protocol):
    """Interface every backend implements."""

    backend: StorageBackend

    async def upload_bytes(self, key: str, content: bytes, mime_type: str | None = None) -> UploadResult: ...

    async def get_blob(self, key: str) -> tuple[bytes, BlobMetadata]: ...

    async def delete_blob(self, key: str) -> bool: ...

    async def blob_exists(self, key: str) -> bool: ...

    async def share_url(self, key: str, expires_in: int) -> str: ...


class LocalBlobStorageService:
    """
    Local filesystem blob storage.

    Keys map directly to paths below ``base_path``. Download URIs point at
    the API's own download endpoint; they do not expire.
    """

    backend = StorageBackend.LOCAL

    def __init__(self, base_path: str | Path, base_url: str = "/api/v1/files/download") -> None:
        self.base_path = Path(base_path)
        self.base_url = base_url.rstrip("/")
        self.base_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"Blob storage initialized at: {self.base_path.absolute()}")

    def _path_for(self, key: str) -> Path:
        return self.base_path / normalize_key(key)

    def _uri_for(self, key: str) -> str:
        return f"{self.base_url}?key={quote(normalize_key(key))}"

    async def upload_bytes(self, key: str, content: bytes, mime_type: str | None = None) -> UploadResult:
        path = self._path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error(f"Local blob write failed: key={key}, error={e}")
            raise StorageError(key=key) from e

        logger.info(f"Stored blob locally: key={key}, size={len(content)}")
        return UploadResult(
            key=normalize_key(key),
            file_uri=self._uri_for(key),
            file_size=len(content),
            mime_type=mime_type or detect_mime_type(key),
        )

    async def get_blob(self, key: str) -> tuple[bytes, BlobMetadata]:
        path = self._path_for(key)
        if not path.is_file():
            raise StoredFileNotFoundError(key)

        try:
            async with aiofiles.open(path, "rb") as f:
                content = await f.read()
        except OSError as e:
            raise StorageError(key=key) from e

        metadata = BlobMetadata(
            key=normalize_key(key),
            file_size=len(content),
            mime_type=detect_mime_type(key),
            created_at=datetime.fromtimestamp(path.stat().st_mtime, tz=UTC),
            storage_backend=self.backend,
        )
        return content, metadata

    async def delete_blob(self, key: str) -> bool:
        path = self._path_for(key)
        if not path.is_file():
            return False
        path.unlink()
        logger.info(f"Deleted local blob: key={key}")
        return True

    async def blob_exists(self, key: str) -> bool:
        return self._path_for(key).is_file()

    async def share_url(self, key: str, expires_in: int) -> str:
        if not await self.blob_exists(key):
            raise StoredFileNotFoundError(key)
        return self._uri_for(key)


class S3BlobStorageService:
    """
    AWS S3 blob storage.

    Keys are stored as ``{prefix}/{key}`` when a prefix is configured.
    Share URLs are presigned GETs.
    """

    backend = StorageBackend.S3

    def __init__(
        self,
        bucket_name: str,
        access_key_id: str,
        secret_access_key: str,
        region: str = "us-east-1",
        prefix: str = "",
    ) -> None:
        self.bucket_name = bucket_name
        self.region = region
        self.prefix = prefix.strip("/")
        self.session = aioboto3.Session(
            aws_access_key_id=access_key_id or None,
            aws_secret_access_key=secret_access_key or None,
            region_name=region,
        )
        logger.info(f"S3 blob storage initialized: bucket={bucket_name}, region={region}, prefix={prefix}")

    def _s3_key(self, key: str) -> str:
        key = normalize_key(key)
        return f"{self.prefix}/{key}" if self.prefix else key

    def _public_uri(self, key: str) -> str:
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{self._s3_key(key)}"

    async def upload_bytes(self, key: str, content: bytes, mime_type: str | None = None) -> UploadResult:
        s3_key = self._s3_key(key)
        mime_type = mime_type or detect_mime_type(key)
        try:
            async with self.session.client("s3") as s3_client:
                await s3_client.put_object(
                    Bucket=self.bucket_name,
                    Key=s3_key,
                    Body=content,
                    ContentType=mime_type,
                )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 upload failed: key={s3_key}, error={e}")
            raise StorageError(key=key) from e

        logger.info(f"Uploaded to S3: key={s3_key}, size={len(content)}")
        return UploadResult(
            key=normalize_key(key),
            file_uri=self._public_uri(key),
            file_size=len(content),
            mime_type=mime_type,
        )

    async def get_blob(self, key: str) -> tuple[bytes, BlobMetadata]:
        s3_key = self._s3_key(key)
        try:
            async with self.session.client("s3") as s3_client:
                response = await s3_client.get_object(Bucket=self.bucket_name, Key=s3_key)
                content = await response["Body"].read()
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                raise StoredFileNotFoundError(key) from e
            raise StorageError(key=key) from e
        except BotoCoreError as e:
            raise StorageError(key=key) from e

        metadata = BlobMetadata(
            key=normalize_key(key),
            file_size=response.get("ContentLength", len(content)),
            mime_type=response.get("ContentType") or detect_mime_type(key),
            created_at=response.get("LastModified") or datetime.now(UTC),
            storage_backend=self.backend,
        )
        return content, metadata

    async def delete_blob(self, key: str) -> bool:
        s3_key = self._s3_key(key)
        try:
            async with self.session.client("s3") as s3_client:
                await s3_client.delete_object(Bucket=self.bucket_name, Key=s3_key)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 deletion failed: {e}")
            return False
        logger.info(f"Deleted from S3: key={s3_key}")
        return True

    async def blob_exists(self, key: str) -> bool:
        try:
            async with self.session.client("s3") as s3_client:
                await s3_client.head_object(Bucket=self.bucket_name, Key=self._s3_key(key))
        except (ClientError, BotoCoreError):
            return False
        return True

    async def share_url(self, key: str, expires_in: int) -> str:
        try:
            async with self.session.client("s3") as s3_client:
                return await s3_client.generate_presigned_url(
                    "get_object",
                    Params={"Bucket": self.bucket_name, "Key": self._s3_key(key)},
                    ExpiresIn=expires_in,
                )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Presigned URL generation failed: key={key}, error={e}")
            raise StorageError(message="Could not create download link", key=key) from e


class BlobStorageFactory:
    """Selects the storage backend from STORAGE_BACKEND."""

    @staticmethod
    def create_blob_service(settings) -> LocalBlobStorageService | S3BlobStorageService:
        backend = settings.STORAGE_BACKEND.lower()

        if backend == StorageBackend.LOCAL.value:
            return LocalBlobStorageService(
                base_path=settings.BLOB_STORAGE_PATH,
                base_url=settings.BLOB_BASE_URL,
            )

        if backend == StorageBackend.S3.value:
            if not settings.AWS_S3_BUCKET:
                raise ValueError("AWS_S3_BUCKET is required when STORAGE_BACKEND=s3.")
            return S3BlobStorageService(
                bucket_name=settings.AWS_S3_BUCKET,
                access_key_id=settings.AWS_ACCESS_KEY_ID,
                secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                region=settings.AWS_REGION,
                prefix=settings.AWS_S3_PREFIX,
            )

        raise ValueError(f"Invalid STORAGE_BACKEND: '{backend}'. Must be 'local' or 's3'.")


_blob_storage_instance: LocalBlobStorageService | S3BlobStorageService | None = None


def get_blob_storage_service() -> LocalBlobStorageService | S3BlobStorageService:
    """Get or create the blob storage singleton (FastAPI dependency)."""
    global _blob_storage_instance

    if _blob_storage_instance is None:
        from ..core.config import get_settings

        _blob_storage_instance = BlobStorageFactory.create_blob_service(get_settings())

    return _blob_storage_instance
