"""
File Endpoints.

Exposed routes (all under /api/v1/files):
  POST /upload           - Multipart upload owned by the caller
  GET  /list             - Files filtered by owner / doctor / category
  POST /share            - Owner shares a file with another user by email
  GET  /shared-with-me   - Files other users shared with the caller
  GET  /download         - Stream a blob as an attachment

Download is addressed by storage key and needs no session: local share
links for exported prescriptions point here.
"""
from __future__ import annotations

from typing import Annotated, Any
from urllib.parse import quote

import structlog
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import Response

from ....core.rbac import CurrentUser
from ....core.responses import GenericResponse
from ....core.security import require_authentication
from ....db.session import DbSession
from ....schemas.file import FileList, FileShareRequest, FileShareResult, StoredFileResponse
from ....services.blob_storage_service import get_blob_storage_service
from ....services.file_service import FileService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/files")


def content_disposition(filename: str) -> str:
    """Attachment header; non-ASCII names go in the RFC 5987 ``filename*`` form."""
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


def _get_file_service(
    db: DbSession,
    storage: Annotated[Any, Depends(get_blob_storage_service)],
) -> FileService:
    return FileService(db, storage)


FileServiceDep = Annotated[FileService, Depends(_get_file_service)]


@router.post(
    "/upload",
    response_model=GenericResponse[StoredFileResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Upload a file",
    responses={400: {"description": "Missing, empty or oversized file"}},
)
async def upload_file(
    file: Annotated[UploadFile, File(description="File to store")],
    owner: CurrentUser,
    service: FileServiceDep,
    category: Annotated[str | None, Form()] = None,
    doctor_id: Annotated[str | None, Form()] = None,
    tags: Annotated[str | None, Form(description="Comma-separated tags")] = None,
) -> GenericResponse[StoredFileResponse]:
    content = await file.read()
    logger.info("file_upload_received", size_bytes=len(content), content_type=file.content_type)

    stored = await service.upload(
        owner,
        file_name=file.filename,
        content=content,
        mime_type=file.content_type,
        category=category,
        doctor_id=doctor_id,
        tags=tags,
    )
    return GenericResponse(
        message="File uploaded successfully",
        data=StoredFileResponse.model_validate(stored),
    )


@router.get(
    "/list",
    response_model=GenericResponse[FileList],
    summary="List files",
    dependencies=[Depends(require_authentication)],
)
async def list_files(
    service: FileServiceDep,
    owner_id: str | None = Query(default=None),
    doctor_id: str | None = Query(default=None),
    category: str | None = Query(default=None),
) -> GenericResponse[FileList]:
    files = await service.list_files(owner_id=owner_id, doctor_id=doctor_id, category=category)
    return GenericResponse(
        message=f"Found {len(files)} file(s)",
        data=FileList(files=[StoredFileResponse.model_validate(f) for f in files]),
    )


@router.post(
    "/share",
    response_model=GenericResponse[FileShareResult],
    summary="Share a file",
    responses={
        403: {"description": "Caller does not own the file"},
        404: {"description": "File or target user not found"},
    },
)
async def share_file(
    body: FileShareRequest,
    owner: CurrentUser,
    service: FileServiceDep,
) -> GenericResponse[FileShareResult]:
    stored, already_shared = await service.share(owner, body.file_id, body.email)
    return GenericResponse(
        message="File already shared with this user" if already_shared else "File shared successfully",
        data=FileShareResult(
            file=StoredFileResponse.model_validate(stored),
            already_shared=already_shared,
        ),
    )


@router.get(
    "/shared-with-me",
    response_model=GenericResponse[FileList],
    summary="Files shared with the caller",
)
async def shared_with_me(
    user: CurrentUser,
    service: FileServiceDep,
) -> GenericResponse[FileList]:
    files = await service.shared_with(user)
    return GenericResponse(
        message=f"Found {len(files)} shared file(s)",
        data=FileList(files=[StoredFileResponse.model_validate(f) for f in files]),
    )


@router.get(
    "/download",
    summary="Download a file",
    response_class=Response,
    responses={
        200: {"description": "File content"},
        404: {"description": "Blob not found"},
    },
)
async def download_file(
    service: FileServiceDep,
    key: str | None = Query(default=None, description="Storage key"),
) -> Response:
    content, metadata = await service.download(key)
    filename = metadata.key.rsplit("/", 1)[-1]
    return Response(
        content=content,
        media_type=metadata.mime_type,
        headers={"Content-Disposition": content_disposition(filename)},
    )
