from typing import Optional

from fastapi import (
    APIRouter,
    Depends,
    File,
    Path,
    Query,
    UploadFile,
    status
)

from cloudbox_api.dependencies import get_reconciliation_service
from cloudbox_api.errors import ValidationError
from cloudbox_api.schemas import (
    DeleteFileResponse,
    DownloadUrlResponse,
    ListFilesResponse,
    UpdateFlagsRequest,
    UpdateFlagsResponse,
    UploadFileResponse,
)
from cloudbox_api.services import ReconciliationService

router = APIRouter()


@router.post(
    "/upload",
    response_model=UploadFileResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"description": "No file provided."},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"description": "Upload failed."},
    },
)
async def upload_file(
    file: Optional[UploadFile] = File(None, description="The file to upload"),
    service: ReconciliationService = Depends(get_reconciliation_service),
) -> UploadFileResponse:
    """
    Upload a file.

    Stores the bytes in the blob store under a timestamp-prefixed key, then
    creates its metadata record.
    """
    if file is None:
        raise ValidationError("No file provided")

    file_bytes = await file.read()
    record = service.upload(file_bytes, file.filename or "", file.content_type)
    return UploadFileResponse(message="Uploaded", file=record)


@router.get("/list", response_model=ListFilesResponse)
async def list_files(
    service: ReconciliationService = Depends(get_reconciliation_service),
) -> ListFilesResponse:
    """List every file, newest first, including trashed ones."""
    return ListFilesResponse(items=service.list_files())


@router.put(
    "/update/{file_id}",
    response_model=UpdateFlagsResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"description": "Neither flag was provided."},
        status.HTTP_404_NOT_FOUND: {"description": "File not found for the given `file_id`."},
    },
)
async def update_file_flags(
    payload: UpdateFlagsRequest,
    file_id: str = Path(..., description="The record identifier"),
    service: ReconciliationService = Depends(get_reconciliation_service),
) -> UpdateFlagsResponse:
    """Set `isFavorite` and/or `isTrash` on a file."""
    service.update_flags(file_id, is_favorite=payload.is_favorite, is_trash=payload.is_trash)
    return UpdateFlagsResponse(success=True)


@router.delete("/delete/{file_id}", response_model=DeleteFileResponse)
async def delete_file(
    file_id: str = Path(..., description="The record identifier"),
    service: ReconciliationService = Depends(get_reconciliation_service),
) -> DeleteFileResponse:
    """
    Permanently delete a file and its record.

    Deleting an unknown id succeeds, so retries are safe.
    """
    service.permanent_delete(file_id)
    return DeleteFileResponse(message="Deleted")


@router.delete(
    "/delete",
    response_model=DeleteFileResponse,
    responses={status.HTTP_400_BAD_REQUEST: {"description": "Missing key."}},
)
async def delete_file_by_key(
    key: Optional[str] = Query(None, description="Blob key of the file to delete"),
    service: ReconciliationService = Depends(get_reconciliation_service),
) -> DeleteFileResponse:
    """Permanently delete a file addressed by its blob key."""
    service.permanent_delete_by_key(key or "")
    return DeleteFileResponse(message="Deleted")


@router.get(
    "/download",
    response_model=DownloadUrlResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"description": "Missing key."},
        status.HTTP_404_NOT_FOUND: {"description": "No blob stored under `key`."},
    },
)
async def get_download_url(
    key: Optional[str] = Query(None, description="Blob key of the file to download"),
    service: ReconciliationService = Depends(get_reconciliation_service),
) -> DownloadUrlResponse:
    """Return a time-limited signed URL instead of the file bytes."""
    signed = service.resolve_download(key or "")
    return DownloadUrlResponse(url=signed.url, expires_at=signed.expires_at)
