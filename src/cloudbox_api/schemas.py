####################################
# --- Request/response schemas --- #
####################################

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
)


class FileRecord(BaseModel):
    """Authoritative metadata for one stored blob."""
    id: str = Field(alias="_id", description="Opaque record identifier.")
    key: str = Field(
        description="Blob store object key.",
        json_schema_extra={"example": "1718000000000-report.pdf"},
    )
    size: int = Field(ge=0, description="The size of the file in bytes.")
    content_type: str = Field(alias="contentType", description="MIME type given at upload time.")
    url: str = Field(description="Resolvable location of the blob.")
    is_favorite: bool = Field(False, alias="isFavorite")
    is_trash: bool = Field(False, alias="isTrash")
    created_at: datetime = Field(alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)


class NormalizedFile(BaseModel):
    """One entry of `GET /api/list`, in the field names clients expect."""
    key: str = Field(alias="Key")
    size: int = Field(alias="Size")
    last_modified: datetime = Field(alias="LastModified")
    is_favorite: bool = Field(False, alias="isFavorite")
    is_trash: bool = Field(False, alias="isTrash")
    id: Optional[str] = Field(None, alias="_id")
    content_type: Optional[str] = Field(None, alias="ContentType")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "Key": "1718000000000-report.pdf",
                "Size": 512,
                "LastModified": "2024-06-10T06:13:20Z",
                "isFavorite": False,
                "isTrash": False,
                "_id": "3f1c2a9e8d7b4c6a9e0f1a2b3c4d5e6f",
                "ContentType": "application/pdf",
            }
        },
    )

    @classmethod
    def from_record(cls, record: FileRecord) -> "NormalizedFile":
        """Build from the metadata-native form."""
        return cls(
            key=record.key,
            size=record.size,
            last_modified=record.created_at,
            is_favorite=record.is_favorite,
            is_trash=record.is_trash,
            id=record.id,
            content_type=record.content_type,
        )

    @classmethod
    def from_blob_object(cls, blob_object: Dict[str, Any]) -> "NormalizedFile":
        """Build from the blob-native form (an S3 `list_objects_v2` entry).

        Blobs carry no flags, so both default to false.
        """
        return cls(
            key=blob_object["Key"],
            size=blob_object["Size"],
            last_modified=blob_object["LastModified"],
        )


class ListFilesResponse(BaseModel):
    """Response model for `GET /api/list`."""
    items: List[NormalizedFile]


class UploadFileResponse(BaseModel):
    """Response model for `POST /api/upload`."""
    message: str = Field(description="A message about the operation.")
    file: FileRecord


class UpdateFlagsRequest(BaseModel):
    """Request body for `PUT /api/update/:id`. Only provided flags change."""
    is_favorite: Optional[bool] = Field(None, alias="isFavorite")
    is_trash: Optional[bool] = Field(None, alias="isTrash")

    model_config = ConfigDict(populate_by_name=True)


class UpdateFlagsResponse(BaseModel):
    success: bool = True


class DeleteFileResponse(BaseModel):
    """Response model for `DELETE /api/delete`."""
    message: str = "Deleted"


class DownloadUrlResponse(BaseModel):
    """Response model for `GET /api/download`."""
    url: str
    expires_at: datetime = Field(alias="expiresAt")

    model_config = ConfigDict(populate_by_name=True)


class CheckoutSessionResponse(BaseModel):
    """Response model for `POST /api/create-checkout-session`."""
    url: str
