"""Client-side view of the files the API returns."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RemoteFile(BaseModel):
    """One entry of the cached file list, parsed from `GET /api/list`."""
    key: str = Field(alias="Key")
    size: int = Field(0, alias="Size")
    last_modified: datetime = Field(alias="LastModified")
    is_favorite: bool = Field(False, alias="isFavorite")
    is_trash: bool = Field(False, alias="isTrash")
    id: Optional[str] = Field(None, alias="_id")
    content_type: Optional[str] = Field(None, alias="ContentType")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def file_id(self) -> str:
        """Identifier used for updates; blob-only entries fall back to their key."""
        return self.id or self.key
