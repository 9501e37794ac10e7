"""
File record service for metadata store operations.
Owns the FileRecord documents: identifiers, creation timestamps, flag updates and ordering.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from metadata_store import FILES_COLLECTION, get_nosql_adapter, init_db
from metadata_store.local import DocumentAdapter

from cloudbox_api.config.settings import Settings
from cloudbox_api.errors import NotFoundError
from cloudbox_api.schemas import FileRecord

logger = logging.getLogger(__name__)

# Newest first; equal timestamps fall back to identifier order
DEFAULT_ORDER = [("createdAt", -1), ("_id", 1)]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FileService:
    """Service for managing file record documents"""

    def __init__(self, adapter: DocumentAdapter, clock=_utcnow):
        self.adapter = adapter
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "FileService":
        adapter = get_nosql_adapter(
            backend=settings.metadata_backend,
            db_path=settings.sqlite_db_path,
            mongodb_uri=settings.mongodb_uri,
        )
        return cls(adapter)

    def init(self) -> None:
        init_db(self.adapter)

    def _to_document(self, record: FileRecord) -> Dict[str, Any]:
        created_at = record.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return {
            "_id": record.id,
            "key": record.key,
            "size": record.size,
            "contentType": record.content_type,
            "url": record.url,
            "isFavorite": record.is_favorite,
            "isTrash": record.is_trash,
            # fixed-width timestamps keep lexical and chronological order identical
            "createdAt": created_at.astimezone(timezone.utc).isoformat(timespec="microseconds"),
        }

    def insert(self, key: str, size: int, content_type: str, url: str) -> FileRecord:
        """Create a record for a blob that has already been written."""
        record = FileRecord(
            id=uuid.uuid4().hex,
            key=key,
            size=size,
            content_type=content_type,
            url=url,
            is_favorite=False,
            is_trash=False,
            created_at=self._clock(),
        )
        self.adapter.create_document(FILES_COLLECTION, self._to_document(record))
        logger.info(f"Created file record {record.id} for key {key}")
        return record

    def get(self, file_id: str) -> Optional[FileRecord]:
        document = self.adapter.get_document(FILES_COLLECTION, file_id)
        return FileRecord.model_validate(document) if document else None

    def find_by_key(self, key: str) -> Optional[FileRecord]:
        document = self.adapter.find_one(FILES_COLLECTION, {"key": key})
        return FileRecord.model_validate(document) if document else None

    def list(self) -> List[FileRecord]:
        """All records, newest first."""
        documents = self.adapter.query_documents(FILES_COLLECTION, sort=DEFAULT_ORDER)
        return [FileRecord.model_validate(document) for document in documents]

    def keys(self) -> set:
        return {record.key for record in self.list()}

    def update_flags(
        self,
        file_id: str,
        is_favorite: Optional[bool] = None,
        is_trash: Optional[bool] = None,
    ) -> FileRecord:
        """Change only the flags that were given."""
        fields: Dict[str, Any] = {}
        if is_favorite is not None:
            fields["isFavorite"] = is_favorite
        if is_trash is not None:
            fields["isTrash"] = is_trash

        if not fields:
            record = self.get(file_id)
            if record is None:
                raise NotFoundError(f"File {file_id} not found")
            return record

        updated = self.adapter.update_document_fields(FILES_COLLECTION, file_id, fields)
        if updated is None:
            raise NotFoundError(f"File {file_id} not found")
        logger.info(f"Updated flags of {file_id}: {fields}")
        return FileRecord.model_validate(updated)

    def delete_by_id(self, file_id: str) -> FileRecord:
        removed = self.adapter.delete_document(FILES_COLLECTION, file_id)
        if removed is None:
            raise NotFoundError(f"File {file_id} not found")
        return FileRecord.model_validate(removed)
