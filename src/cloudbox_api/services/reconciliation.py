"""
Reconciliation service: keeps the blob store and the metadata store in step.

Upload writes the blob and then its record; permanent delete removes both;
flag updates touch metadata only. There is no transaction spanning the two
stores. The partial-failure outcomes are:

* upload: blob written, record insert failed -> orphaned blob, logged with its key;
* permanent delete: blob delete failed, record removed anyway -> orphaned blob, logged.

`find_orphaned_blobs` reports such keys; deleting them is left to an operator.
"""

import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional

from cloudbox_api.adapters.storage import S3BlobStore, SignedUrl
from cloudbox_api.db_layer import FileService
from cloudbox_api.errors import (
    CloudBoxError,
    NotFoundError,
    StoreWriteError,
    UploadFailed,
    ValidationError,
)
from cloudbox_api.schemas import FileRecord, NormalizedFile
from cloudbox_api.services.billing import BillingClient, PlanDescriptor
from cloudbox_api.utils.decorators import log_execution_time

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class UploadPhase(str, Enum):
    """States of the two-phase upload"""
    BLOB_PENDING = 'blob_pending'
    BLOB_WRITTEN = 'blob_written'
    METADATA_PENDING = 'metadata_pending'
    COMMITTED = 'committed'
    FAILED = 'failed'


class ReconciliationService:
    """Orchestrates blob and metadata operations behind the HTTP surface."""

    def __init__(
        self,
        blob_store: S3BlobStore,
        file_service: FileService,
        billing_client: BillingClient,
        plan: PlanDescriptor,
        orphan_grace_seconds: int = 3600,
    ):
        self.blob_store = blob_store
        self.file_service = file_service
        self.billing_client = billing_client
        self.plan = plan
        self.orphan_grace_seconds = orphan_grace_seconds

    def _log_phase(self, filename: str, phase: UploadPhase, key: Optional[str] = None) -> None:
        logger.info(f"upload '{filename}' -> {phase.value}" + (f" (key={key})" if key else ""))

    @log_execution_time
    def upload(self, data: bytes, filename: str, content_type: Optional[str] = None) -> FileRecord:
        """Write the blob, then its record. Returns the created record."""
        if not filename:
            raise ValidationError("Filename is required")
        content_type = content_type or DEFAULT_CONTENT_TYPE

        self._log_phase(filename, UploadPhase.BLOB_PENDING)
        try:
            blob = self.blob_store.put(data, filename, content_type)
        except StoreWriteError as e:
            self._log_phase(filename, UploadPhase.FAILED)
            raise UploadFailed(f"Blob write failed for {filename}: {e}") from e
        self._log_phase(filename, UploadPhase.BLOB_WRITTEN, blob.key)

        self._log_phase(filename, UploadPhase.METADATA_PENDING, blob.key)
        try:
            record = self.file_service.insert(
                key=blob.key,
                size=blob.size,
                content_type=content_type,
                url=blob.location,
            )
        except Exception as e:
            self._log_phase(filename, UploadPhase.FAILED, blob.key)
            logger.error(f"Orphaned blob: metadata write failed for key {blob.key}: {str(e)}")
            raise UploadFailed(f"Metadata write failed for {blob.key}: {e}") from e

        self._log_phase(filename, UploadPhase.COMMITTED, blob.key)
        return record

    @log_execution_time
    def list_files(self) -> List[NormalizedFile]:
        """Every record in store order. Flag-based filtering is left to clients."""
        return [NormalizedFile.from_record(record) for record in self.file_service.list()]

    @log_execution_time
    def update_flags(
        self,
        file_id: str,
        is_favorite: Optional[bool] = None,
        is_trash: Optional[bool] = None,
    ) -> None:
        if is_favorite is None and is_trash is None:
            raise ValidationError("Provide at least one of isFavorite or isTrash")
        self.file_service.update_flags(file_id, is_favorite=is_favorite, is_trash=is_trash)

    def _delete_blob_best_effort(self, key: str) -> None:
        try:
            self.blob_store.delete(key)
        except CloudBoxError as e:
            logger.error(f"Orphaned blob: could not delete key {key}, removing its record anyway: {str(e)}")

    @log_execution_time
    def permanent_delete(self, file_id: str) -> None:
        """Remove a record and its blob. An unknown id is a successful no-op."""
        record = self.file_service.get(file_id)
        if record is None:
            logger.info(f"Permanent delete of {file_id}: no such record, nothing to do")
            return

        self._delete_blob_best_effort(record.key)
        try:
            self.file_service.delete_by_id(file_id)
        except NotFoundError:
            logger.info(f"Record {file_id} was already removed")

    @log_execution_time
    def permanent_delete_by_key(self, key: str) -> None:
        """Same as `permanent_delete`, addressed by blob key."""
        if not key:
            raise ValidationError("Missing key")

        record = self.file_service.find_by_key(key)
        if record is None:
            # blob-only object; deleting a missing key is a no-op too
            self._delete_blob_best_effort(key)
            return
        self.permanent_delete(record.id)

    @log_execution_time
    def resolve_download(self, key: str) -> SignedUrl:
        if not key:
            raise ValidationError("Missing key")
        return self.blob_store.resolve_download(key)

    @log_execution_time
    def find_orphaned_blobs(self, now: Optional[datetime] = None) -> List[NormalizedFile]:
        """Blobs with no record that are older than the grace period. Report only."""
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(seconds=self.orphan_grace_seconds)
        known_keys = self.file_service.keys()

        orphans = []
        for blob_object in self.blob_store.list_objects():
            entry = NormalizedFile.from_blob_object(blob_object)
            if entry.key in known_keys or entry.last_modified > cutoff:
                continue
            logger.warning(f"Orphaned blob {entry.key} ({entry.size} bytes, last modified {entry.last_modified})")
            orphans.append(entry)
        return orphans

    @log_execution_time
    def create_billing_session(self, plan: Optional[PlanDescriptor] = None) -> str:
        return self.billing_client.create_checkout_session(plan or self.plan)
