"""
Client-side cache of the file list with optimistic flag updates.

A flag change is applied to the cached record at once as a `FlagCommand`
holding the forward patch and its inverse. When the server confirms, the
command is dropped; when it fails, the command is rolled back. Rollback only
touches fields that no later pending command has changed since, so commands
on other files, or newer commands on the same field, survive it.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from cloudbox_client.api_client import ApiError, DownloadLink, FilesApiClient
from cloudbox_client.config import ClientSettings
from cloudbox_client.models import RemoteFile
from cloudbox_client.notifications import NotificationKind, Notifier
from cloudbox_client.progress import UploadProgressTracker
from cloudbox_client.views import DEFAULT_STORAGE_LIMIT, StorageStats, Tab, derive_stats, derive_view

logger = logging.getLogger(__name__)

FLAG_FIELDS = ("is_favorite", "is_trash")

FlagPatch = Dict[str, bool]

ROLLBACK_MESSAGE = "Could not update file"


@dataclass(eq=False)
class FlagCommand:
    """One optimistic change: `forward` was applied, `inverse` undoes it."""
    file_id: str
    forward: FlagPatch
    inverse: FlagPatch


class SyncCache:
    def __init__(
        self,
        api: FilesApiClient,
        notifier: Optional[Notifier] = None,
        storage_limit_bytes: int = DEFAULT_STORAGE_LIMIT,
    ):
        self.api = api
        self.notifier = notifier or Notifier()
        self.storage_limit_bytes = storage_limit_bytes
        self.files: List[RemoteFile] = []
        self._pending: List[FlagCommand] = []
        self._upload: Optional[UploadProgressTracker] = None

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> "SyncCache":
        return cls(
            api=FilesApiClient.from_settings(settings),
            notifier=Notifier(ttl_seconds=settings.notification_ttl_seconds),
            storage_limit_bytes=settings.storage_limit_bytes,
        )

    @property
    def pending(self) -> List[FlagCommand]:
        return list(self._pending)

    def _find(self, file_id: str) -> RemoteFile:
        for f in self.files:
            if f.file_id == file_id:
                return f
        raise KeyError(file_id)

    def refresh(self) -> List[RemoteFile]:
        """Reload the list from the server. A failed load leaves an empty list."""
        try:
            self.files = self.api.list_files()
        except ApiError as e:
            logger.warning(f"Could not load file list: {e.detail}")
            self.files = []
        self._pending.clear()
        return self.files

    ###########################
    # --- Optimistic core --- #
    ###########################

    def apply_optimistic(self, file_id: str, patch: FlagPatch) -> FlagCommand:
        unknown = set(patch) - set(FLAG_FIELDS)
        if unknown:
            raise ValueError(f"Not a flag: {', '.join(sorted(unknown))}")

        record = self._find(file_id)
        command = FlagCommand(
            file_id=file_id,
            forward=dict(patch),
            inverse={name: getattr(record, name) for name in patch},
        )
        for name, value in patch.items():
            setattr(record, name, value)
        self._pending.append(command)
        return command

    def confirm(self, command: FlagCommand) -> None:
        if command in self._pending:
            self._pending.remove(command)

    def rollback(self, command: FlagCommand, message: str = ROLLBACK_MESSAGE) -> None:
        if command not in self._pending:
            return
        position = self._pending.index(command)
        later = [c for c in self._pending[position + 1:] if c.file_id == command.file_id]
        self._pending.remove(command)

        try:
            record = self._find(command.file_id)
        except KeyError:
            record = None

        for name, previous in command.inverse.items():
            superseding = next((c for c in later if name in c.forward), None)
            if superseding is not None:
                # a newer command now owns the field; undoing it must land on the pre-rollback value
                superseding.inverse[name] = previous
            elif record is not None and getattr(record, name) == command.forward[name]:
                setattr(record, name, previous)

        self.notifier.notify(message, NotificationKind.ERROR)

    def _run_flag_action(self, file_id: str, patch: FlagPatch, success: str, failure: str) -> bool:
        command = self.apply_optimistic(file_id, patch)
        try:
            self.api.update_flags(file_id, **patch)
        except ApiError as e:
            logger.error(f"Flag update {patch} on {file_id} failed: {e.detail}")
            self.rollback(command, failure)
            return False
        self.confirm(command)
        self.notifier.notify(success, NotificationKind.SUCCESS)
        return True

    ########################
    # --- User actions --- #
    ########################

    def toggle_favorite(self, file_id: str) -> bool:
        favorite = not self._find(file_id).is_favorite
        return self._run_flag_action(
            file_id,
            {"is_favorite": favorite},
            "Added to favorites" if favorite else "Removed from favorites",
            "Could not update favorites",
        )

    def move_to_trash(self, file_id: str) -> bool:
        return self._run_flag_action(file_id, {"is_trash": True}, "Moved to Trash", "Could not move file to Trash")

    def restore_from_trash(self, file_id: str) -> bool:
        return self._run_flag_action(file_id, {"is_trash": False}, "File Restored", "Could not restore file")

    def permanent_delete(self, file_id: str) -> bool:
        """Delete on the server first; the cached entry goes only once that succeeds."""
        record = self._find(file_id)
        try:
            self.api.delete_by_key(record.key)
        except ApiError as e:
            logger.error(f"Permanent delete of {record.key} failed: {e.detail}")
            self.notifier.notify("Could not delete file", NotificationKind.ERROR)
            return False

        self.files = [f for f in self.files if f.file_id != file_id]
        self._pending = [c for c in self._pending if c.file_id != file_id]
        self.notifier.notify("File permanently deleted", NotificationKind.NEUTRAL)
        return True

    def upload(self, data: bytes, filename: str, content_type: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Upload one file, then reload the list. Returns the created record, or None on failure."""
        tracker = UploadProgressTracker(filename)
        self._upload = tracker
        try:
            record = self.api.upload_file(data, filename, content_type, tracker=tracker)
        except ApiError as e:
            logger.error(f"Upload of '{filename}' failed: {e.detail}")
            if not tracker.abandoned:
                self.notifier.notify("Upload failed", NotificationKind.ERROR)
            return None
        finally:
            tracker.finish()
            self._upload = None

        if not tracker.abandoned:
            self.notifier.notify("Upload complete", NotificationKind.SUCCESS)
        self.refresh()
        return record

    @property
    def upload_progress(self) -> Optional[int]:
        """Percent of the in-flight upload, None when nothing is reporting."""
        if self._upload is None or not self._upload.active:
            return None
        return self._upload.percent

    def abandon_upload(self) -> None:
        if self._upload is not None:
            self._upload.abandon()

    def download_url(self, file_id: str) -> DownloadLink:
        record = self._find(file_id)
        try:
            return self.api.download_url(record.key)
        except ApiError:
            self.notifier.notify("Could not get download link", NotificationKind.ERROR)
            raise

    def view(self, tab: Tab = Tab.ALL, search: Optional[str] = None) -> List[RemoteFile]:
        return derive_view(self.files, tab, search)

    def stats(self) -> StorageStats:
        return derive_stats(self.files, self.storage_limit_bytes)
