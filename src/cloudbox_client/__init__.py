"""Python client for the CloudBox API with an optimistic local cache."""

from cloudbox_client.api_client import ApiError, DownloadLink, FilesApiClient
from cloudbox_client.config import ClientSettings, get_client_settings
from cloudbox_client.notifications import Notifier
from cloudbox_client.session_store import SessionStore, UserIdentity
from cloudbox_client.sync_cache import FlagCommand, SyncCache

__all__ = [
    "ApiError",
    "ClientSettings",
    "DownloadLink",
    "FilesApiClient",
    "FlagCommand",
    "Notifier",
    "SessionStore",
    "SyncCache",
    "UserIdentity",
    "get_client_settings",
]
