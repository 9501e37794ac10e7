"""
HTTP client for the CloudBox API.

Every call maps a non-2xx response or a transport failure to `ApiError`,
carrying the status code (0 when no response arrived) and the server's
`detail` message where there is one.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests
from pydantic import TypeAdapter
from urllib3 import encode_multipart_formdata

from cloudbox_client.config import ClientSettings
from cloudbox_client.models import RemoteFile
from cloudbox_client.progress import ProgressBody, UploadProgressTracker

logger = logging.getLogger(__name__)

_REMOTE_FILES = TypeAdapter(List[RemoteFile])


class ApiError(Exception):
    """A request to the API did not succeed."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class DownloadLinkExpired(Exception):
    """A signed download URL was used after its expiry."""


@dataclass(frozen=True)
class DownloadLink:
    url: str
    expires_at: datetime

    def ensure_valid(self, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        if now >= self.expires_at:
            raise DownloadLinkExpired(f"Download link expired at {self.expires_at.isoformat()}")
        return self.url


class FilesApiClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        upload_chunk_size: int = 64 * 1024,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.upload_chunk_size = upload_chunk_size
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> "FilesApiClient":
        return cls(
            base_url=settings.files_api_url,
            timeout=settings.request_timeout,
            upload_chunk_size=settings.upload_chunk_size,
        )

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        kwargs.setdefault("timeout", self.timeout)
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.error(f"{method} {url} failed: {str(e)}")
            raise ApiError(0, str(e)) from e

        if not response.ok:
            try:
                detail = response.json().get("detail", response.reason)
            except ValueError:
                detail = response.reason
            logger.warning(f"{method} {url} returned {response.status_code}: {detail}")
            raise ApiError(response.status_code, str(detail))

        try:
            return response.json()
        except ValueError as e:
            raise ApiError(response.status_code, "Response was not JSON") from e

    def list_files(self) -> List[RemoteFile]:
        payload = self._request("GET", "/api/list")
        return _REMOTE_FILES.validate_python(payload.get("items", []))

    def upload_file(
        self,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
        tracker: Optional[UploadProgressTracker] = None,
    ) -> Dict[str, Any]:
        """Send one file as `multipart/form-data`, reporting progress as chunks go out.

        The upload has no timeout; it ends when the server answers or the
        connection drops.
        """
        body, multipart_type = encode_multipart_formdata(
            {"file": (filename, data, content_type or "application/octet-stream")}
        )
        payload = self._request(
            "POST",
            "/api/upload",
            data=ProgressBody(body, tracker, self.upload_chunk_size),
            headers={"Content-Type": multipart_type},
            timeout=None,
        )
        return payload["file"]

    def update_flags(
        self,
        file_id: str,
        is_favorite: Optional[bool] = None,
        is_trash: Optional[bool] = None,
    ) -> None:
        body: Dict[str, bool] = {}
        if is_favorite is not None:
            body["isFavorite"] = is_favorite
        if is_trash is not None:
            body["isTrash"] = is_trash
        self._request("PUT", f"/api/update/{file_id}", json=body)

    def delete_file(self, file_id: str) -> None:
        self._request("DELETE", f"/api/delete/{file_id}")

    def delete_by_key(self, key: str) -> None:
        self._request("DELETE", "/api/delete", params={"key": key})

    def download_url(self, key: str) -> DownloadLink:
        payload = self._request("GET", "/api/download", params={"key": key})
        expires_at = datetime.fromisoformat(payload["expiresAt"].replace("Z", "+00:00"))
        return DownloadLink(url=payload["url"], expires_at=expires_at)

    def create_checkout_session(self) -> str:
        return self._request("POST", "/api/create-checkout-session")["url"]
