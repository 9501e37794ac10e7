"""
Blob store adapter over S3.

Wraps the raw S3 functions with key generation, presigned downloads and the
error taxonomy the reconciliation service relies on.
"""

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import PurePosixPath
from typing import Callable, Iterator, Optional, Dict, Any
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from cloudbox_api.config.settings import Settings
from cloudbox_api.errors import BlobNotFoundError, DownloadUrlExpired, StoreReadError, StoreWriteError, ValidationError
from cloudbox_api.s3.delete_objects import delete_s3_object
from cloudbox_api.s3.read_objects import (
    generate_presigned_download_url,
    iter_s3_objects_metadata,
    object_exists_in_s3,
)
from cloudbox_api.s3.write_objects import upload_s3_object

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredBlob:
    """Result of a successful blob write."""
    key: str
    location: str
    size: int


@dataclass(frozen=True)
class SignedUrl:
    """A presigned download URL and the instant it stops working."""
    url: str
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at

    def ensure_valid(self, now: Optional[datetime] = None) -> str:
        """Return the URL, or raise once the validity window has passed. Never extends it."""
        if self.is_expired(now):
            raise DownloadUrlExpired(f"Signed URL expired at {self.expires_at.isoformat()}")
        return self.url


class KeyGenerator:
    """Issues `<ms-timestamp>-<filename>` keys with strictly increasing timestamps.

    If the clock has not moved past the last issued value the timestamp is
    bumped by one millisecond, so two uploads of the same filename never collide.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._last_ms = 0
        self._lock = threading.Lock()

    def next_timestamp(self) -> int:
        with self._lock:
            now_ms = int(self._clock() * 1000)
            self._last_ms = max(now_ms, self._last_ms + 1)
            return self._last_ms

    def make_key(self, filename: str) -> str:
        name = PurePosixPath(filename.replace("\\", "/")).name
        if not name:
            raise ValidationError("Filename is required")
        return f"{self.next_timestamp()}-{name}"


def create_s3_client(settings: Settings) -> "S3Client":
    """Create an S3 client for the configured deployment mode."""
    return boto3.client(
        "s3",
        region_name=settings.aws_region,
        endpoint_url=settings.aws_endpoint_url,
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
    )


class S3BlobStore:
    """Blob store adapter: put, resolve_download, delete and list over one bucket."""

    def __init__(
        self,
        bucket_name: str,
        s3_client: "S3Client",
        region: str = "us-east-1",
        endpoint_url: Optional[str] = None,
        presign_expiry_seconds: int = 300,
        key_generator: Optional[KeyGenerator] = None,
    ):
        self.bucket_name = bucket_name
        self.s3_client = s3_client
        self.region = region
        self.endpoint_url = endpoint_url
        self.presign_expiry_seconds = presign_expiry_seconds
        self.key_generator = key_generator or KeyGenerator()

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3BlobStore":
        return cls(
            bucket_name=settings.s3_bucket_name,
            s3_client=create_s3_client(settings),
            region=settings.aws_region,
            endpoint_url=settings.aws_endpoint_url,
            presign_expiry_seconds=settings.presign_expiry_seconds,
        )

    def _location(self, key: str) -> str:
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}/{quote(key)}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{quote(key)}"

    def put(self, data: bytes, filename: str, content_type: Optional[str] = None) -> StoredBlob:
        """Store bytes under a freshly generated key."""
        key = self.key_generator.make_key(filename)
        try:
            upload_s3_object(
                bucket_name=self.bucket_name,
                object_key=key,
                file_content=data,
                content_type=content_type,
                s3_client=self.s3_client,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error uploading '{key}' to bucket '{self.bucket_name}': {str(e)}")
            raise StoreWriteError(f"Could not write {key}: {e}") from e

        logger.info(f"Uploaded {len(data)} bytes to s3://{self.bucket_name}/{key}")
        return StoredBlob(key=key, location=self._location(key), size=len(data))

    def exists(self, key: str) -> bool:
        try:
            return object_exists_in_s3(self.bucket_name, key, s3_client=self.s3_client)
        except (BotoCoreError, ClientError) as e:
            raise StoreReadError(f"Could not check {key}: {e}") from e

    def resolve_download(self, key: str) -> SignedUrl:
        """Presign a GET for `key`, valid for `presign_expiry_seconds`."""
        if not self.exists(key):
            raise BlobNotFoundError(f"Blob {key} does not exist")
        try:
            expires_at = datetime.now(timezone.utc) + timedelta(seconds=self.presign_expiry_seconds)
            url = generate_presigned_download_url(
                self.bucket_name, key, self.presign_expiry_seconds, s3_client=self.s3_client
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error signing download for '{key}': {str(e)}")
            raise StoreReadError(f"Could not sign {key}: {e}") from e
        return SignedUrl(url=url, expires_at=expires_at)

    def delete(self, key: str) -> None:
        """Remove a blob. Deleting a missing key is a no-op."""
        try:
            delete_s3_object(self.bucket_name, key, s3_client=self.s3_client)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            if error_code in ("404", "NoSuchKey", "NotFound"):
                logger.info(f"Blob {key} already absent; nothing to delete")
                return
            raise StoreWriteError(f"Could not delete {key}: {e}") from e
        except BotoCoreError as e:
            raise StoreWriteError(f"Could not delete {key}: {e}") from e
        logger.info(f"Deleted s3://{self.bucket_name}/{key}")

    def list_objects(self) -> Iterator[Dict[str, Any]]:
        """Yield every object in blob-native form (`Key`, `Size`, `LastModified`)."""
        try:
            yield from iter_s3_objects_metadata(self.bucket_name, s3_client=self.s3_client)
        except (BotoCoreError, ClientError) as e:
            raise StoreReadError(f"Could not list bucket {self.bucket_name}: {e}") from e

    def check(self) -> None:
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
        except (BotoCoreError, ClientError) as e:
            raise StoreReadError(f"Bucket {self.bucket_name} unreachable: {e}") from e
