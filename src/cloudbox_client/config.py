from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """
    Settings for the CloudBox client.

    Read from `CLOUDBOX_*` environment variables or a `.env` file.
    """

    files_api_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the CloudBox API"
    )

    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout in seconds for non-upload requests"
    )

    upload_chunk_size: int = Field(
        default=64 * 1024,
        gt=0,
        description="Bytes sent per chunk while streaming an upload"
    )

    state_path: str = Field(
        default="~/.cloudbox/session.json",
        description="Where the local login identity is persisted"
    )

    storage_limit_bytes: int = Field(
        default=100 * 1024 * 1024,
        description="Storage limit shown next to usage; not enforced"
    )

    notification_ttl_seconds: float = Field(
        default=4.0,
        gt=0,
        description="How long a notification stays visible unless dismissed"
    )

    model_config = SettingsConfigDict(
        env_prefix="CLOUDBOX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_client_settings() -> ClientSettings:
    return ClientSettings()
