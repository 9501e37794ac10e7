# src/cloudbox_api/config/settings.py
from typing import List, Optional
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """
    Single source of truth for all application settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Usage:
        from cloudbox_api.config.settings import get_settings
        settings = get_settings()
        bucket_name = settings.s3_bucket_name
    """

    # Deployment Mode
    deployment_mode: str = Field(
        default="local-dev",
        description="Deployment mode: local-dev, aws-mock, or aws-prod"
    )

    # AWS Core Settings
    aws_region: str = Field(
        default="us-east-1",
        alias="AWS_DEFAULT_REGION"
    )

    aws_access_key_id: Optional[str] = Field(
        default=None,
        alias="AWS_ACCESS_KEY_ID"
    )

    aws_secret_access_key: Optional[str] = Field(
        default=None,
        alias="AWS_SECRET_ACCESS_KEY"
    )

    aws_endpoint_url: Optional[str] = Field(
        default=None,
        alias="AWS_ENDPOINT_URL"
    )

    # S3 Configuration
    s3_bucket_name: str = Field(
        default="cloudbox-files",
        description="S3 bucket holding uploaded file contents"
    )

    presign_expiry_seconds: int = Field(
        default=300,
        gt=0,
        le=7 * 24 * 3600,
        description="Validity window of presigned download URLs"
    )

    # Metadata store
    metadata_backend: str = Field(
        default="sqlite",
        description="Metadata store backend: sqlite or mongo"
    )

    sqlite_db_path: str = Field(
        default="cloudbox.db",
        description="SQLite database file used by the sqlite backend"
    )

    mongodb_uri: Optional[str] = Field(
        default=None,
        alias="MONGODB_URI",
        description="MongoDB connection string used by the mongo backend"
    )

    # Billing
    stripe_secret_key: Optional[str] = Field(
        default=None,
        alias="STRIPE_SECRET_KEY"
    )

    stripe_api_base: str = Field(
        default="https://api.stripe.com",
        description="Base URL of the payment provider API"
    )

    client_url: str = Field(
        default="http://localhost:5173",
        alias="CLIENT_URL",
        description="Where the checkout page redirects after success or cancel"
    )

    plan_name: str = Field(default="CloudBox Pro Plan - 50GB")
    plan_unit_amount: int = Field(default=900, gt=0, description="Plan price in the smallest currency unit")
    plan_currency: str = Field(default="usd")

    # HTTP
    cors_origins: List[str] = Field(
        default=["http://localhost:5173", "http://localhost:3000"],
        description="Origins allowed to call the API from a browser"
    )

    api_port: int = Field(default=8000)

    # Reconciliation
    orphan_grace_seconds: int = Field(
        default=3600,
        ge=0,
        description="Blobs younger than this are never reported as orphaned"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator('deployment_mode')
    @classmethod
    def validate_deployment_mode(cls, v):
        """Validate deployment mode is one of the allowed values."""
        valid_modes = ["local-dev", "aws-mock", "aws-prod"]
        if v not in valid_modes:
            raise ValueError(f"Invalid deployment_mode: {v}. Must be one of {valid_modes}")
        return v

    @field_validator('metadata_backend')
    @classmethod
    def validate_metadata_backend(cls, v):
        valid_backends = ["sqlite", "mongo"]
        if v not in valid_backends:
            raise ValueError(f"Invalid metadata_backend: {v}. Must be one of {valid_backends}")
        return v

    @model_validator(mode='after')
    def apply_local_mode_defaults(self):
        """Point local modes at a moto server with mock credentials unless told otherwise."""
        if self.deployment_mode in ["local-dev", "aws-mock"]:
            if self.aws_endpoint_url is None:
                self.aws_endpoint_url = "http://localhost:5000"
            if self.aws_access_key_id is None:
                self.aws_access_key_id = "mock"
            if self.aws_secret_access_key is None:
                self.aws_secret_access_key = "mock"
        if self.metadata_backend == "mongo" and not self.mongodb_uri:
            raise ValueError("mongodb_uri is required when metadata_backend is 'mongo'")
        return self

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
