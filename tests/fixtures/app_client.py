"""FastAPI test client wired to moto S3 and a temporary SQLite metadata store."""
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from cloudbox_api.config.settings import Settings
from cloudbox_api.main import create_app
from tests.consts import TEST_BUCKET_NAME, TEST_REGION


@pytest.fixture
def settings(db_path) -> Settings:
    # aws-prod keeps boto3 on its default endpoint, which moto intercepts
    return Settings(
        deployment_mode="aws-prod",
        aws_region=TEST_REGION,
        s3_bucket_name=TEST_BUCKET_NAME,
        metadata_backend="sqlite",
        sqlite_db_path=db_path,
        stripe_secret_key="sk_test_cloudbox",
        client_url="http://localhost:5173",
        presign_expiry_seconds=120,
    )


@pytest.fixture
def client(mocked_aws, settings) -> Generator[TestClient, None, None]:
    app = create_app(settings=settings)
    with TestClient(app) as client:
        yield client
