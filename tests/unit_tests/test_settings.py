import pytest
from pydantic import ValidationError

from cloudbox_api.config.settings import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("AWS_ENDPOINT_URL", "AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "DEPLOYMENT_MODE", "MONGODB_URI"):
        monkeypatch.delenv(name, raising=False)


@pytest.mark.parametrize("mode", ["local-mock", "cloud", "production"])
def test_unknown_deployment_modes_are_rejected(mode):
    with pytest.raises(ValidationError):
        Settings(deployment_mode=mode)


def test_local_mode_points_at_moto_server():
    settings = Settings(deployment_mode="local-dev")
    assert settings.aws_endpoint_url == "http://localhost:5000"
    assert settings.aws_access_key_id == "mock"


def test_prod_mode_keeps_default_endpoint():
    assert Settings(deployment_mode="aws-prod").aws_endpoint_url is None


def test_mongo_backend_needs_uri():
    with pytest.raises(ValidationError):
        Settings(metadata_backend="mongo")
