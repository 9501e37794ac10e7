from tests.fixtures.app_client import client, settings  # noqa: F401
from tests.fixtures.db_client import adapter, db_path, file_service  # noqa: F401
from tests.fixtures.mocked_aws import blob_store, mocked_aws  # noqa: F401
