from unittest.mock import MagicMock

from fastapi import status
from fastapi.testclient import TestClient

from tests.consts import TEST_BUCKET_NAME

# Constants for testing
TEST_FILE_NAME = "test.txt"
TEST_FILE_CONTENT = b"Hello, world!"
TEST_FILE_CONTENT_TYPE = "text/plain"
TEST_PDF_NAME = "test.pdf"
TEST_PDF_CONTENT = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<</Root 1 0 R>>\n%%EOF"
TEST_PDF_CONTENT_TYPE = "application/pdf"


def upload(client: TestClient, name: str = TEST_FILE_NAME, content: bytes = TEST_FILE_CONTENT,
           content_type: str = TEST_FILE_CONTENT_TYPE) -> dict:
    response = client.post("/api/upload", files={"file": (name, content, content_type)})
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["message"] == "Uploaded"
    return body["file"]


def list_items(client: TestClient) -> list:
    response = client.get("/api/list")
    assert response.status_code == status.HTTP_200_OK
    return response.json()["items"]


def test_upload_then_list(client: TestClient, mocked_aws):
    record = upload(client, TEST_PDF_NAME, TEST_PDF_CONTENT, TEST_PDF_CONTENT_TYPE)

    assert record["key"].endswith("-test.pdf")
    assert record["size"] == len(TEST_PDF_CONTENT)
    assert record["contentType"] == TEST_PDF_CONTENT_TYPE
    assert record["isFavorite"] is False
    assert record["isTrash"] is False
    assert record["_id"]
    assert record["createdAt"]

    items = list_items(client)
    assert len(items) == 1
    item = items[0]
    assert item["Key"] == record["key"]
    assert item["Size"] == len(TEST_PDF_CONTENT)
    assert item["_id"] == record["_id"]
    assert item["ContentType"] == TEST_PDF_CONTENT_TYPE
    assert item["isFavorite"] is False
    assert item["isTrash"] is False
    assert item["LastModified"]

    stored = mocked_aws.get_object(Bucket=TEST_BUCKET_NAME, Key=record["key"])
    assert stored["Body"].read() == TEST_PDF_CONTENT


def test_empty_file_scenario(client: TestClient):
    """Upload a 0-byte a.txt, favorite it, trash it, restore it, then delete it."""
    record = upload(client, "a.txt", b"", "text/plain")
    assert record["size"] == 0
    file_id = record["_id"]

    item = list_items(client)[0]
    assert item["Key"] == record["key"]
    assert item["Size"] == 0
    assert item["isFavorite"] is False
    assert item["isTrash"] is False

    assert client.put(f"/api/update/{file_id}", json={"isFavorite": True}).json() == {"success": True}
    assert client.put(f"/api/update/{file_id}", json={"isTrash": True}).json() == {"success": True}
    item = list_items(client)[0]
    assert item["isFavorite"] is True
    assert item["isTrash"] is True

    assert client.put(f"/api/update/{file_id}", json={"isTrash": False}).status_code == status.HTTP_200_OK
    item = list_items(client)[0]
    assert item["isFavorite"] is True
    assert item["isTrash"] is False

    response = client.delete(f"/api/delete/{file_id}")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"message": "Deleted"}
    assert list_items(client) == []


def test_same_filename_twice_lists_two_files(client: TestClient):
    first = upload(client, "photo.png", b"one", "image/png")
    second = upload(client, "photo.png", b"two", "image/png")

    assert first["key"] != second["key"]
    items = list_items(client)
    assert {i["Key"] for i in items} == {first["key"], second["key"]}
    # newest first
    assert items[0]["Key"] == second["key"]


def test_double_delete_succeeds(client: TestClient, mocked_aws):
    record = upload(client)

    first = client.delete(f"/api/delete/{record['_id']}")
    second = client.delete(f"/api/delete/{record['_id']}")

    assert first.status_code == status.HTTP_200_OK
    assert second.status_code == status.HTTP_200_OK
    assert list_items(client) == []
    assert mocked_aws.list_objects_v2(Bucket=TEST_BUCKET_NAME).get("KeyCount", 0) == 0


def test_delete_by_key(client: TestClient):
    record = upload(client)

    response = client.delete("/api/delete", params={"key": record["key"]})

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"message": "Deleted"}
    assert list_items(client) == []


def test_flag_update_leaves_other_flag_alone(client: TestClient):
    record = upload(client)

    client.put(f"/api/update/{record['_id']}", json={"isTrash": True})
    client.put(f"/api/update/{record['_id']}", json={"isFavorite": True})
    client.put(f"/api/update/{record['_id']}", json={"isFavorite": False})

    item = list_items(client)[0]
    assert item["isTrash"] is True
    assert item["isFavorite"] is False


def test_download_returns_signed_url(client: TestClient):
    record = upload(client)

    response = client.get("/api/download", params={"key": record["key"]})

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert record["key"] in body["url"]
    assert body["expiresAt"]


def test_create_checkout_session(client: TestClient):
    billing_client = client.app.state.reconciliation.billing_client
    provider_response = MagicMock()
    provider_response.json.return_value = {"url": "https://checkout.stripe.com/c/pay/cs_test_1"}
    billing_client.session = MagicMock()
    billing_client.session.post.return_value = provider_response

    response = client.post("/api/create-checkout-session")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"url": "https://checkout.stripe.com/c/pay/cs_test_1"}


def test_health(client: TestClient):
    response = client.get("/health")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["status"] == "ok"
    assert body["ready"] is True
    assert body["components"] == {"api": "ready", "blob_store": "ready", "database": "ready"}
