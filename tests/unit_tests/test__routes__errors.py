from unittest.mock import MagicMock

import requests
from fastapi import status
from fastapi.testclient import TestClient

from cloudbox_api.errors import StoreWriteError


def test_upload_without_file(client: TestClient):
    response = client.post("/api/upload")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"detail": "No file provided"}


def test_delete_by_key_without_key(client: TestClient):
    response = client.delete("/api/delete")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"detail": "Missing key"}


def test_download_without_key(client: TestClient):
    response = client.get("/api/download")
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_download_of_missing_key(client: TestClient):
    response = client.get("/api/download", params={"key": "1-missing.txt"})
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"detail": "File not found"}


def test_update_unknown_id(client: TestClient):
    response = client.put("/api/update/does-not-exist", json={"isFavorite": True})
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert "detail" in response.json()


def test_update_without_flags(client: TestClient):
    upload = client.post("/api/upload", files={"file": ("a.txt", b"x", "text/plain")}).json()
    response = client.put(f"/api/update/{upload['file']['_id']}", json={})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_update_with_wrong_flag_type(client: TestClient):
    response = client.put("/api/update/anything", json={"isFavorite": "maybe"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_delete_unknown_id_succeeds(client: TestClient):
    response = client.delete("/api/delete/never-existed")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"message": "Deleted"}


def test_upload_failure_hides_store_error(client: TestClient):
    service = client.app.state.reconciliation
    service.blob_store = MagicMock()
    service.blob_store.put.side_effect = StoreWriteError("AccessDenied for arn:aws:s3:::secret-bucket")

    response = client.post("/api/upload", files={"file": ("a.txt", b"x", "text/plain")})

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"detail": "Upload failed"}
    assert client.get("/api/list").json() == {"items": []}


def test_billing_failure(client: TestClient):
    billing_client = client.app.state.reconciliation.billing_client
    billing_client.session = MagicMock()
    billing_client.session.post.side_effect = requests.exceptions.ConnectionError("boom")

    response = client.post("/api/create-checkout-session")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"detail": "Could not create checkout session"}


def test_unexpected_errors_become_500(client: TestClient):
    service = client.app.state.reconciliation
    service.file_service = MagicMock()
    service.file_service.list.side_effect = RuntimeError("disk on fire")

    response = client.get("/api/list")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"detail": "Internal server error"}


def test_health_reports_degraded_blob_store(client: TestClient):
    service = client.app.state.reconciliation
    service.blob_store = MagicMock()
    service.blob_store.check.side_effect = StoreWriteError("unreachable")

    body = client.get("/health").json()

    assert body["status"] == "degraded"
    assert body["ready"] is False
    assert body["components"]["blob_store"] == "error"
