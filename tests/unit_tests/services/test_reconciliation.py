"""
Tests for the reconciliation service: moto S3 for blobs, a temporary SQLite
store for metadata, and mocks where a store has to fail.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from cloudbox_api.errors import StoreWriteError, UploadFailed, ValidationError, NotFoundError
from cloudbox_api.services import BillingClient, PlanDescriptor, ReconciliationService
from tests.consts import TEST_BUCKET_NAME

PLAN = PlanDescriptor(name="CloudBox Pro Plan - 50GB", unit_amount=900)


@pytest.fixture
def billing_client() -> MagicMock:
    return MagicMock(spec=BillingClient)


@pytest.fixture
def service(blob_store, file_service, billing_client) -> ReconciliationService:
    return ReconciliationService(
        blob_store=blob_store,
        file_service=file_service,
        billing_client=billing_client,
        plan=PLAN,
        orphan_grace_seconds=3600,
    )


class TestUpload:
    def test_upload_writes_blob_then_record(self, service, mocked_aws):
        record = service.upload(b"hello", "notes.txt", "text/plain")

        assert record.key.endswith("-notes.txt")
        assert record.size == 5
        assert record.content_type == "text/plain"
        assert mocked_aws.get_object(Bucket=TEST_BUCKET_NAME, Key=record.key)["Body"].read() == b"hello"

        listed = service.list_files()
        assert len(listed) == 1
        assert listed[0].key == record.key
        assert listed[0].id == record.id
        assert listed[0].is_favorite is False
        assert listed[0].is_trash is False

    def test_missing_content_type_defaults_to_octet_stream(self, service):
        assert service.upload(b"\x00", "blob.bin").content_type == "application/octet-stream"

    def test_empty_filename_is_rejected(self, service):
        with pytest.raises(ValidationError):
            service.upload(b"data", "")

    def test_blob_failure_leaves_no_record(self, service, file_service):
        service.blob_store = MagicMock()
        service.blob_store.put.side_effect = StoreWriteError("bucket gone")

        with pytest.raises(UploadFailed):
            service.upload(b"data", "a.txt", "text/plain")
        assert file_service.list() == []

    def test_metadata_failure_is_reported_and_blob_becomes_orphan(self, service, blob_store, caplog):
        service.file_service = MagicMock()
        service.file_service.insert.side_effect = RuntimeError("database is locked")

        with pytest.raises(UploadFailed):
            service.upload(b"data", "a.txt", "text/plain")

        keys = [o["Key"] for o in blob_store.list_objects()]
        assert len(keys) == 1
        assert any("Orphaned blob" in r.message and keys[0] in r.message for r in caplog.records)


class TestFlags:
    def test_flag_round_trip(self, service):
        record = service.upload(b"x", "a.txt", "text/plain")

        service.update_flags(record.id, is_favorite=True)
        service.update_flags(record.id, is_trash=True)
        service.update_flags(record.id, is_trash=False)

        listed = service.list_files()[0]
        assert listed.is_favorite is True
        assert listed.is_trash is False

    def test_update_without_flags_is_rejected(self, service):
        record = service.upload(b"x", "a.txt", "text/plain")
        with pytest.raises(ValidationError):
            service.update_flags(record.id)

    def test_update_of_unknown_id(self, service):
        with pytest.raises(NotFoundError):
            service.update_flags("missing", is_trash=True)


class TestPermanentDelete:
    def test_delete_removes_blob_and_record(self, service, blob_store):
        record = service.upload(b"x", "a.txt", "text/plain")

        service.permanent_delete(record.id)

        assert service.list_files() == []
        assert not blob_store.exists(record.key)

    def test_second_delete_is_a_no_op(self, service):
        record = service.upload(b"x", "a.txt", "text/plain")
        service.permanent_delete(record.id)
        service.permanent_delete(record.id)
        assert service.list_files() == []

    def test_delete_by_key(self, service, blob_store):
        record = service.upload(b"x", "a.txt", "text/plain")

        service.permanent_delete_by_key(record.key)
        service.permanent_delete_by_key(record.key)

        assert service.list_files() == []
        assert not blob_store.exists(record.key)

    def test_delete_by_key_removes_blob_only_objects(self, service, blob_store):
        blob = blob_store.put(b"x", "stray.txt")
        service.permanent_delete_by_key(blob.key)
        assert not blob_store.exists(blob.key)

    def test_delete_by_key_requires_a_key(self, service):
        with pytest.raises(ValidationError):
            service.permanent_delete_by_key("")

    def test_blob_failure_still_removes_record(self, service, caplog):
        record = service.upload(b"x", "a.txt", "text/plain")
        real_store = service.blob_store
        service.blob_store = MagicMock(wraps=real_store)
        service.blob_store.delete.side_effect = StoreWriteError("access denied")

        service.permanent_delete(record.id)

        assert service.list_files() == []
        assert real_store.exists(record.key)
        assert any("Orphaned blob" in r.message for r in caplog.records)


class TestOrphans:
    def test_reports_old_blobs_without_records(self, service, blob_store):
        tracked = service.upload(b"x", "tracked.txt", "text/plain")
        stray = blob_store.put(b"xyz", "stray.txt")

        # nothing is old enough yet
        assert service.find_orphaned_blobs() == []

        later = datetime.now(timezone.utc) + timedelta(hours=2)
        orphans = service.find_orphaned_blobs(now=later)
        assert [o.key for o in orphans] == [stray.key]
        assert orphans[0].size == 3
        assert orphans[0].is_trash is False
        assert tracked.key not in [o.key for o in orphans]

    def test_report_deletes_nothing(self, service, blob_store):
        stray = blob_store.put(b"x", "stray.txt")
        service.find_orphaned_blobs(now=datetime.now(timezone.utc) + timedelta(days=1))
        assert blob_store.exists(stray.key)


def test_download_resolves_signed_url(service):
    record = service.upload(b"x", "a.txt", "text/plain")
    signed = service.resolve_download(record.key)
    assert record.key in signed.url


def test_download_requires_key(service):
    with pytest.raises(ValidationError):
        service.resolve_download("")


def test_billing_session_uses_default_plan(service, billing_client):
    billing_client.create_checkout_session.return_value = "https://checkout.stripe.com/c/pay/cs_test_1"

    assert service.create_billing_session() == "https://checkout.stripe.com/c/pay/cs_test_1"
    billing_client.create_checkout_session.assert_called_once_with(PLAN)
