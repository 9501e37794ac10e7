from fastapi import Request

from cloudbox_api.adapters.storage import S3BlobStore
from cloudbox_api.config.settings import Settings
from cloudbox_api.db_layer import FileService
from cloudbox_api.services import BillingClient, PlanDescriptor, ReconciliationService


def build_reconciliation_service(settings: Settings) -> ReconciliationService:
    """Wire the stores and the billing client for the given settings."""
    return ReconciliationService(
        blob_store=S3BlobStore.from_settings(settings),
        file_service=FileService.from_settings(settings),
        billing_client=BillingClient.from_settings(settings),
        plan=PlanDescriptor.from_settings(settings),
        orphan_grace_seconds=settings.orphan_grace_seconds,
    )


def get_reconciliation_service(request: Request) -> ReconciliationService:
    """Reconciliation service dependency."""
    return request.app.state.reconciliation
