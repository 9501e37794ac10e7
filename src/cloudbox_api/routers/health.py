import logging

from fastapi import APIRouter, Depends, Request

from cloudbox_api.dependencies import get_reconciliation_service
from cloudbox_api.services import ReconciliationService

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/health")
async def health_check(
    request: Request,
    service: ReconciliationService = Depends(get_reconciliation_service),
):
    """
    Health check endpoint for monitoring API status and component readiness.

    Returns status of API, blob store, and metadata store along with deployment mode.
    """
    settings = request.app.state.settings

    health_status = {
        "status": "ok",
        "deployment_mode": settings.deployment_mode,
        "components": {
            "api": "ready",
            "blob_store": "initializing",
            "database": "initializing"
        },
        "ready": False
    }

    try:
        service.blob_store.check()
        health_status["components"]["blob_store"] = "ready"
    except Exception as e:
        logger.warning(f"Blob store health check failed: {e}")
        health_status["components"]["blob_store"] = "error"
        health_status["status"] = "degraded"

    try:
        service.file_service.adapter.ping()
        health_status["components"]["database"] = "ready"
    except Exception as e:
        logger.warning(f"Metadata store health check failed: {e}")
        health_status["components"]["database"] = "error"
        health_status["status"] = "degraded"

    health_status["ready"] = all(
        state == "ready" for state in health_status["components"].values()
    )

    return health_status
