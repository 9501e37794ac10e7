from fastapi import APIRouter, Depends, status

from cloudbox_api.dependencies import get_reconciliation_service
from cloudbox_api.schemas import CheckoutSessionResponse
from cloudbox_api.services import ReconciliationService

router = APIRouter()


@router.post(
    "/create-checkout-session",
    response_model=CheckoutSessionResponse,
    responses={
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"description": "The payment provider rejected the request."},
    },
)
async def create_checkout_session(
    service: ReconciliationService = Depends(get_reconciliation_service),
) -> CheckoutSessionResponse:
    """Start a checkout for the configured storage plan and return its redirect URL."""
    return CheckoutSessionResponse(url=service.create_billing_session())
