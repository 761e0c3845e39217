# =============================================================================
# app/routers/payments.py - Subscription Payment Endpoints
# =============================================================================
# POST /payments/initiate  (authenticated) -> hosted payment link
# POST /payments/verify    (gateway redirect) -> subscription activated
#
# Verify is deliberately unauthenticated: the user is identified by the
# metadata the gateway echoes back, and the gateway is always re-queried.
# =============================================================================

from fastapi import APIRouter, Depends

from app.auth import AuthUser, get_current_user
from core.models.payment import (
    InitiatePaymentRequest,
    InitiatePaymentResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from core.services.payment_service import PaymentService

router = APIRouter()


@router.post("/initiate", response_model=InitiatePaymentResponse)
async def initiate_payment(
    request: InitiatePaymentRequest,
    user: AuthUser = Depends(get_current_user),
):
    """
    Start a subscription purchase.

    Looks up the plan price for the chosen currency, creates a hosted
    checkout with the payment gateway and records a pending attempt.
    Redirect the user to `payment_link`.
    """
    return PaymentService.initiate_payment(user_id=user.id, request=request)


@router.post("/verify", response_model=VerifyPaymentResponse)
async def verify_payment(request: VerifyPaymentRequest):
    """
    Verify a checkout after the gateway redirect.

    Re-verifies the transaction with the gateway and, if it was paid,
    activates the subscription. Calling this twice for the same
    transaction recomputes the expiry from the time of the second call.
    """
    return PaymentService.verify_payment(request=request)
