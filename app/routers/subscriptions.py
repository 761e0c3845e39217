# =============================================================================
# app/routers/subscriptions.py - Subscription Status Endpoint
# =============================================================================

from fastapi import APIRouter

from app.dependencies import CurrentUser
from core.models.subscription import SubscriptionStatusResponse
from core.services.subscription_service import SubscriptionService

router = APIRouter()


@router.get("/me", response_model=SubscriptionStatusResponse)
async def get_my_subscription(user: CurrentUser):
    """
    Current plan, expiry and countdown for the signed-in user.

    `active` is false on the free plan and once the expiry has passed.
    """
    return SubscriptionService.get_status(user.id)
