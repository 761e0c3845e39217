# =============================================================================
# core/models/subscription.py - Subscription Status Schemas
# =============================================================================

from datetime import datetime

from pydantic import BaseModel

from .payment import SubscriptionPlan


class TimeRemaining(BaseModel):
    """
    Countdown until a subscription expires.

    Months are 30-day blocks; weeks and days are what is left of the
    last partial month.
    """
    months: int = 0
    weeks: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0
    expired: bool = True


class SubscriptionStatusResponse(BaseModel):
    """Body of GET /subscriptions/me."""
    plan: SubscriptionPlan
    status: str | None = None
    expiry: datetime | None = None
    active: bool
    can_access_contact: bool
    time_remaining: TimeRemaining
