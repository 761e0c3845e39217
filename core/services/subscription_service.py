# =============================================================================
# core/services/subscription_service.py - Subscription Rules
# =============================================================================
# Pure functions over plans and timestamps, plus the read path for
# GET /subscriptions/me.
#
# Expiry is always computed from the moment of the call, never from a
# previous expiry. Calendar offsets use relativedelta, so Jan 31 + 1 month
# lands on the last day of February rather than overflowing into March.
# =============================================================================

import logging
from datetime import datetime
from typing import Any
from uuid import UUID

from dateutil.relativedelta import relativedelta

from app.exceptions import ValidationError
from core.models.payment import SubscriptionPlan
from core.models.subscription import SubscriptionStatusResponse, TimeRemaining
from lib.supabase_client import SupabaseClient
from lib.utils import parse_timestamp, utc_now

logger = logging.getLogger(__name__)

PLAN_DURATIONS: dict[SubscriptionPlan, relativedelta] = {
    SubscriptionPlan.MONTHLY: relativedelta(months=1),
    SubscriptionPlan.SEMI_ANNUAL: relativedelta(months=6),
    SubscriptionPlan.YEARLY: relativedelta(years=1),
}

SUBSCRIPTION_COLUMNS = (
    "subscription_plan, subscription_status, subscription_expiry, can_access_contact"
)


def parse_paid_plan(plan: str | SubscriptionPlan | None) -> SubscriptionPlan:
    """
    Resolve a plan name to one of the paid plans.

    Raises:
        ValidationError: If the name is empty, unknown or "free"
    """
    try:
        resolved = SubscriptionPlan(plan)
    except ValueError:
        raise ValidationError("Invalid subscription plan")

    if resolved not in PLAN_DURATIONS:
        raise ValidationError("Invalid subscription plan")
    return resolved


def calculate_expiry(plan: str | SubscriptionPlan, now: datetime) -> datetime:
    """
    Expiry of a subscription bought at `now`.

    Args:
        plan: monthly, semi_annual or yearly
        now: Moment of purchase

    Returns:
        now + 1 month / 6 months / 1 year

    Raises:
        ValidationError: For any other plan (never falls back to a default)
    """
    return now + PLAN_DURATIONS[parse_paid_plan(plan)]


def time_remaining(expiry: datetime | None, now: datetime) -> TimeRemaining:
    """Break the time left until `expiry` into a display countdown."""
    if expiry is None or expiry <= now:
        return TimeRemaining()

    delta = expiry - now
    total_days = delta.days
    hours, remainder = divmod(delta.seconds, 3600)
    minutes, seconds = divmod(remainder, 60)

    return TimeRemaining(
        months=total_days // 30,
        weeks=(total_days % 30) // 7,
        days=(total_days % 30) % 7,
        hours=hours,
        minutes=minutes,
        seconds=seconds,
        expired=False,
    )


def has_active_subscription(plan: str | None, expiry: datetime | None, now: datetime) -> bool:
    """
    Whether a user currently holds a paid plan.

    A paid plan with no recorded expiry counts as active.
    """
    if not plan or plan == SubscriptionPlan.FREE.value:
        return False
    if expiry is None:
        return True
    return expiry > now


class SubscriptionService:
    """Read-side operations on a user's subscription."""

    @staticmethod
    def get_status(
        user_id: UUID | str,
        now: datetime | None = None,
    ) -> SubscriptionStatusResponse:
        """
        Summarise the caller's subscription.

        Users without a profile row are reported as being on the free plan.

        Args:
            user_id: Authenticated user id
            now: Reference time (defaults to the current UTC time)
        """
        now = now or utc_now()
        row: dict[str, Any] = SupabaseClient.fetch_user(user_id, columns=SUBSCRIPTION_COLUMNS) or {}

        raw_plan = row.get("subscription_plan") or SubscriptionPlan.FREE.value
        try:
            plan = SubscriptionPlan(raw_plan)
        except ValueError:
            logger.warning(f"User {user_id} has unknown plan {raw_plan!r}, reporting as free")
            plan = SubscriptionPlan.FREE

        expiry = parse_timestamp(row.get("subscription_expiry"))
        active = has_active_subscription(plan.value, expiry, now)

        return SubscriptionStatusResponse(
            plan=plan,
            status=row.get("subscription_status"),
            expiry=expiry,
            active=active,
            can_access_contact=bool(row.get("can_access_contact")) and active,
            time_remaining=time_remaining(expiry, now),
        )
