# =============================================================================
# core/services/payment_service.py - Subscription Payment Business Logic
# =============================================================================
# Handles the two halves of a subscription purchase:
#
# initiate_payment:
#   1. Validate plan + currency
#   2. Price lookup (narrowed by the user's user_type when known)
#   3. Currency display lookup
#   4. Generate tx_ref, create hosted payment with the gateway
#   5. Record a pending PaymentAttempt (best-effort)
#
# verify_payment:
#   1. Re-verify with the gateway (never trust the redirect alone)
#   2. Check tx_ref and metadata
#   3. Compute expiry from now and activate the subscription (critical)
#   4. Complete the attempt + notify the user (side effects, best-effort)
# =============================================================================

import logging
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from app.exceptions import (
    CurrencyNotSupportedError,
    PersistenceError,
    PricingNotFoundError,
    ValidationError,
)
from app.config import settings
from core.models.payment import (
    InitiatePaymentRequest,
    InitiatePaymentResponse,
    PaymentAttempt,
    PaymentStatus,
    SubscriptionPlan,
    SubscriptionSummary,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from core.services import side_effects
from core.services.side_effects import SideEffect
from core.services.subscription_service import calculate_expiry, parse_paid_plan
from lib.payment_gateways import Customer, PaymentGateway, get_gateway
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import to_iso, utc_now

logger = logging.getLogger(__name__)

ACTIVATION_TITLE = "Subscription Activated!"


def generate_tx_ref(user_id: UUID | str, plan: str, now: datetime, prefix: str | None = None) -> str:
    """
    Build a transaction reference.

    Format: {prefix}_{first 8 chars of user id}_{plan}_{epoch millis}

    Example:
        generate_tx_ref("0f8e2c1a-...", "yearly", now)  # "FWS_0f8e2c1a_yearly_1718000000000"
    """
    timestamp_ms = int(now.timestamp() * 1000)
    return f"{prefix or settings.TX_REF_PREFIX}_{str(user_id)[:8]}_{plan}_{timestamp_ms}"


def activation_message(plan: str, expiry: datetime) -> str:
    """Notification body sent once a subscription is active."""
    return (
        f"Your {plan} subscription has been activated and will expire on "
        f"{expiry.strftime('%B %d, %Y')}."
    )


class PaymentService:
    """
    Service for subscription payments.

    Gateways are resolved per request, so tests can pass a prebuilt
    gateway with a mocked transport.
    """

    # -------------------------------------------------------------------------
    # Initiation
    # -------------------------------------------------------------------------

    @staticmethod
    def initiate_payment(
        user_id: UUID | str,
        request: InitiatePaymentRequest,
        gateway: PaymentGateway | None = None,
        now: datetime | None = None,
    ) -> InitiatePaymentResponse:
        """
        Create a hosted payment for a subscription plan.

        Args:
            user_id: Authenticated user (never taken from the request body)
            request: Plan, currency and customer details
            gateway: Gateway client; resolved from request/config when omitted
            now: Reference time for tx_ref generation

        Returns:
            InitiatePaymentResponse with the redirect link and tx_ref

        Raises:
            ValidationError: Unknown plan, empty currency, unsupported gateway currency
            PricingNotFoundError: No price for plan/currency
            CurrencyNotSupportedError: Currency missing from the currencies table
            GatewayError: Gateway refused to create the payment
        """
        now = now or utc_now()
        plan = parse_paid_plan(request.plan)
        currency = request.currency
        if not currency:
            raise ValidationError("Missing required fields")

        gateway = gateway or get_gateway(request.gateway)
        if not gateway.supports_currency(currency):
            raise CurrencyNotSupportedError(
                currency,
                message=f"{gateway.name.title()} does not support {currency} payments",
            )

        user = SupabaseClient.fetch_user(user_id, columns="user_type") or {}
        user_type = user.get("user_type")

        pricing = SupabaseClient.fetch_pricing(plan.value, currency, user_type=user_type)
        if not pricing:
            raise PricingNotFoundError(plan.value, currency, user_type)
        amount = pricing["price"]

        currency_info = SupabaseClient.fetch_currency(currency)
        if not currency_info:
            raise CurrencyNotSupportedError(currency)

        tx_ref = generate_tx_ref(user_id, plan.value, now)
        metadata = {
            "user_id": str(user_id),
            "plan": plan.value,
            "currency": currency,
        }

        hosted = gateway.create_payment(
            tx_ref=tx_ref,
            amount=amount,
            currency=currency,
            customer=Customer(
                email=request.customer_email,
                name=request.customer_name,
                phone=request.customer_phone,
            ),
            redirect_url=request.redirect_url,
            metadata=metadata,
        )
        logger.info(f"Payment {tx_ref} created via {gateway.name} for user {user_id}")

        try:
            attempt = PaymentAttempt(
                tx_ref=tx_ref,
                user_id=user_id,
                plan=plan,
                currency=currency,
                amount=amount,
                status=PaymentStatus.PENDING,
                payment_link=hosted.link,
                created_at=now,
            )
            SupabaseClient.insert_payment_attempt(attempt.to_row())
        except (SupabaseClientError, PydanticValidationError) as e:
            # The checkout page already exists; the client can still pay
            logger.error(f"Failed to record payment attempt {tx_ref}: {e}")

        return InitiatePaymentResponse(
            payment_link=hosted.link,
            tx_ref=tx_ref,
            amount=amount,
            currency=currency,
            currency_symbol=currency_info.get("symbol"),
            access_code=hosted.access_code,
        )

    # -------------------------------------------------------------------------
    # Verification
    # -------------------------------------------------------------------------

    @staticmethod
    def verify_payment(
        request: VerifyPaymentRequest,
        gateway: PaymentGateway | None = None,
        now: datetime | None = None,
    ) -> VerifyPaymentResponse:
        """
        Verify a completed checkout and activate the subscription.

        Re-verifying the same transaction recomputes the expiry from `now`.

        Args:
            request: transaction_id + tx_ref from the gateway redirect
            gateway: Gateway client; resolved from request/config when omitted
            now: Reference time for the expiry

        Returns:
            VerifyPaymentResponse with the activated plan and expiry

        Raises:
            ValidationError: tx_ref mismatch, bad metadata, unknown plan
            GatewayError: Gateway does not report the payment as successful
            PersistenceError: Subscription could not be written
        """
        now = now or utc_now()
        gateway = gateway or get_gateway(request.gateway)

        payment = gateway.verify(tx_ref=request.tx_ref, transaction_id=request.transaction_id)

        if payment.tx_ref != request.tx_ref:
            logger.warning(
                f"tx_ref mismatch on verify: expected {request.tx_ref}, gateway returned {payment.tx_ref}"
            )
            raise ValidationError("Transaction reference mismatch")

        user_id = payment.metadata.get("user_id")
        plan_name = payment.metadata.get("plan")
        if not user_id or not plan_name:
            raise ValidationError("Invalid payment metadata")

        plan = parse_paid_plan(plan_name)
        expiry = calculate_expiry(plan, now)

        PaymentService._activate_subscription(user_id, plan, expiry, now)

        side_effects.dispatch([
            SideEffect("complete_payment_attempt", {
                "tx_ref": request.tx_ref,
                "transaction_id": payment.transaction_id,
                "verified_at": to_iso(now),
            }),
            SideEffect("create_notification", {
                "user_id": str(user_id),
                "title": ACTIVATION_TITLE,
                "message": activation_message(plan.value, expiry),
                "notification_type": "success",
            }),
        ])

        logger.info(f"Activated {plan.value} subscription for user {user_id} until {to_iso(expiry)}")

        return VerifyPaymentResponse(
            subscription=SubscriptionSummary(
                plan=plan,
                expiry=expiry,
                amount=payment.amount,
                currency=payment.currency,
            )
        )

    @staticmethod
    def _activate_subscription(
        user_id: str,
        plan: SubscriptionPlan,
        expiry: datetime,
        now: datetime,
    ) -> dict[str, Any]:
        """
        Write the subscription columns on the user row.

        Raises:
            PersistenceError: If the write fails or matches no user
        """
        try:
            row = SupabaseClient.update_user(user_id, {
                "subscription_plan": plan.value,
                "subscription_status": plan.value,
                "subscription_expiry": to_iso(expiry),
                "can_access_contact": True,
                "updated_at": to_iso(now),
            })
        except SupabaseClientError as e:
            logger.error(f"Failed to update subscription for user {user_id}: {e}")
            raise PersistenceError("Failed to activate subscription", details={"user_id": user_id})

        if row is None:
            logger.error(f"Subscription update matched no user row for {user_id}")
            raise PersistenceError("Failed to activate subscription", details={"user_id": user_id})

        return row
