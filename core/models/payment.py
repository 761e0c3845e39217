# =============================================================================
# core/models/payment.py - Payment & Subscription Schemas
# =============================================================================
# These models define the API contract for subscription payments:
# - SubscriptionPlan: free plus the three paid plans
# - PaymentStatus: lifecycle of a payment attempt (pending -> completed)
# - PaymentAttempt: the row stored in payment_attempts
# - InitiatePaymentRequest/Response: POST /payments/initiate
# - VerifyPaymentRequest/Response: POST /payments/verify
#
# Flow:
# 1. Client calls initiate -> receives a hosted payment link + tx_ref
# 2. Gateway redirects back with transaction_id + tx_ref
# 3. Client calls verify -> subscription activated, expiry returned
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Literal
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field, field_validator


class SubscriptionPlan(str, Enum):
    """
    Plans a user can be on.

    - free: default, no contact access
    - monthly / semi_annual / yearly: paid, grant contact access until expiry
    """
    FREE = "free"
    MONTHLY = "monthly"
    SEMI_ANNUAL = "semi_annual"
    YEARLY = "yearly"

    @classmethod
    def paid_plans(cls) -> list["SubscriptionPlan"]:
        return [cls.MONTHLY, cls.SEMI_ANNUAL, cls.YEARLY]


class PaymentStatus(str, Enum):
    """
    States of a payment attempt.

    State machine:
        pending -> completed

    There is no failed/cancelled state; abandoned attempts stay pending.
    """
    PENDING = "pending"
    COMPLETED = "completed"


GatewayName = Literal["flutterwave", "paystack"]


class PaymentAttempt(BaseModel):
    """
    A row in payment_attempts.

    Created on initiation and moved to completed by a verified callback.
    tx_ref is unique in the table.
    """

    tx_ref: str = Field(..., min_length=1)
    user_id: UUID
    plan: SubscriptionPlan
    currency: str = Field(..., min_length=3, max_length=3)
    amount: float = Field(..., ge=0)
    status: PaymentStatus = PaymentStatus.PENDING
    payment_link: str | None = None
    transaction_id: str | None = None
    created_at: datetime | None = None
    verified_at: datetime | None = None

    def to_row(self) -> dict:
        """Serialise for a Supabase insert (JSON-safe, no unset timestamps)."""
        return self.model_dump(mode="json", exclude_none=True)


# =============================================================================
# Initiation
# =============================================================================

class InitiatePaymentRequest(BaseModel):
    """
    Body of POST /payments/initiate.

    The payer's identity is NOT part of the body; it comes from the
    bearer token.

    Example:
        {
            "plan": "yearly",
            "currency": "NGN",
            "customer_email": "ada@example.com",
            "customer_name": "Ada Obi",
            "redirect_url": "https://findwhosabi.com/payment-success"
        }
    """

    plan: str = Field(..., min_length=1, description="monthly | semi_annual | yearly")
    currency: str = Field(..., min_length=1, description="ISO currency code")
    customer_email: str = Field(..., min_length=1)
    customer_name: str = Field(..., min_length=1)
    customer_phone: str | None = None
    redirect_url: str = Field(..., min_length=1)
    gateway: GatewayName | None = Field(
        default=None,
        description="Overrides the configured default gateway"
    )

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, value: str) -> str:
        return value.strip().upper()


class InitiatePaymentResponse(BaseModel):
    """Hosted checkout details returned to the client."""

    success: bool = True
    payment_link: str
    tx_ref: str
    amount: float
    currency: str
    currency_symbol: str | None = None
    access_code: str | None = None


# =============================================================================
# Verification
# =============================================================================

class VerifyPaymentRequest(BaseModel):
    """
    Body of POST /payments/verify.

    Flutterwave redirects with transaction_id and tx_ref; Paystack only has a
    reference, accepted as either "tx_ref" or "reference".
    """

    transaction_id: str | None = None
    tx_ref: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("tx_ref", "reference"),
    )
    gateway: GatewayName | None = None

    @field_validator("transaction_id", mode="before")
    @classmethod
    def stringify_transaction_id(cls, value):
        # Flutterwave ids are numeric in the redirect query string
        return str(value) if value is not None else None


class SubscriptionSummary(BaseModel):
    """The subscription that a verified payment activated."""

    plan: SubscriptionPlan
    expiry: datetime
    amount: float
    currency: str


class VerifyPaymentResponse(BaseModel):
    """Result of a successful verification."""

    success: bool = True
    message: str = "Payment verified and subscription activated"
    subscription: SubscriptionSummary
