# =============================================================================
# lib/payment_gateways.py - Hosted Payment Gateway Clients
# =============================================================================
# Thin HTTP clients for the payment gateways the marketplace accepts:
# - FlutterwaveGateway: hosted checkout + verify-by-transaction-id
# - PaystackGateway: hosted checkout + verify-by-reference (NGN only)
#
# Both normalise the provider's responses into HostedPayment /
# VerifiedPayment so the payment service never touches raw gateway JSON.
# Any non-success response raises GatewayError carrying the provider's
# own message.
#
# Usage:
#   from lib.payment_gateways import get_gateway
#   gateway = get_gateway("flutterwave")
#   hosted = gateway.create_payment(...)
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from app.config import settings
from app.exceptions import ConfigurationError, GatewayError, ValidationError

logger = logging.getLogger(__name__)


# =============================================================================
# Normalised Results
# =============================================================================

@dataclass
class Customer:
    """Payer details forwarded to the hosted checkout page."""
    email: str
    name: str
    phone: str | None = None


@dataclass
class HostedPayment:
    """A hosted payment page created by a gateway."""
    link: str
    access_code: str | None = None


@dataclass
class VerifiedPayment:
    """
    A transaction the gateway itself confirmed as paid.

    metadata is whatever was attached at initiation, echoed back verbatim
    by the gateway (user_id, plan, currency).
    """
    tx_ref: str
    transaction_id: str
    amount: float
    currency: str
    metadata: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# Base Gateway
# =============================================================================

class PaymentGateway:
    """
    Common plumbing for JSON-over-HTTPS gateways.

    Subclasses set `name`, `base_url` and implement create_payment/verify.
    An httpx.Client can be injected (tests pass one with a MockTransport).
    """

    name: str = "gateway"
    supported_currencies: frozenset[str] | None = None

    def __init__(
        self,
        secret_key: str,
        base_url: str,
        client: httpx.Client | None = None,
    ):
        if not secret_key:
            raise ConfigurationError(f"{self.name.title()} secret key not configured")

        self.base_url = base_url.rstrip("/")
        self.headers = {
            "Authorization": f"Bearer {secret_key}",
            "Content-Type": "application/json",
        }
        self._client = client or httpx.Client(timeout=settings.GATEWAY_TIMEOUT_SECONDS)

    def supports_currency(self, currency: str) -> bool:
        return self.supported_currencies is None or currency in self.supported_currencies

    def _request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> tuple[httpx.Response, dict[str, Any]]:
        """
        Send a request and decode the JSON body.

        Returns the response too, because gateways report failures both
        through HTTP status and through a status field in the body.
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self._client.request(method, url, headers=self.headers, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"{self.name} request to {path} failed: {e}")
            raise GatewayError(
                f"{self.name.title()} is unreachable, please try again",
                provider=self.name,
                status_code=500,
            )

        try:
            body = response.json()
        except ValueError:
            logger.error(f"{self.name} returned non-JSON body (HTTP {response.status_code})")
            body = {}

        if not isinstance(body, dict):
            body = {}

        logger.debug(f"{self.name} {method} {path} -> HTTP {response.status_code}")
        return response, body

    def create_payment(
        self,
        *,
        tx_ref: str,
        amount: float,
        currency: str,
        customer: Customer,
        redirect_url: str,
        metadata: dict[str, Any],
    ) -> HostedPayment:
        raise NotImplementedError

    def verify(self, *, tx_ref: str, transaction_id: str | None = None) -> VerifiedPayment:
        raise NotImplementedError


# =============================================================================
# Flutterwave
# =============================================================================

class FlutterwaveGateway(PaymentGateway):
    """
    Flutterwave v3 Standard checkout.

    Success on initiation means HTTP 2xx and body status "success".
    Verification is by Flutterwave's numeric transaction id; the body status
    must be "success" and the transaction status "successful".
    """

    name = "flutterwave"

    def __init__(self, client: httpx.Client | None = None):
        super().__init__(
            secret_key=settings.FLUTTERWAVE_SECRET_KEY,
            base_url=settings.FLUTTERWAVE_BASE_URL,
            client=client,
        )

    def create_payment(
        self,
        *,
        tx_ref: str,
        amount: float,
        currency: str,
        customer: Customer,
        redirect_url: str,
        metadata: dict[str, Any],
    ) -> HostedPayment:
        payload = {
            "tx_ref": tx_ref,
            "amount": amount,
            "currency": currency,
            "redirect_url": redirect_url,
            "customer": {
                "email": customer.email,
                "name": customer.name,
                "phonenumber": customer.phone or "",
            },
            "customizations": {
                "title": f"{settings.SITE_NAME} Subscription",
                "description": f"{metadata.get('plan', '')} subscription".strip(),
                "logo": settings.SITE_LOGO_URL,
            },
            "meta": metadata,
        }

        logger.info(f"Creating Flutterwave payment {tx_ref} ({amount} {currency})")
        response, body = self._request("POST", "payments", payload)

        if not response.is_success or body.get("status") != "success":
            raise GatewayError(body.get("message") or "Failed to initialize payment", provider=self.name)

        return HostedPayment(link=body["data"]["link"])

    def verify(self, *, tx_ref: str, transaction_id: str | None = None) -> VerifiedPayment:
        if not transaction_id:
            raise ValidationError("Transaction ID is required")

        response, body = self._request("GET", f"transactions/{transaction_id}/verify")

        if not response.is_success or body.get("status") != "success":
            raise GatewayError(body.get("message") or "Payment verification failed", provider=self.name)

        data = body.get("data") or {}
        if data.get("status") != "successful":
            raise GatewayError(f"Payment status: {data.get('status')}", provider=self.name)

        return VerifiedPayment(
            tx_ref=data.get("tx_ref", ""),
            transaction_id=str(data.get("id", transaction_id)),
            amount=data.get("amount", 0),
            currency=data.get("currency", ""),
            metadata=data.get("meta") or {},
        )


# =============================================================================
# Paystack
# =============================================================================

class PaystackGateway(PaymentGateway):
    """
    Paystack transaction initialize/verify.

    Amounts travel in the currency's subunit (kobo). Only NGN is enabled on
    the marketplace's Paystack account.
    """

    name = "paystack"
    supported_currencies = frozenset({"NGN"})
    channels = ["card", "bank", "ussd", "qr", "mobile_money", "bank_transfer"]

    def __init__(self, client: httpx.Client | None = None):
        super().__init__(
            secret_key=settings.PAYSTACK_SECRET_KEY,
            base_url=settings.PAYSTACK_BASE_URL,
            client=client,
        )

    @staticmethod
    def gateway_email(email: str, user_id_fragment: str) -> str:
        """
        Paystack rejects the placeholder addresses given to phone-auth users,
        so those are swapped for a routable alias on the site's domain.
        """
        if email.endswith("@phoneauth.local"):
            return f"user+{user_id_fragment}@{settings.PAYMENT_FALLBACK_EMAIL_DOMAIN}"
        return email

    def create_payment(
        self,
        *,
        tx_ref: str,
        amount: float,
        currency: str,
        customer: Customer,
        redirect_url: str,
        metadata: dict[str, Any],
    ) -> HostedPayment:
        user_fragment = str(metadata.get("user_id", ""))[:8]
        payload = {
            "reference": tx_ref,
            "amount": int(round(amount * 100)),
            "currency": currency,
            "email": self.gateway_email(customer.email, user_fragment),
            "callback_url": redirect_url,
            "metadata": {
                **metadata,
                "customer_name": customer.name,
                "phone_number": customer.phone or "",
            },
            "channels": self.channels,
        }

        logger.info(f"Creating Paystack payment {tx_ref} ({amount} {currency})")
        response, body = self._request("POST", "transaction/initialize", payload)

        if not response.is_success or not body.get("status"):
            raise GatewayError(body.get("message") or "Failed to initialize payment", provider=self.name)

        data = body.get("data") or {}
        return HostedPayment(link=data["authorization_url"], access_code=data.get("access_code"))

    def verify(self, *, tx_ref: str, transaction_id: str | None = None) -> VerifiedPayment:
        response, body = self._request("GET", f"transaction/verify/{tx_ref}")

        if not response.is_success or not body.get("status"):
            raise GatewayError("Payment verification failed", provider=self.name)

        data = body.get("data") or {}
        if data.get("status") != "success":
            raise GatewayError(f"Payment status: {data.get('status')}", provider=self.name)

        return VerifiedPayment(
            tx_ref=data.get("reference", ""),
            transaction_id=str(data.get("id", "")),
            amount=(data.get("amount") or 0) / 100,
            currency=data.get("currency", ""),
            metadata=data.get("metadata") or {},
        )


# =============================================================================
# Registry
# =============================================================================

GATEWAYS: dict[str, type[PaymentGateway]] = {
    FlutterwaveGateway.name: FlutterwaveGateway,
    PaystackGateway.name: PaystackGateway,
}


def get_gateway(name: str | None = None) -> PaymentGateway:
    """
    Build the gateway client for `name` (defaults to PAYMENT_GATEWAY).

    Raises:
        ValidationError: If the gateway name is unknown
        ConfigurationError: If the gateway's secret key is not set
    """
    gateway_name = name or settings.PAYMENT_GATEWAY
    gateway_cls = GATEWAYS.get(gateway_name)
    if gateway_cls is None:
        raise ValidationError(f"Unsupported payment gateway: {gateway_name}")
    return gateway_cls()
