# =============================================================================
# lib/termii_client.py - Termii SMS / OTP Client
# =============================================================================
# Wraps the three Termii endpoints the phone verification flows use:
# - sms/send        plain SMS (locally generated codes)
# - sms/otp/send    provider-generated OTP, returns an opaque pinId
# - sms/otp/verify  checks a pin against a pinId
#
# The API key travels in the JSON body (Termii's convention), so request
# payloads are logged with the key masked.
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.config import settings
from app.exceptions import ConfigurationError, GatewayError

logger = logging.getLogger(__name__)

PIN_LENGTH = 6
PIN_ATTEMPTS = 3
PIN_PLACEHOLDER = "< 1234 >"


class TermiiClient:
    """
    Synchronous Termii client.

    Example:
        termii = TermiiClient()
        pin_id = termii.send_otp("+2348012345678")
        termii.verify_otp(pin_id, "123456")
    """

    provider = "termii"

    def __init__(self, client: httpx.Client | None = None):
        if not settings.TERMII_API_KEY:
            raise ConfigurationError("Termii API key not configured")

        self.api_key = settings.TERMII_API_KEY
        self.sender_id = settings.TERMII_SENDER_ID
        self.base_url = settings.TERMII_BASE_URL.rstrip("/")
        self._client = client or httpx.Client(timeout=settings.GATEWAY_TIMEOUT_SECONDS)

    def _post(self, path: str, payload: dict[str, Any]) -> tuple[httpx.Response, dict[str, Any]]:
        masked = {**payload, "api_key": "[HIDDEN]"}
        logger.debug(f"Termii POST {path}: {masked}")

        try:
            response = self._client.post(
                f"{self.base_url}/{path}",
                json={**payload, "api_key": self.api_key},
            )
        except httpx.HTTPError as e:
            logger.error(f"Termii request to {path} failed: {e}")
            raise GatewayError("SMS provider is unreachable, please try again", provider=self.provider, status_code=500)

        try:
            body = response.json()
        except ValueError:
            body = {}

        if not isinstance(body, dict):
            body = {}

        logger.debug(f"Termii {path} -> HTTP {response.status_code}")
        return response, body

    def send_sms(self, phone: str, message: str) -> str:
        """
        Send a plain SMS.

        Returns:
            Termii message_id

        Raises:
            GatewayError: If Termii does not accept the message
        """
        response, body = self._post("sms/send", {
            "to": phone,
            "from": self.sender_id,
            "sms": message,
            "type": "plain",
            "channel": "generic",
        })

        message_id = body.get("message_id")
        if not response.is_success or not message_id:
            logger.error(f"Termii SMS rejected: {body.get('message')}")
            raise GatewayError("Failed to send SMS", provider=self.provider)

        return str(message_id)

    def send_otp(self, phone: str, message_text: str, ttl_minutes: int) -> str:
        """
        Ask Termii to generate and deliver a numeric OTP.

        `message_text` must contain PIN_PLACEHOLDER, which Termii replaces
        with the generated pin.

        Returns:
            The pinId identifying this verification session

        Raises:
            GatewayError: If Termii rejects the request or returns no pinId
        """
        response, body = self._post("sms/otp/send", {
            "message_type": "NUMERIC",
            "to": phone,
            "from": self.sender_id,
            "channel": "dnd",
            "pin_attempts": PIN_ATTEMPTS,
            "pin_time_to_live": ttl_minutes,
            "pin_length": PIN_LENGTH,
            "pin_placeholder": PIN_PLACEHOLDER,
            "message_text": message_text,
        })

        if not response.is_success:
            raise GatewayError(
                body.get("message") or f"HTTP {response.status_code}: Failed to send OTP",
                provider=self.provider,
            )

        pin_id = body.get("pinId")
        if not pin_id:
            raise GatewayError(
                body.get("message") or "Failed to send OTP - no pinId returned",
                provider=self.provider,
            )

        logger.info(f"OTP sent to {phone[:4]}***, pinId {pin_id}")
        return str(pin_id)

    def verify_otp(self, pin_id: str, pin: str) -> bool:
        """
        Check a pin against a Termii pinId.

        Returns:
            True when Termii reports the pin as verified

        Raises:
            GatewayError: On any other outcome, with Termii's message
        """
        response, body = self._post("sms/otp/verify", {
            "pin_id": pin_id,
            "pin": pin,
        })

        if not response.is_success:
            raise GatewayError(
                body.get("message") or f"HTTP {response.status_code}: Failed to verify OTP",
                provider=self.provider,
            )

        if body.get("verified") is not True:
            raise GatewayError(body.get("message") or "Invalid verification code", provider=self.provider)

        return True
