# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
#
# Every error leaves the API in the same shape the web and mobile clients
# already parse:
#   {"success": false, "error": "<message>"}
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class MarketplaceException(Exception):
    """
    Base exception for the marketplace API.

    All custom exceptions inherit from this class. `code` is only used
    for logging; clients receive the message verbatim.
    """

    def __init__(
        self,
        message: str,
        code: str = "MARKETPLACE_ERROR",
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        return {
            "success": False,
            "error": self.message,
        }


# =============================================================================
# Auth Exceptions
# =============================================================================

class AuthenticationError(MarketplaceException):
    """Raised when the bearer token is missing or invalid."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            message=message,
            code="UNAUTHORIZED",
            status_code=401,
        )


# =============================================================================
# Request Exceptions
# =============================================================================

class ValidationError(MarketplaceException):
    """Raised for missing fields or unknown plan/currency/action values."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            details=details,
        )


class PricingNotFoundError(MarketplaceException):
    """Raised when no price row exists for a plan/currency pair."""

    def __init__(self, plan: str, currency: str, user_type: str | None = None):
        super().__init__(
            message="Plan pricing not found for selected currency",
            code="PRICING_NOT_FOUND",
            status_code=400,
            details={"plan": plan, "currency": currency, "user_type": user_type},
        )


class CurrencyNotSupportedError(MarketplaceException):
    """Raised when the currency is not in the currencies table."""

    def __init__(self, currency: str, message: str = "Currency not supported"):
        super().__init__(
            message=message,
            code="CURRENCY_NOT_SUPPORTED",
            status_code=400,
            details={"currency": currency},
        )


# =============================================================================
# Third-party Exceptions
# =============================================================================

class GatewayError(MarketplaceException):
    """
    Raised when a payment or SMS provider reports a failure.

    The provider's own message is passed through untranslated.
    """

    def __init__(self, message: str, provider: str, status_code: int = 400):
        super().__init__(
            message=message,
            code="GATEWAY_ERROR",
            status_code=status_code,
            details={"provider": provider},
        )
        self.provider = provider


class ConfigurationError(MarketplaceException):
    """Raised when a provider is called without its credentials configured."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="NOT_CONFIGURED",
            status_code=500,
        )


# =============================================================================
# Persistence Exceptions
# =============================================================================

class PersistenceError(MarketplaceException):
    """
    Raised when a critical database write fails.

    Non-critical writes (attempt logging, notifications) never raise this;
    they go through the side-effect outbox instead.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="PERSISTENCE_ERROR",
            status_code=500,
            details=details,
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def marketplace_exception_handler(
    request: Request,
    exc: MarketplaceException
) -> JSONResponse:
    """Convert MarketplaceException to JSON response."""
    logger.warning(f"{exc.code} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Reports the first failing field so the client can show a single toast.
    """
    errors = exc.errors()
    message = "Missing required fields"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))

    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": message,
        }
    )
