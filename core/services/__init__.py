# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from . import side_effects
from .subscription_service import (
    SubscriptionService,
    calculate_expiry,
    has_active_subscription,
    time_remaining,
)
from .payment_service import PaymentService, generate_tx_ref
from .verification_service import LocalCodeVerification, TermiiPinVerification
from .notification_service import NotificationService
from .search_service import SearchService

__all__ = [
    "side_effects",
    "SubscriptionService",
    "calculate_expiry",
    "has_active_subscription",
    "time_remaining",
    "PaymentService",
    "generate_tx_ref",
    "LocalCodeVerification",
    "TermiiPinVerification",
    "NotificationService",
    "SearchService",
]
