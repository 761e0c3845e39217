# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - payment.py: Plans, payment attempts, initiate/verify contracts
# - subscription.py: Subscription status and countdown
# - verification.py: Phone verification requests and states
# - notification.py: User notifications
# - search.py: Smart search filters and results
#
# These models define the "contract" between API and clients.
# =============================================================================

from .payment import (
    GatewayName,
    InitiatePaymentRequest,
    InitiatePaymentResponse,
    PaymentAttempt,
    PaymentStatus,
    SubscriptionPlan,
    SubscriptionSummary,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from .subscription import SubscriptionStatusResponse, TimeRemaining
from .verification import (
    PhoneVerificationRequest,
    PhoneVerificationResponse,
    SmsAction,
    VerificationRecord,
    VerificationState,
)
from .notification import Notification, NotificationList, NotificationType
from .search import SearchFilters, SearchResult

__all__ = [
    # Payment
    "GatewayName",
    "InitiatePaymentRequest",
    "InitiatePaymentResponse",
    "PaymentAttempt",
    "PaymentStatus",
    "SubscriptionPlan",
    "SubscriptionSummary",
    "VerifyPaymentRequest",
    "VerifyPaymentResponse",
    # Subscription
    "SubscriptionStatusResponse",
    "TimeRemaining",
    # Verification
    "PhoneVerificationRequest",
    "PhoneVerificationResponse",
    "SmsAction",
    "VerificationRecord",
    "VerificationState",
    # Notification
    "Notification",
    "NotificationList",
    "NotificationType",
    # Search
    "SearchFilters",
    "SearchResult",
]
