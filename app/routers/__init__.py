# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - payments.py: Subscription payment initiation and verification
# - verification.py: Phone verification (/sms and /otp)
# - subscriptions.py: Subscription status and countdown
# - notifications.py: User notifications
# - search.py: Provider smart search
# - maps.py: Google Maps proxy
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import payments
from . import verification
from . import subscriptions
from . import notifications
from . import search
from . import maps

__all__ = [
    "health",
    "payments",
    "verification",
    "subscriptions",
    "notifications",
    "search",
    "maps",
]
