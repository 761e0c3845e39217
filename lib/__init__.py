# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable clients and utilities:
# - supabase_client.py: Typed Supabase wrapper for database operations
# - payment_gateways.py: Flutterwave / Paystack hosted checkout clients
# - termii_client.py: Termii SMS and OTP client
# - google_maps.py: Google Maps web service proxy
# - utils.py: Shared utilities (time, phone normalisation)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.payment_gateways import (
    Customer,
    FlutterwaveGateway,
    HostedPayment,
    PaymentGateway,
    PaystackGateway,
    VerifiedPayment,
    get_gateway,
)
from lib.termii_client import TermiiClient
from lib.utils import normalize_phone, parse_timestamp, to_iso, utc_now

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Payments
    "Customer",
    "FlutterwaveGateway",
    "HostedPayment",
    "PaymentGateway",
    "PaystackGateway",
    "VerifiedPayment",
    "get_gateway",
    # SMS
    "TermiiClient",
    # Utils
    "normalize_phone",
    "parse_timestamp",
    "to_iso",
    "utc_now",
]
