# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides common fixtures for testing (ids, clock, gateway payloads)
# =============================================================================

import os
from datetime import datetime, timezone
from uuid import UUID

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-enough-length-for-hs256")
os.environ.setdefault("FLUTTERWAVE_SECRET_KEY", "FLWSECK_TEST-abc123")
os.environ.setdefault("PAYSTACK_SECRET_KEY", "sk_test_abc123")
os.environ.setdefault("TERMII_API_KEY", "test-termii-key")
os.environ.setdefault("GOOGLE_MAPS_API_KEY", "test-maps-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")
os.environ["SIDE_EFFECTS_ASYNC"] = "false"
os.environ["PAYMENT_GATEWAY"] = "flutterwave"
os.environ["TX_REF_PREFIX"] = "FWS"

import pytest


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def user_id() -> UUID:
    """A fixed user id (first 8 chars: 0f8e2c1a)."""
    return UUID("0f8e2c1a-7b3d-4c55-9a10-2b6e8d4f1c90")


@pytest.fixture
def now() -> datetime:
    """A fixed, timezone-aware 'current time'."""
    return datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def flutterwave_verify_body(user_id):
    """A successful Flutterwave verify-by-id response."""
    return {
        "status": "success",
        "message": "Transaction fetched successfully",
        "data": {
            "id": 4975363,
            "tx_ref": "FWS_0f8e2c1a_yearly_1772366400000",
            "status": "successful",
            "amount": 25000,
            "currency": "NGN",
            "meta": {
                "user_id": str(user_id),
                "plan": "yearly",
                "currency": "NGN",
            },
        },
    }


@pytest.fixture
def user_row(user_id):
    """A users row as Supabase returns it after a subscription update."""
    return {
        "id": str(user_id),
        "user_type": "seeker",
        "subscription_plan": "yearly",
        "subscription_status": "yearly",
        "subscription_expiry": "2027-03-01T12:00:00+00:00",
        "can_access_contact": True,
    }
