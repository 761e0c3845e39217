# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# =============================================================================

import logging

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from lib.utils import to_iso, utc_now

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class ChecksResponse(BaseModel):
    """Individual service checks."""
    database: str
    payment_gateway: str
    sms: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    checks: ChecksResponse
    timestamp: str


class LivenessResponse(BaseModel):
    """Liveness check response."""
    status: str
    timestamp: str


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Returns basic health status for load balancers and monitoring.
    """
    return HealthResponse(
        status="healthy",
        timestamp=to_iso(utc_now()),
        environment=settings.ENVIRONMENT,
        version="1.0.0",
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check():
    """
    Readiness check endpoint.

    Checks database connectivity and whether the payment gateway and SMS
    provider have credentials. Providers are not called.
    """
    from lib.supabase_client import SupabaseClient

    checks = ChecksResponse(database="unknown", payment_gateway="unknown", sms="unknown")

    try:
        client = SupabaseClient.get_client()
        client.table("users").select("id").limit(1).execute()
        checks.database = "healthy"
    except Exception as e:
        logger.warning(f"Readiness database check failed: {e}")
        checks.database = f"unhealthy: {str(e)[:50]}"

    gateway_key = (
        settings.FLUTTERWAVE_SECRET_KEY
        if settings.PAYMENT_GATEWAY == "flutterwave"
        else settings.PAYSTACK_SECRET_KEY
    )
    checks.payment_gateway = "configured" if gateway_key else "not configured"
    checks.sms = "configured" if settings.TERMII_API_KEY else "not configured"

    all_ready = (
        checks.database == "healthy"
        and checks.payment_gateway == "configured"
        and checks.sms == "configured"
    )

    return ReadinessResponse(
        status="ready" if all_ready else "degraded",
        checks=checks,
        timestamp=to_iso(utc_now()),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    """
    Liveness check endpoint.

    Returns whether the service process is alive.
    """
    return LivenessResponse(
        status="alive",
        timestamp=to_iso(utc_now()),
    )
