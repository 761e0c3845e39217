# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the marketplace edge API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    MarketplaceException,
    marketplace_exception_handler,
    validation_exception_handler,
)
from app.routers import health, payments, verification, subscriptions, notifications, search, maps

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Logs configuration on startup; nothing needs tearing down.
    """
    logger.info(f"Starting marketplace API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(f"Default payment gateway: {settings.PAYMENT_GATEWAY}")
    logger.info(
        "Side effects: " + ("queued on Celery" if settings.SIDE_EFFECTS_ASYNC else "inline")
    )

    yield

    logger.info("Shutting down marketplace API")


# Create FastAPI application
app = FastAPI(
    title="FindWhoSabi Marketplace API",
    description="""
## Marketplace Edge API

Server-side operations for the provider/seeker marketplace. All business
data lives in Supabase; this API holds the secrets the clients must not.

### Subscription Purchase

1. **Initiate** - `POST /api/v1/payments/initiate` returns a hosted payment link
2. **Pay** - the user completes checkout on the gateway's page
3. **Verify** - `POST /api/v1/payments/verify` with the redirect's `transaction_id` and `tx_ref`

### Phone Verification

| Endpoint | Code generated by |
|----------|-------------------|
| `POST /api/v1/sms` | this API, delivered as plain SMS |
| `POST /api/v1/otp` | Termii, tracked by pinId |

Errors always have the shape `{"success": false, "error": "<message>"}`.
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Payments",
            "description": "Subscription payment initiation and verification",
        },
        {
            "name": "Verification",
            "description": "Phone number verification by SMS code or OTP",
        },
        {
            "name": "Subscriptions",
            "description": "Subscription status and countdown",
        },
        {
            "name": "Notifications",
            "description": "User notifications",
        },
        {
            "name": "Search",
            "description": "Provider and service smart search",
        },
        {
            "name": "Maps",
            "description": "Google Maps places and geocoding proxy",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# Browser and mobile clients call from arbitrary origins; wildcard origins
# cannot be combined with credentials.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials="*" not in settings.cors_origins_list,
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(MarketplaceException)
async def handle_marketplace_exception(request: Request, exc: MarketplaceException):
    """Handle custom marketplace exceptions."""
    return await marketplace_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    """Handle malformed request bodies."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "An unexpected error occurred",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# Payment endpoints
app.include_router(
    payments.router,
    prefix="/api/v1/payments",
    tags=["Payments"]
)

# Phone verification endpoints
app.include_router(
    verification.router,
    prefix="/api/v1",
    tags=["Verification"]
)

# Subscription endpoints
app.include_router(
    subscriptions.router,
    prefix="/api/v1/subscriptions",
    tags=["Subscriptions"]
)

# Notification endpoints
app.include_router(
    notifications.router,
    prefix="/api/v1/notifications",
    tags=["Notifications"]
)

# Smart search endpoint
app.include_router(
    search.router,
    prefix="/api/v1",
    tags=["Search"]
)

# Maps proxy endpoint
app.include_router(
    maps.router,
    prefix="/api/v1",
    tags=["Maps"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "FindWhoSabi Marketplace API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
