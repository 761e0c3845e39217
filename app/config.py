# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    Gateway keys are optional so the API can boot with only the
    providers that are actually configured; handlers check for them
    at call time.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="Legacy HS256 JWT secret used to verify user access tokens"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (for Celery side-effect queue)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
    )

    SIDE_EFFECTS_ASYNC: bool = Field(
        default=False,
        description="Queue post-payment side effects on Celery instead of running them inline"
    )

    # -------------------------------------------------------------------------
    # Payment Gateways
    # -------------------------------------------------------------------------

    PAYMENT_GATEWAY: Literal["flutterwave", "paystack"] = Field(
        default="flutterwave",
        description="Gateway used by /payments when none is requested"
    )

    FLUTTERWAVE_SECRET_KEY: str = Field(
        default="",
        description="Flutterwave v3 secret key"
    )

    FLUTTERWAVE_BASE_URL: str = Field(
        default="https://api.flutterwave.com/v3",
    )

    PAYSTACK_SECRET_KEY: str = Field(
        default="",
        description="Paystack secret key"
    )

    PAYSTACK_BASE_URL: str = Field(
        default="https://api.paystack.co",
    )

    TX_REF_PREFIX: str = Field(
        default="FWS",
        min_length=1,
        max_length=16,
        description="Prefix for generated transaction references"
    )

    PAYMENT_FALLBACK_EMAIL_DOMAIN: str = Field(
        default="findwhosabi.com",
        description="Domain for gateway emails of phone-only accounts"
    )

    SITE_NAME: str = Field(default="FindWhoSabi")

    SITE_LOGO_URL: str = Field(default="")

    GATEWAY_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)

    # -------------------------------------------------------------------------
    # SMS / OTP (Termii)
    # -------------------------------------------------------------------------

    TERMII_API_KEY: str = Field(
        default="",
        description="Termii API key"
    )

    TERMII_SENDER_ID: str = Field(
        default="N-Alert",
        description="Registered Termii sender id"
    )

    TERMII_BASE_URL: str = Field(
        default="https://v3.api.termii.com/api",
    )

    OTP_TTL_MINUTES: int = Field(
        default=10,
        ge=1,
        le=60,
        description="Lifetime of an issued verification code"
    )

    # -------------------------------------------------------------------------
    # Google Maps
    # -------------------------------------------------------------------------

    GOOGLE_MAPS_API_KEY: str = Field(
        default="",
        description="Server-side Google Maps key used by the /maps proxy"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(default="0.0.0.0")

    API_PORT: int = Field(default=8000, ge=1, le=65535)

    # Edge functions are called straight from the browser and the mobile shell
    CORS_ORIGINS: str = Field(
        default="*",
        description="Allowed CORS origins (comma-separated)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
