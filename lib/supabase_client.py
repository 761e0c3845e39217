# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides specialized methods for:
# - User profile and subscription rows
# - Subscription pricing and currency lookups
# - Payment attempt tracking
# - User notifications
# - Phone verification records
# - Remote procedure calls (smart search)
#
# All business rules (RLS, triggers, stored procedures) live in the database;
# this wrapper only reads and writes rows.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   user = SupabaseClient.fetch_user(user_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings

logger = logging.getLogger(__name__)

# PostgREST code returned by .single() when no row matches
NOT_FOUND_CODE = "PGRST116"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Carries a machine-readable code and the query context so callers can
    decide whether the failure is fatal for their request.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        pricing = SupabaseClient.fetch_pricing("monthly", "NGN", user_type="provider")
        if pricing:
            amount = pricing["price"]
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        This is appropriate for server-side operations.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    @staticmethod
    def _is_not_found(error: Exception) -> bool:
        return NOT_FOUND_CODE in str(error)

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_user(
        cls,
        user_id: str | UUID,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch a user row by ID.

        Args:
            user_id: The user UUID
            columns: PostgREST select list

        Returns:
            User dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("users")
                .select(columns)
                .eq("id", user_id_str)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if cls._is_not_found(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch user: {e}",
                code="FETCH_USER_FAILED",
                details={"user_id": user_id_str}
            )

    @classmethod
    def fetch_user_by_phone(
        cls,
        phone: str,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch the user row registered with a phone number.

        Args:
            phone: Normalised phone number (+country code)
            columns: PostgREST select list

        Returns:
            User dict, or None if no user has that phone

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table("users")
                .select(columns)
                .eq("phone", phone)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if cls._is_not_found(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch user by phone: {e}",
                code="FETCH_USER_FAILED",
                details={"phone": phone}
            )

    @classmethod
    def update_user(
        cls,
        user_id: str | UUID,
        data: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Update columns on a user row.

        Returns:
            Updated user dict, or None if no row matched

        Raises:
            SupabaseClientError: If update fails
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("users")
                .update(data)
                .eq("id", user_id_str)
                .execute()
            )
            return response.data[0] if response.data else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update user: {e}",
                code="UPDATE_USER_FAILED",
                details={"user_id": user_id_str, "columns": sorted(data)}
            )

    @classmethod
    def update_user_by_phone(
        cls,
        phone: str,
        data: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """
        Update columns on every user row registered with a phone number.

        Returns:
            List of updated rows (empty if no user has that phone)

        Raises:
            SupabaseClientError: If update fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table("users")
                .update(data)
                .eq("phone", phone)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update user by phone: {e}",
                code="UPDATE_USER_FAILED",
                details={"phone": phone, "columns": sorted(data)}
            )

    # -------------------------------------------------------------------------
    # Pricing & Currencies
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_pricing(
        cls,
        plan: str,
        currency: str,
        user_type: str | None = None,
    ) -> dict[str, Any] | None:
        """
        Fetch the price for a plan in a currency.

        When user_type is given the lookup is narrowed to that audience
        (providers and seekers can be priced differently).

        Returns:
            Pricing dict with a "price" key, or None if not priced

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            query = (
                client.table("subscription_pricing")
                .select("price")
                .eq("plan", plan)
                .eq("currency_code", currency)
            )
            if user_type:
                query = query.eq("user_type", user_type)

            response = query.single().execute()
            return response.data

        except Exception as e:
            if cls._is_not_found(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch pricing: {e}",
                code="FETCH_PRICING_FAILED",
                details={"plan": plan, "currency": currency, "user_type": user_type}
            )

    @classmethod
    def fetch_currency(cls, code: str) -> dict[str, Any] | None:
        """
        Fetch display info (name, symbol) for a currency code.

        Returns:
            Currency dict, or None if the currency is not supported

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table("currencies")
                .select("name, symbol")
                .eq("code", code)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if cls._is_not_found(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch currency: {e}",
                code="FETCH_CURRENCY_FAILED",
                details={"currency": code}
            )

    # -------------------------------------------------------------------------
    # Payment Attempts
    # -------------------------------------------------------------------------

    @classmethod
    def insert_payment_attempt(cls, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a payment attempt row.

        Returns:
            Inserted row

        Raises:
            SupabaseClientError: If insert fails or returns nothing
        """
        client = cls.get_client()

        try:
            response = (
                client.table("payment_attempts")
                .insert(data)
                .execute()
            )

            if response.data:
                return response.data[0]
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA"
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert payment attempt: {e}",
                code="INSERT_PAYMENT_ATTEMPT_FAILED",
                details={"tx_ref": data.get("tx_ref")}
            )

    @classmethod
    def update_payment_attempt(
        cls,
        tx_ref: str,
        data: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Update the payment attempt with a given tx_ref.

        Returns:
            Updated row, or None if no attempt was recorded for tx_ref

        Raises:
            SupabaseClientError: If update fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table("payment_attempts")
                .update(data)
                .eq("tx_ref", tx_ref)
                .execute()
            )
            return response.data[0] if response.data else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update payment attempt: {e}",
                code="UPDATE_PAYMENT_ATTEMPT_FAILED",
                details={"tx_ref": tx_ref}
            )

    # -------------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------------

    @classmethod
    def insert_notification(
        cls,
        user_id: str | UUID,
        title: str,
        message: str,
        notification_type: str = "info",
    ) -> dict[str, Any]:
        """
        Insert a user-facing notification.

        Raises:
            SupabaseClientError: If insert fails
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("user_notifications")
                .insert({
                    "user_id": user_id_str,
                    "title": title,
                    "message": message,
                    "type": notification_type,
                })
                .execute()
            )

            if response.data:
                return response.data[0]
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA"
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert notification: {e}",
                code="INSERT_NOTIFICATION_FAILED",
                details={"user_id": user_id_str}
            )

    @classmethod
    def fetch_notifications(
        cls,
        user_id: str | UUID,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        """
        Fetch a user's notifications, newest first.

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("user_notifications")
                .select("*")
                .eq("user_id", user_id_str)
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch notifications: {e}",
                code="FETCH_NOTIFICATIONS_FAILED",
                details={"user_id": user_id_str, "limit": limit}
            )

    # -------------------------------------------------------------------------
    # Phone Verifications (phones without a user row yet)
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_phone_verification(cls, phone: str) -> dict[str, Any] | None:
        """
        Fetch the pending verification for a phone number.

        Returns:
            Dict with verification_code and expires_at, or None

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table("phone_verifications")
                .select("verification_code, expires_at")
                .eq("phone", phone)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if cls._is_not_found(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch phone verification: {e}",
                code="FETCH_PHONE_VERIFICATION_FAILED",
                details={"phone": phone}
            )

    @classmethod
    def upsert_phone_verification(
        cls,
        phone: str,
        verification_code: str,
        expires_at: str,
        now: str,
    ) -> dict[str, Any] | None:
        """
        Store (or overwrite) the pending verification for a phone number.

        A second send for the same phone replaces the first.

        Raises:
            SupabaseClientError: If the write fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table("phone_verifications")
                .upsert(
                    {
                        "phone": phone,
                        "verification_code": verification_code,
                        "expires_at": expires_at,
                        "updated_at": now,
                    },
                    on_conflict="phone",
                )
                .execute()
            )
            return response.data[0] if response.data else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to store phone verification: {e}",
                code="UPSERT_PHONE_VERIFICATION_FAILED",
                details={"phone": phone}
            )

    @classmethod
    def delete_phone_verification(cls, phone: str) -> None:
        """
        Remove the pending verification for a phone number.

        Raises:
            SupabaseClientError: If the delete fails
        """
        client = cls.get_client()

        try:
            client.table("phone_verifications").delete().eq("phone", phone).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete phone verification: {e}",
                code="DELETE_PHONE_VERIFICATION_FAILED",
                details={"phone": phone}
            )

    # -------------------------------------------------------------------------
    # Remote Procedure Calls
    # -------------------------------------------------------------------------

    @classmethod
    def rpc(cls, function: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        """
        Call a database function and return its rows.

        Raises:
            SupabaseClientError: If the call fails
        """
        client = cls.get_client()

        try:
            response = client.rpc(function, params).execute()
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"RPC {function} failed: {e}",
                code="RPC_FAILED",
                details={"function": function}
            )
