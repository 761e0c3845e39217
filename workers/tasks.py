# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Background execution of the post-payment side effects.
#
# Tasks:
# - complete_payment_attempt: Mark a PaymentAttempt completed
# - create_notification: Insert a user notification
#
# Both retry automatically with exponential backoff. The handlers live in
# core/services/side_effects.py so the inline path runs the same code.
# =============================================================================

import logging
from typing import Any

from celery import shared_task

from core.services import side_effects
from lib.supabase_client import SupabaseClientError

logger = logging.getLogger(__name__)

RETRY_POLICY: dict[str, Any] = {
    "autoretry_for": (SupabaseClientError, ConnectionError, TimeoutError),
    "retry_backoff": True,
    "retry_backoff_max": 600,
    "retry_jitter": True,
    "max_retries": 5,
}


@shared_task(bind=True, name="workers.tasks.complete_payment_attempt", **RETRY_POLICY)
def complete_payment_attempt(
    self,
    tx_ref: str,
    transaction_id: str,
    verified_at: str,
) -> dict[str, Any]:
    """
    Mark a payment attempt completed.

    Args:
        tx_ref: Transaction reference of the attempt
        transaction_id: Gateway transaction id
        verified_at: ISO timestamp of verification

    Returns:
        Dict with tx_ref and whether an attempt row was found
    """
    logger.info(f"Completing payment attempt {tx_ref} (attempt {self.request.retries + 1})")
    found = side_effects.complete_payment_attempt(tx_ref, transaction_id, verified_at)
    return {"tx_ref": tx_ref, "updated": found}


@shared_task(bind=True, name="workers.tasks.create_notification", **RETRY_POLICY)
def create_notification(
    self,
    user_id: str,
    title: str,
    message: str,
    notification_type: str = "info",
) -> dict[str, Any]:
    """
    Insert a notification for a user.

    Args:
        user_id: Recipient user UUID
        title: Short heading
        message: Body text
        notification_type: info, success, warning or error
    """
    logger.info(f"Creating notification for user {user_id}: {title}")
    side_effects.create_notification(user_id, title, message, notification_type)
    return {"user_id": user_id, "title": title}


SIDE_EFFECT_TASKS = {
    "complete_payment_attempt": complete_payment_attempt,
    "create_notification": create_notification,
}
