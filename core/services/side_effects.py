# =============================================================================
# core/services/side_effects.py - Post-Payment Side-Effect Outbox
# =============================================================================
# Writes that must not decide the outcome of a request once the subscription
# itself has been activated:
# - complete_payment_attempt: mark the PaymentAttempt completed
# - create_notification: tell the user their subscription is active
#
# Dispatch modes:
# - SIDE_EFFECTS_ASYNC=true  -> Celery task with automatic retries
# - SIDE_EFFECTS_ASYNC=false -> run inline once, failures logged
# If enqueueing fails the effect falls back to inline execution.
# =============================================================================

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from app.config import settings
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


# =============================================================================
# Handlers (shared by inline execution and the Celery tasks)
# =============================================================================

def complete_payment_attempt(tx_ref: str, transaction_id: str, verified_at: str) -> bool:
    """
    Move a payment attempt from pending to completed.

    Returns:
        False when no attempt was recorded for tx_ref (initiation's insert
        is itself best-effort), True otherwise
    """
    row = SupabaseClient.update_payment_attempt(tx_ref, {
        "status": "completed",
        "transaction_id": transaction_id,
        "verified_at": verified_at,
    })
    if row is None:
        logger.warning(f"No payment attempt recorded for {tx_ref}")
        return False
    return True


def create_notification(
    user_id: str,
    title: str,
    message: str,
    notification_type: str = "info",
) -> bool:
    """Append a notification for a user."""
    SupabaseClient.insert_notification(user_id, title, message, notification_type)
    return True


HANDLERS: dict[str, Callable[..., bool]] = {
    "complete_payment_attempt": complete_payment_attempt,
    "create_notification": create_notification,
}


# =============================================================================
# Outbox
# =============================================================================

@dataclass
class SideEffect:
    """A named handler plus the JSON-serialisable kwargs to call it with."""
    name: str
    kwargs: dict[str, Any] = field(default_factory=dict)


def run_inline(effect: SideEffect) -> bool:
    """
    Execute a side effect in-process.

    Failures are logged and reported as False; they never propagate.
    """
    handler = HANDLERS[effect.name]
    try:
        return handler(**effect.kwargs)
    except Exception as e:
        logger.error(f"Side effect {effect.name} failed: {e}")
        return False


def enqueue(effect: SideEffect) -> str:
    """
    Hand a side effect to the Celery worker.

    Returns:
        Celery task id
    """
    from workers.tasks import SIDE_EFFECT_TASKS

    result = SIDE_EFFECT_TASKS[effect.name].delay(**effect.kwargs)
    logger.info(f"Queued side effect {effect.name} as task {result.id}")
    return result.id


def dispatch(effects: list[SideEffect]) -> None:
    """
    Run or queue each side effect according to SIDE_EFFECTS_ASYNC.

    Never raises; a broker outage degrades to inline execution.
    """
    for effect in effects:
        if settings.SIDE_EFFECTS_ASYNC:
            try:
                enqueue(effect)
                continue
            except Exception as e:
                logger.warning(f"Could not queue {effect.name}, running inline: {e}")
        run_inline(effect)
