# =============================================================================
# core/services/notification_service.py - Notification Reads
# =============================================================================

import logging
from uuid import UUID

from core.models.notification import Notification, NotificationList
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


class NotificationService:
    """Lists notifications. Creation happens through the side-effect outbox."""

    @staticmethod
    def list_for_user(user_id: UUID | str, limit: int = 50) -> NotificationList:
        """Newest-first notifications owned by user_id."""
        rows = SupabaseClient.fetch_notifications(user_id, limit=limit)
        notifications = [Notification.model_validate(row) for row in rows]
        return NotificationList(notifications=notifications, total=len(notifications))
