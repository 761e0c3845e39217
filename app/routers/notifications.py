# =============================================================================
# app/routers/notifications.py - Notification Endpoints
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Query

from app.dependencies import CurrentUser
from core.models.notification import NotificationList
from core.services.notification_service import NotificationService

router = APIRouter()


@router.get("", response_model=NotificationList)
async def list_notifications(
    user: CurrentUser,
    limit: Annotated[int, Query(ge=1, le=100, description="Max notifications to return")] = 50,
):
    """The signed-in user's notifications, newest first."""
    return NotificationService.list_for_user(user.id, limit=limit)
