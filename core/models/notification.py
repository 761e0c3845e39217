# =============================================================================
# core/models/notification.py - Notification Schemas
# =============================================================================
# Notifications are append-only rows in user_notifications. The API only
# creates them as side effects and lists them back to their owner.
# =============================================================================

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class NotificationType(str, Enum):
    """Visual category the clients use to style a notification."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notification(BaseModel):
    """
    A row in user_notifications.

    `type` and `read` are nullable text/boolean columns; nulls and
    unrecognised types are reported as an unread info notification.
    """

    id: UUID | None = None
    user_id: UUID
    title: str = Field(..., min_length=1)
    message: str
    type: NotificationType = NotificationType.INFO
    read: bool = False
    action_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("type", mode="before")
    @classmethod
    def default_type(cls, value):
        if value not in {member.value for member in NotificationType}:
            return NotificationType.INFO
        return value

    @field_validator("read", mode="before")
    @classmethod
    def default_read(cls, value):
        return False if value is None else value


class NotificationList(BaseModel):
    """Body of GET /notifications."""

    notifications: list[Notification] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
