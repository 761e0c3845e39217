# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration and task definitions for
# post-payment side effects that are retried in the background.
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: Task definitions (payment attempt completion, notifications)
# - config.py: Worker-specific settings
#
# Usage:
#   # Start worker
#   celery -A workers.celery_app worker --loglevel=info
#
#   # Submit task (from API)
#   from workers.tasks import create_notification
#   result = create_notification.delay(user_id, title, message, "success")
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
