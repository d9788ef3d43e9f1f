"""Configuration module for ipdocket.

Available Configurations:
- NotificationJobConfig: Urgent task notification job
- StatusNotificationConfig: Matter status change notifications
"""

from ipdocket.config.notification_config import (
    DEFAULT_NOTIFICATION_JOB_CONFIG,
    DEFAULT_STATUS_NOTIFICATION_CONFIG,
    NotificationJobConfig,
    RecipientRule,
    StatusNotificationConfig,
    parse_status_routes,
)

__all__ = [
    "DEFAULT_NOTIFICATION_JOB_CONFIG",
    "DEFAULT_STATUS_NOTIFICATION_CONFIG",
    "NotificationJobConfig",
    "RecipientRule",
    "StatusNotificationConfig",
    "parse_status_routes",
]
