"""Notification sink adapters."""

from ipdocket.infrastructure.adapters.notification.webhook_sink import (
    WebhookNotificationSink,
)

__all__ = ["WebhookNotificationSink"]
