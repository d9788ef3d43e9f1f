"""PostgreSQL persistence adapters."""

from ipdocket.infrastructure.adapters.persistence.notification_record_repository import (
    PostgresNotificationRecordRepository,
)

__all__ = ["PostgresNotificationRecordRepository"]
