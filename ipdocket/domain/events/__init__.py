"""Domain events for ipdocket."""

from ipdocket.domain.events.matter_status import (
    MATTER_STATUS_CHANGED_EVENT_TYPE,
    MatterStatusChangedEvent,
)

__all__: list[str] = [
    "MATTER_STATUS_CHANGED_EVENT_TYPE",
    "MatterStatusChangedEvent",
]
