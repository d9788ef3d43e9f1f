"""Time Authority Protocol - interface for consistent timestamp provisioning.

All services that need timestamps inject a TimeAuthorityProtocol
implementation instead of calling datetime.now() directly. Deadline
classification is only deterministic in tests if nothing reads the wall
clock behind the service's back.

Benefits:
1. **Consistency**: All services get time from a single authority
2. **Testability**: Tests inject FakeTimeAuthority for deterministic behavior
"""

from abc import ABC, abstractmethod
from datetime import datetime


class TimeAuthorityProtocol(ABC):
    """Abstract interface for time authority.

    Example usage:
        class MyService:
            def __init__(self, time_authority: TimeAuthorityProtocol) -> None:
                self._time = time_authority

            def process(self) -> None:
                now = self._time.now()  # NOT datetime.now()

    For production:
        Use SystemTimeAuthority from ipdocket.infrastructure.adapters.time
    For testing:
        Use FakeTimeAuthority from tests/helpers/fake_time_authority.py
    """

    @abstractmethod
    def now(self) -> datetime:
        """Return current local server time with timezone awareness.

        The daily schedule (08:00) is expressed in this time zone.
        """
        ...

    @abstractmethod
    def utcnow(self) -> datetime:
        """Return current UTC time (timezone-aware)."""
        ...

    @abstractmethod
    def monotonic(self) -> float:
        """Return monotonic clock value for measuring elapsed time.

        Only differences between values are meaningful.
        """
        ...
