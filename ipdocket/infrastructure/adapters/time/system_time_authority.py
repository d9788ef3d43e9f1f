"""System clock implementation of TimeAuthorityProtocol."""

from __future__ import annotations

import os
import time
from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from structlog import get_logger

from ipdocket.application.ports.time_authority import TimeAuthorityProtocol

logger = get_logger(__name__)

LOCALTIME_PATH = "/etc/localtime"


def local_zone(localtime_path: str = LOCALTIME_PATH) -> tzinfo:
    """The server's time zone, with its DST rules.

    TZ names the zone if set; otherwise the system zone file is read.
    When neither yields a zone the current fixed offset is used, which
    does not follow DST changes.
    """
    name = os.environ.get("TZ", "").lstrip(":")
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("local_zone_unknown", tz=name)
    try:
        with open(localtime_path, "rb") as f:
            return ZoneInfo.from_file(f, key="localtime")
    except (OSError, ValueError) as e:
        logger.warning(
            "local_zone_fixed_offset",
            path=localtime_path,
            error=str(e),
        )
    fixed = datetime.now().astimezone().tzinfo
    return fixed if fixed is not None else timezone.utc


class SystemTimeAuthority(TimeAuthorityProtocol):
    """Reads the system clock.

    now() returns local server time (the zone the daily schedule is
    expressed in) unless an explicit zone is given.
    """

    def __init__(self, tz: tzinfo | None = None) -> None:
        self._tz = tz if tz is not None else local_zone()

    @property
    def tz(self) -> tzinfo:
        return self._tz

    def now(self) -> datetime:
        return datetime.now(self._tz)

    def utcnow(self) -> datetime:
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()
