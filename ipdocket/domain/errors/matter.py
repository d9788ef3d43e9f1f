"""Matter errors."""

from __future__ import annotations

from ipdocket.domain.exceptions import IpDocketError


class MatterNotFoundError(IpDocketError):
    """Raised when a matter referenced by id does not exist."""

    def __init__(self, matter_id: str) -> None:
        super().__init__(f"Matter not found: {matter_id}")
        self.matter_id = matter_id
