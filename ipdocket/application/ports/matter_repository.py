"""Matter repository port."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from ipdocket.domain.models.matter import Matter


class MatterRepositoryProtocol(Protocol):
    """Protocol for matter storage operations.

    Methods:
        get: Single matter lookup
        get_many: Batch lookup keyed by matter ID
        save: Persist a matter; returns only after the write is durable
    """

    async def get(self, matter_id: str) -> Matter | None:
        """Return a matter by ID, or None."""
        ...

    async def get_many(self, matter_ids: Iterable[str]) -> dict[str, Matter]:
        """Return the matters found among ``matter_ids`` (missing IDs omitted)."""
        ...

    async def save(self, matter: Matter) -> None:
        """Persist a matter.

        Must not return before the change is committed: status change
        notifications are emitted right after this call.
        """
        ...
