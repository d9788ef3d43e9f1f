"""In-memory matter repository stub."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from ipdocket.application.ports.matter_repository import MatterRepositoryProtocol
from ipdocket.domain.models.matter import Matter

logger = logging.getLogger(__name__)


class MatterRepositoryStub(MatterRepositoryProtocol):
    """In-memory matter storage.

    Attributes:
        _matters: Map of matter_id to Matter.
        _lock: Async lock for safe concurrent access.
    """

    def __init__(self, matters: list[Matter] | None = None) -> None:
        self._matters: dict[str, Matter] = {m.matter_id: m for m in matters or []}
        self._lock = asyncio.Lock()
        self.save_count = 0

    async def get(self, matter_id: str) -> Matter | None:
        async with self._lock:
            return self._matters.get(matter_id)

    async def get_many(self, matter_ids: Iterable[str]) -> dict[str, Matter]:
        async with self._lock:
            return {
                matter_id: self._matters[matter_id]
                for matter_id in matter_ids
                if matter_id in self._matters
            }

    async def save(self, matter: Matter) -> None:
        async with self._lock:
            self._matters[matter.matter_id] = matter
            self.save_count += 1
            logger.debug(
                "Saved matter %s (status=%s)", matter.matter_id, matter.status.value
            )

    def add(self, *matters: Matter) -> None:
        """Add matters directly (for testing)."""
        for matter in matters:
            self._matters[matter.matter_id] = matter
