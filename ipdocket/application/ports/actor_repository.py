"""Actor repository port."""

from __future__ import annotations

from typing import Protocol

from ipdocket.domain.models.actor import Actor


class ActorRepositoryProtocol(Protocol):
    """Protocol for actor lookups used to resolve notification recipients."""

    async def get(self, actor_id: str) -> Actor | None:
        """Return an actor by ID, or None."""
        ...
