"""In-memory actor repository stub."""

from __future__ import annotations

from ipdocket.application.ports.actor_repository import ActorRepositoryProtocol
from ipdocket.domain.models.actor import Actor


class ActorRepositoryStub(ActorRepositoryProtocol):
    """In-memory actor lookup.

    Attributes:
        _actors: Map of actor_id to Actor.
        lookups: Actor IDs requested, in order (for testing).
    """

    def __init__(self, actors: list[Actor] | None = None) -> None:
        self._actors: dict[str, Actor] = {a.actor_id: a for a in actors or []}
        self.lookups: list[str] = []

    async def get(self, actor_id: str) -> Actor | None:
        self.lookups.append(actor_id)
        return self._actors.get(actor_id)

    def add(self, *actors: Actor) -> None:
        """Add actors directly (for testing)."""
        for actor in actors:
            self._actors[actor.actor_id] = actor
