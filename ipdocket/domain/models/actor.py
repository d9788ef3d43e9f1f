"""Actor domain model.

An actor is any person or organisation a matter refers to: the client,
the responsible attorney, agents. Only the fields the notification
pipeline needs are modelled here.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, eq=True)
class Actor:
    """A notification recipient.

    Attributes:
        actor_id: Unique identifier (login for internal users).
        name: Display name.
        email: Delivery address; actors without one cannot be notified.
        language: Preferred language code (en, fr, de), None for default.
    """

    actor_id: str
    name: str
    email: str | None = None
    language: str | None = None

    def __post_init__(self) -> None:
        """Validate actor fields."""
        if not self.actor_id:
            raise ValueError("actor_id cannot be empty")

    @property
    def is_reachable(self) -> bool:
        """Whether the actor has a delivery address."""
        return bool(self.email)
