"""Pure domain services for ipdocket."""

from ipdocket.domain.services.deadline_classifier import classify

__all__: list[str] = ["classify"]
