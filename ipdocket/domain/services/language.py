"""Notification language selection.

Notifications are rendered by the dispatcher in one of a few supported
languages. Selection order for a system-wide summary:

1. Most common language among the responsible actors of the tasks.
2. Country of the recipient's email domain.
3. The configured default.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable

import structlog

from ipdocket.domain.models.actor import Actor

log = structlog.get_logger()

SUPPORTED_LANGUAGES: tuple[str, ...] = ("en", "fr", "de")
DEFAULT_LANGUAGE: str = "en"

_DOMAIN_LANGUAGES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\.fr$"), "fr"),
    (re.compile(r"\.de$"), "de"),
    (re.compile(r"\.at$"), "de"),
    (re.compile(r"\.ch$"), "de"),
    (re.compile(r"\.be$"), "fr"),
)


def validate_language(language: str | None, default: str = DEFAULT_LANGUAGE) -> str:
    """Return a supported language code, falling back to the default.

    Args:
        language: Requested language code (case-insensitive).
        default: Fallback when unsupported or missing.

    Returns:
        A member of SUPPORTED_LANGUAGES.
    """
    if language:
        normalized = language.strip().lower()[:2]
        if normalized in SUPPORTED_LANGUAGES:
            return normalized
        log.warning(
            "unsupported_language",
            requested_language=language,
            supported_languages=list(SUPPORTED_LANGUAGES),
        )
    return default if default in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


def language_from_email(email: str) -> str | None:
    """Guess a language from the country of an email domain."""
    _, _, domain = email.rpartition("@")
    if not domain:
        return None
    for pattern, language in _DOMAIN_LANGUAGES:
        if pattern.search(domain.lower()):
            return language
    return None


def detect_language(
    actors: Iterable[Actor],
    recipient_email: str | None,
    default: str = DEFAULT_LANGUAGE,
) -> str:
    """Pick the summary language for a set of actors and a recipient.

    Ties between equally common languages go to the one seen first.

    Args:
        actors: Responsible actors of the summarized tasks.
        recipient_email: Address the summary goes to.
        default: Configured default language.

    Returns:
        A supported language code.
    """
    seen: dict[str, Actor] = {}
    for actor in actors:
        seen.setdefault(actor.actor_id, actor)

    counts = Counter(
        validate_language(actor.language, default) for actor in seen.values()
    )
    if counts:
        language, _ = counts.most_common(1)[0]
        log.debug(
            "language_detected_from_actors",
            language=language,
            distribution=dict(counts),
        )
        return language

    if recipient_email:
        language = language_from_email(recipient_email)
        if language:
            log.debug("language_detected_from_email", language=language)
            return language

    return validate_language(default)
