"""Localized subject lines for outgoing notifications.

Only subjects are produced here; body rendering belongs to the dispatcher,
which receives the structured payload and the chosen language.
"""

from __future__ import annotations

from ipdocket.domain.models.matter import MatterStatus
from ipdocket.domain.services.language import validate_language

SUBJECT_PREFIX: str = "[ipdocket]"


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


def urgent_tasks_subject(total: int, language: str) -> str:
    """Subject of a per-recipient urgent tasks batch."""
    lang = validate_language(language)
    if lang == "fr":
        noun = _plural(total, "tâche", "tâches")
        verb = _plural(total, "nécessite", "nécessitent")
        return f"{SUBJECT_PREFIX} Tâches urgentes ({total} {noun} {verb} votre attention)"
    if lang == "de":
        noun = _plural(total, "Aufgabe", "Aufgaben")
        verb = _plural(total, "erfordert", "erfordern")
        return (
            f"{SUBJECT_PREFIX} Dringende Aufgaben "
            f"({total} {noun} {verb} Ihre Aufmerksamkeit)"
        )
    noun = _plural(total, "task", "tasks")
    verb = _plural(total, "requires", "require")
    return f"{SUBJECT_PREFIX} Urgent Tasks ({total} {noun} {verb} your attention)"


def tasks_summary_subject(total: int, language: str) -> str:
    """Subject of the daily system-wide summary."""
    lang = validate_language(language)
    if lang == "fr":
        noun = _plural(total, "tâche", "tâches")
        return f"{SUBJECT_PREFIX} Récapitulatif des tâches urgentes ({total} {noun})"
    if lang == "de":
        noun = _plural(total, "Aufgabe", "Aufgaben")
        return f"{SUBJECT_PREFIX} Zusammenfassung dringender Aufgaben ({total} {noun})"
    noun = _plural(total, "task", "tasks")
    return f"{SUBJECT_PREFIX} Urgent Tasks Summary ({total} {noun})"


def status_change_subject(matter_uid: str, new_status: MatterStatus, language: str) -> str:
    """Subject of a matter status change notification."""
    lang = validate_language(language)
    if lang == "fr":
        return f"{SUBJECT_PREFIX} Changement de statut : {matter_uid} est maintenant {new_status.value}"
    if lang == "de":
        return f"{SUBJECT_PREFIX} Statusänderung: {matter_uid} ist jetzt {new_status.value}"
    return f"{SUBJECT_PREFIX} Status change: {matter_uid} is now {new_status.value}"
