import logging
from typing import Iterable, List

from bonsaigotchi import constants as C
from bonsaigotchi.models import Notification, Severity

logger = logging.getLogger(__name__)


def push(state, note: Notification) -> bool:
    """Adds a notification to the active set unless one with the same title is already there.

    Returns True when the notification was accepted. The oldest entries are evicted
    once the set grows past MAX_ACTIVE_NOTIFICATIONS.
    """
    if note is None:
        return False
    if any(active.title == note.title for active in state.active_notifications):
        return False
    state.active_notifications.append(note)
    while len(state.active_notifications) > C.MAX_ACTIVE_NOTIFICATIONS:
        evicted = state.active_notifications.pop(0)
        logger.debug("Evicted notification %r", evicted.title)
    return True


def push_all(state, notes: Iterable[Notification]) -> List[Notification]:
    return [note for note in notes if push(state, note)]


def scan(state) -> List[Notification]:
    """Threshold checks run after every tick."""
    s = state.stats
    name = state.name
    notes = []
    if s.hydration < C.HYDRATION_WARNING:
        notes.append(Notification(
            "Watering Needed", f"{name} is getting thirsty! Water soon.",
            Severity.ALERT if s.hydration < C.HYDRATION_ALERT else Severity.WARNING))
    if s.hunger > C.HUNGER_WARNING:
        notes.append(Notification(
            "Feeding Needed", f"{name} needs nutrients! Consider fertilizing.",
            Severity.ALERT if s.hunger > C.HUNGER_ALERT else Severity.WARNING))
    if s.soil_quality < C.SOIL_WARNING:
        notes.append(Notification(
            "Poor Soil", "The soil quality is degrading. Consider repotting soon.", Severity.WARNING))
    if s.pruning_quality < C.PRUNING_WARNING:
        notes.append(Notification(
            "Pruning Needed", f"{name} is getting unruly. Time for some pruning.", Severity.WARNING))
    if s.happiness < C.HAPPINESS_WARNING:
        notes.append(Notification(
            "Unhappy Bonsai", f"{name} seems unhappy. Try spending more time with it.", Severity.WARNING))
    if s.pest_level > C.PEST_ALERT:
        notes.append(Notification(
            "Pest Infestation",
            f"{name} is suffering from pest infestation! Use the pest removal tools immediately.",
            Severity.ALERT))
    if s.disease_level > C.DISEASE_ALERT:
        notes.append(Notification(
            "Disease Detected", f"{name} is showing signs of disease! Apply treatment immediately.",
            Severity.ALERT))
    if s.stress > C.STRESS_WARNING:
        notes.append(Notification(
            "High Stress", f"{name} is very stressed! Make sure it's getting appropriate care.",
            Severity.WARNING))
    return notes


def mark_read(state, title: str) -> bool:
    for note in state.active_notifications:
        if note.title == title:
            note.is_read = True
            return True
    return False


def dismiss(state, title: str) -> bool:
    """Clears an active notification so its condition can fire again."""
    before = len(state.active_notifications)
    state.active_notifications = [n for n in state.active_notifications if n.title != title]
    return len(state.active_notifications) != before
