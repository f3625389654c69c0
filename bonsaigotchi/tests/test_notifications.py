import datetime

from bonsaigotchi import notifications
from bonsaigotchi.models import Notification, Severity, SpecimenState, Stats
from bonsaigotchi.simulation import tick

NOW = datetime.datetime(2024, 5, 1, 12, 0)
FIVE_SECONDS = datetime.timedelta(seconds=5)


def thirsty():
    return SpecimenState(name="Kaze", seed=1, birth_date=NOW, last_activity=NOW,
                         stats=Stats(hydration=15.0))


def test_condition_is_reported_once_while_active():
    state, first = tick(thirsty(), FIVE_SECONDS, now=NOW)
    assert [n.title for n in first] == ["Watering Needed"]
    assert first[0].severity is Severity.WARNING
    assert first[0].timestamp == NOW

    state, second = tick(state, FIVE_SECONDS, now=NOW + FIVE_SECONDS)
    assert second == []
    assert [n.title for n in state.active_notifications] == ["Watering Needed"]


def test_dismissed_condition_fires_again():
    state, _ = tick(thirsty(), FIVE_SECONDS, now=NOW)
    assert notifications.dismiss(state, "Watering Needed")
    assert not notifications.dismiss(state, "Watering Needed")
    state, again = tick(state, FIVE_SECONDS, now=NOW + FIVE_SECONDS)
    assert [n.title for n in again] == ["Watering Needed"]


def test_active_set_is_capped():
    state = thirsty()
    for i in range(12):
        assert notifications.push(state, Notification(f"note {i}", "", Severity.INFORMATION))
    titles = [n.title for n in state.active_notifications]
    assert len(titles) == 10
    assert titles[0] == "note 2"
    assert titles[-1] == "note 11"


def test_push_ignores_duplicates_and_none():
    state = thirsty()
    assert notifications.push(state, Notification("Poor Soil", "a", Severity.WARNING))
    assert not notifications.push(state, Notification("Poor Soil", "b", Severity.WARNING))
    assert not notifications.push(state, None)
    assert len(state.active_notifications) == 1
    assert state.active_notifications[0].message == "a"


def test_scan_severities():
    state = SpecimenState(name="Kaze", seed=1, stats=Stats(
        hydration=5.0, hunger=90.0, soil_quality=20.0, pruning_quality=10.0,
        happiness=10.0, pest_level=70.0, disease_level=65.0, stress=80.0))
    found = {n.title: n.severity for n in notifications.scan(state)}
    assert found == {
        "Watering Needed": Severity.ALERT,
        "Feeding Needed": Severity.ALERT,
        "Poor Soil": Severity.WARNING,
        "Pruning Needed": Severity.WARNING,
        "Unhappy Bonsai": Severity.WARNING,
        "Pest Infestation": Severity.ALERT,
        "Disease Detected": Severity.ALERT,
        "High Stress": Severity.WARNING,
    }

    state.stats = Stats(hunger=75.0)
    found = {n.title: n.severity for n in notifications.scan(state)}
    assert found == {"Feeding Needed": Severity.WARNING}


def test_healthy_tree_is_quiet():
    assert notifications.scan(SpecimenState(name="Kaze", seed=1)) == []


def test_mark_read():
    state, _ = tick(thirsty(), FIVE_SECONDS, now=NOW)
    assert notifications.mark_read(state, "Watering Needed")
    assert state.active_notifications[0].is_read
    assert not notifications.mark_read(state, "Feeding Needed")
