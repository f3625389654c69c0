import copy
import random
import datetime

import pytest

from bonsaigotchi import constants as C
from bonsaigotchi import environment
from bonsaigotchi.models import (
    BonsaiStyle,
    EmotionalState,
    EnvironmentalEvent,
    EnvironmentSnapshot,
    EventType,
    Season,
    SpecimenState,
    Stats,
    Weather,
)

NOW = datetime.datetime(2024, 5, 1, 12, 0)


def middling(style=BonsaiStyle.FORMAL_UPRIGHT):
    stats = Stats(health=50.0, happiness=50.0, hunger=50.0, hydration=50.0,
                  soil_quality=50.0, pruning_quality=50.0, stress=50.0)
    return SpecimenState(name="Kaze", seed=1, birth_date=NOW, stats=stats, last_activity=NOW, style=style)


def test_storm_day():
    calm, stormy = middling(), middling()
    environment.apply(calm, EnvironmentSnapshot(), 1.0, NOW)
    environment.apply(stormy, EnvironmentSnapshot(weather=Weather.STORM), 1.0, NOW)
    assert stormy.stats.stress - calm.stats.stress == pytest.approx(6.0)
    assert stormy.stats.hydration - calm.stats.hydration == pytest.approx(3.0)
    assert stormy.stats.happiness - calm.stats.happiness == pytest.approx(-2.0)


def test_event_scales_with_intensity():
    calm, hot = middling(), middling()
    environment.apply(calm, EnvironmentSnapshot(), 1.0, NOW)
    heatwave = EnvironmentalEvent(EventType.HEATWAVE, intensity=50)
    environment.apply(hot, EnvironmentSnapshot(events=(heatwave,)), 1.0, NOW)
    assert hot.stats.hydration - calm.stats.hydration == pytest.approx(-2.5)
    assert hot.stats.stress - calm.stats.stress == pytest.approx(1.5)


def test_short_ticks_only_update_mood():
    state = middling()
    before = Stats(**vars(state.stats))
    environment.apply(state, EnvironmentSnapshot(weather=Weather.STORM), 0.0005, NOW)
    assert state.stats == before
    assert state.mood is EmotionalState.HAPPY


@pytest.mark.parametrize("env", [
    None,
    "stormy",
    EnvironmentSnapshot(weather="sideways", season=42, climate=object()),
    EnvironmentSnapshot(events="not a list"),
    EnvironmentSnapshot(events=(EnvironmentalEvent(kind=None, intensity="high"), object())),
])
def test_unusable_snapshots_contribute_nothing(env):
    state, reference = middling(), middling()
    environment.apply(state, env, 1.0, NOW)
    environment.apply(reference, EnvironmentSnapshot(), 1.0, NOW)
    assert state.stats == reference.stats


def test_preferences_lift_the_mood():
    cascade = middling(BonsaiStyle.CASCADE)
    liked = EnvironmentSnapshot(season=Season.SPRING, weather=Weather.RAIN)
    disliked = EnvironmentSnapshot(season=Season.WINTER, weather=Weather.SUNNY)

    environment.update_mood(cascade, liked, NOW)
    assert cascade.mood_score == 70
    assert cascade.mood is EmotionalState.THRIVING

    environment.update_mood(cascade, disliked, NOW)
    assert cascade.mood_score == 50
    assert cascade.mood is EmotionalState.HAPPY


def test_pests_and_disease_sour_the_mood():
    state = middling()
    state.stats.pest_level = 40.0
    state.stats.disease_level = 40.0
    state.stats.health = 30.0
    later = NOW + datetime.timedelta(days=3)
    assert environment.mood_score(state, EnvironmentSnapshot(), later) == 45 - 20 - 30 - 15


def test_humid_weather_breeds_pests():
    dry, humid = middling(), middling()
    environment.apply(dry, EnvironmentSnapshot(), 1.0, NOW)
    environment.apply(humid, EnvironmentSnapshot(weather=Weather.HUMID), 1.0, NOW)
    assert humid.stats.pest_level > dry.stats.pest_level


def test_neglect_adds_stress():
    cared, neglected = middling(), middling()
    neglected.last_activity = NOW - datetime.timedelta(days=10)
    environment.apply(cared, EnvironmentSnapshot(), 1.0, NOW)
    environment.apply(neglected, EnvironmentSnapshot(), 1.0, NOW)
    assert neglected.stats.stress - cared.stats.stress == pytest.approx(2.0)


def test_local_snapshot_uses_the_month():
    rng = random.Random(1)
    env = environment.local_snapshot(datetime.datetime(2024, 1, 15), rng)
    assert env.season is Season.WINTER
    assert env.weather in {w for _, w in environment.SEASONAL_WEATHER[Season.WINTER]}
    assert environment.season_for_month(7) is Season.SUMMER
    assert environment.season_for_month(10) is Season.AUTUMN


def test_event_description():
    assert EnvironmentalEvent(EventType.HEAVY_RAIN, 80).description == "severe heavy rain"
    assert EnvironmentalEvent(EventType.FROST, 10).description == "mild frost"


def test_state_is_modified_in_place_only():
    state = middling()
    snapshot = copy.deepcopy(state)
    environment.mood_score(state, EnvironmentSnapshot(weather=Weather.STORM), NOW)
    assert state == snapshot


@pytest.mark.parametrize("kind", list(EventType))
def test_every_event_has_an_effect(kind):
    assert C.EVENT_EFFECTS[kind.name]
    calm, eventful = middling(), middling()
    environment.apply(calm, EnvironmentSnapshot(), 1.0, NOW)
    environment.apply(eventful, EnvironmentSnapshot(events=(EnvironmentalEvent(kind, 100),)), 1.0, NOW)
    assert eventful.stats != calm.stats


def test_storm_event_at_full_intensity():
    calm, stormy = middling(), middling()
    environment.apply(calm, EnvironmentSnapshot(), 1.0, NOW)
    environment.apply(stormy, EnvironmentSnapshot(events=(EnvironmentalEvent(EventType.STORM, 100),)), 1.0, NOW)
    assert stormy.stats.stress - calm.stats.stress == pytest.approx(3.0)
    assert stormy.stats.happiness - calm.stats.happiness == pytest.approx(-2.0)
