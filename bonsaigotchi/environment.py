import logging
import datetime
from typing import Optional

from bonsaigotchi import constants as C
from bonsaigotchi.models import (
    BonsaiStyle,
    Climate,
    EmotionalState,
    EnvironmentSnapshot,
    Season,
    Weather,
)

logger = logging.getLogger(__name__)

# Weather and seasons each trunk style thrives in
PREFERRED_WEATHER = {
    BonsaiStyle.FORMAL_UPRIGHT: {Weather.SUNNY},
    BonsaiStyle.INFORMAL_UPRIGHT: {Weather.CLOUDY, Weather.SUNNY},
    BonsaiStyle.WINDSWEPT: {Weather.WIND},
    BonsaiStyle.CASCADE: {Weather.RAIN, Weather.HUMID},
    BonsaiStyle.SLANTING: {Weather.WIND, Weather.SUNNY},
}
PREFERRED_SEASONS = {
    BonsaiStyle.FORMAL_UPRIGHT: {Season.SUMMER},
    BonsaiStyle.INFORMAL_UPRIGHT: {Season.SPRING},
    BonsaiStyle.WINDSWEPT: {Season.AUTUMN},
    BonsaiStyle.CASCADE: {Season.SPRING, Season.SUMMER},
    BonsaiStyle.SLANTING: {Season.AUTUMN},
}


def _effects_for(table, value):
    """Looks an enum value up in a constants table; anything unknown has no effect."""
    name = getattr(value, "name", None)
    if not isinstance(name, str):
        return {}
    return table.get(name, {})


def days_since_activity(state, now: datetime.datetime) -> float:
    last = state.last_activity or state.birth_date
    return (now - last).total_seconds() / 86400.0


def update_pests_and_disease(state, env: EnvironmentSnapshot, days_fraction: float):
    s = state.stats
    pest_rate = C.PEST_BASE_RATE
    if s.hydration > 90:
        pest_rate += 1.0
    if s.soil_quality < 40:
        pest_rate += 1.0
    if env.season is Season.SUMMER:
        pest_rate += 0.5
    if env.weather is Weather.HUMID:
        pest_rate += 1.0
    if state.mood_score < -30:
        pest_rate += 0.5

    disease_rate = C.DISEASE_BASE_RATE
    if s.hydration > 95 or s.hydration < 20:
        disease_rate += 1.0
    if s.soil_quality < 30:
        disease_rate += 1.0
    if s.has_pests:
        disease_rate += 0.5
    if env.weather is Weather.RAIN and env.season is not Season.SPRING:
        disease_rate += 0.5
    if s.health < 40:
        disease_rate += 1.0

    s.adjust("pest_level", pest_rate * days_fraction)
    s.adjust("disease_level", disease_rate * days_fraction)

    if s.has_pests or s.has_disease:
        loss = (s.pest_level + s.disease_level) * C.PEST_DISEASE_HEALTH_FACTOR * days_fraction
        s.adjust("health", -loss)


def update_stress(state, env: EnvironmentSnapshot, days_fraction: float, now: datetime.datetime):
    s = state.stats
    change = -C.STRESS_RECOVERY_PER_DAY
    if s.hydration < 20 or s.hydration > 90:
        change += 5.0
    if s.hunger > 80:
        change += 4.0
    if s.has_pests:
        change += 3.0
    if s.has_disease:
        change += 5.0
    if env.weather is Weather.STORM:
        change += 3.0
    if days_since_activity(state, now) > C.NEGLECT_DAYS:
        change += 2.0
    s.adjust("stress", change * days_fraction)


def is_weather_preferred(style, weather: Optional[Weather]) -> bool:
    return isinstance(weather, Weather) and weather in PREFERRED_WEATHER.get(style, ())


def is_season_preferred(style, season: Optional[Season]) -> bool:
    return isinstance(season, Season) and season in PREFERRED_SEASONS.get(style, ())


def mood_score(state, env: EnvironmentSnapshot, now: datetime.datetime) -> int:
    s = state.stats
    score = int((100 - s.hunger) * 0.3) + int((100 - s.stress) * 0.3) + int(s.happiness * 0.3)
    if is_weather_preferred(state.style, env.weather):
        score += 10
    if is_season_preferred(state.style, env.season):
        score += 10
    if days_since_activity(state, now) < 2:
        score += 5
    if s.has_pests:
        score -= 20
    if s.has_disease:
        score -= 30
    if s.health < 40:
        score -= 15
    return max(-100, min(100, score))


def update_mood(state, env: EnvironmentSnapshot, now: datetime.datetime):
    state.mood_score = mood_score(state, env, now)
    state.mood = EmotionalState.from_score(state.mood_score)


def apply(state, env: Optional[EnvironmentSnapshot], days_fraction: float, now: datetime.datetime):
    """Runs the environmental modifiers for one tick, in place.

    Order: pests and disease, stress, season, weather, climate, events, mood.
    Missing or unrecognised values in the snapshot simply contribute nothing.
    """
    if not isinstance(env, EnvironmentSnapshot):
        env = EnvironmentSnapshot()
    s = state.stats

    if days_fraction >= C.MIN_DAYS_FRACTION:
        update_pests_and_disease(state, env, days_fraction)
        update_stress(state, env, days_fraction, now)
        s.apply(_effects_for(C.SEASON_EFFECTS, env.season), days_fraction)
        s.apply(_effects_for(C.WEATHER_EFFECTS, env.weather), days_fraction)
        s.apply(_effects_for(C.CLIMATE_EFFECTS, env.climate), days_fraction)
        events = env.events if isinstance(env.events, (list, tuple)) else ()
        for event in events:
            intensity = getattr(event, "intensity", 0)
            if not isinstance(intensity, (int, float)):
                continue
            intensity = max(1, min(100, intensity))
            s.apply(_effects_for(C.EVENT_EFFECTS, getattr(event, "kind", None)),
                    days_fraction * intensity / 100.0)

    update_mood(state, env, now)


# Cumulative weather odds per season, used by the host's stand-in scheduler
SEASONAL_WEATHER = {
    Season.WINTER: ((0.3, Weather.SNOW), (0.6, Weather.CLOUDY), (0.8, Weather.WIND),
                    (0.9, Weather.SUNNY), (1.0, Weather.RAIN)),
    Season.SPRING: ((0.4, Weather.RAIN), (0.7, Weather.SUNNY), (0.85, Weather.CLOUDY),
                    (0.95, Weather.HUMID), (1.0, Weather.WIND)),
    Season.SUMMER: ((0.6, Weather.SUNNY), (0.8, Weather.HUMID), (0.9, Weather.CLOUDY),
                    (0.95, Weather.RAIN), (1.0, Weather.STORM)),
    Season.AUTUMN: ((0.3, Weather.WIND), (0.6, Weather.CLOUDY), (0.8, Weather.RAIN),
                    (0.95, Weather.SUNNY), (1.0, Weather.STORM)),
}


def season_for_month(month: int) -> Season:
    if month in (12, 1, 2):
        return Season.WINTER
    if month in (3, 4, 5):
        return Season.SPRING
    if month in (6, 7, 8):
        return Season.SUMMER
    return Season.AUTUMN


def random_weather(season: Season, rng) -> Weather:
    roll = rng.random()
    for threshold, weather in SEASONAL_WEATHER[season]:
        if roll < threshold:
            return weather
    return Weather.CLOUDY


def local_snapshot(now: datetime.datetime, rng, climate=Climate.TEMPERATE, time_of_day=None) -> EnvironmentSnapshot:
    """A simple stand-in for an environment scheduler: the real month's season and a weather roll."""
    season = season_for_month(now.month)
    return EnvironmentSnapshot(season=season, weather=random_weather(season, rng),
                               climate=climate, time_of_day=time_of_day)
