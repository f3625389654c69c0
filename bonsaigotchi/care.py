import logging
import datetime
from typing import Optional

from bonsaigotchi import constants as C
from bonsaigotchi.models import CareAction, CareActionKind, Notification, Severity, TimeOfDay

logger = logging.getLogger(__name__)

# Actions whose primary stat follows the time-of-day factor, outside penalty branches
TIME_SCALED_ACTIONS = (CareActionKind.WATER, CareActionKind.FEED, CareActionKind.PRUNE)


def _clamp_param(value, default):
    if value is None:
        return default
    return max(C.STAT_MIN, min(C.STAT_MAX, float(value)))


def time_of_day_factor(time_of_day: Optional[TimeOfDay]) -> float:
    if time_of_day is None:
        return 1.0
    return C.TIME_OF_DAY_FACTORS.get(time_of_day.name, 1.0)


def _scale_change(stats, name, before, factor):
    """Stretches the change already applied to one stat by the time-of-day factor."""
    if factor == 1.0:
        return
    change = getattr(stats, name) - before
    stats.adjust(name, change * factor - change)


def _water(state, days, factor):
    cfg = C.WATER
    s = state.stats
    before = s.hydration
    warning = None
    increase = cfg["base_hydration"]
    lo, hi = cfg["ideal_window"]
    if lo <= days <= hi:
        increase = cfg["ideal_hydration"]
    if days < cfg["too_soon"]:
        increase = cfg["too_soon_hydration"]
        s.adjust("soil_quality", cfg["too_soon_soil"])
        s.adjust("health", cfg["too_soon_health"])
        warning = Notification("Overwatering",
                               "You've watered your bonsai too soon! Be careful not to overwater.",
                               Severity.WARNING)
    elif days > cfg["too_late"]:
        s.adjust("health", cfg["too_late_health"])
        warning = Notification("Severe Underwatering",
                               "Your bonsai was very thirsty! Try to water more regularly.",
                               Severity.WARNING)
    s.adjust("hydration", increase)
    s.adjust("hunger", cfg["hunger"])
    s.adjust("happiness", cfg["happiness"])
    if warning is None:
        _scale_change(s, "hydration", before, factor)
    info = Notification("Watering", f"{state.name} enjoyed the water!", Severity.INFORMATION)
    return f"Hydration +{s.hydration - before:.1f}", warning or info


def _feed(state, days, factor):
    cfg = C.FEED
    s = state.stats
    before = s.hunger
    warning = None
    hunger, happiness, growth = cfg["base_hunger"], cfg["base_happiness"], cfg["base_growth"]
    lo, hi = cfg["ideal_window"]
    if lo <= days <= hi:
        hunger, happiness, growth = cfg["ideal_hunger"], cfg["ideal_happiness"], cfg["ideal_growth"]
    if days < cfg["too_soon"]:
        hunger = cfg["too_soon_hunger"]
        s.adjust("soil_quality", cfg["too_soon_soil"])
        s.adjust("health", cfg["too_soon_health"])
        warning = Notification("Overfeeding",
                               "You've fed your bonsai too soon! The soil is becoming nutrient-heavy.",
                               Severity.WARNING)
    elif days > cfg["too_late"]:
        s.adjust("health", cfg["too_late_health"])
        warning = Notification("Undernourished",
                               "Your bonsai was very hungry! Regular feeding is important.",
                               Severity.WARNING)
    s.adjust("hunger", -hunger)
    s.adjust("happiness", happiness)
    s.adjust("growth", growth)
    s.adjust("soil_quality", cfg["soil"])
    if warning is None:
        _scale_change(s, "hunger", before, factor)
    info = Notification("Feeding", f"{state.name} absorbed the nutrients!", Severity.INFORMATION)
    return f"Hunger -{before - s.hunger:.1f}, Growth +{growth:.1f}", warning or info


def _prune(state, days, factor):
    cfg = C.PRUNE
    s = state.stats
    before = s.pruning_quality
    warning = None
    pruning, happiness = cfg["base_pruning"], cfg["base_happiness"]
    lo, hi = cfg["ideal_window"]
    if lo <= days <= hi:
        pruning, happiness = cfg["ideal_pruning"], cfg["ideal_happiness"]
        s.adjust("growth", cfg["ideal_growth"])
    if days < cfg["too_soon"]:
        pruning, happiness = cfg["too_soon_pruning"], cfg["too_soon_happiness"]
        s.adjust("health", cfg["too_soon_health"])
        warning = Notification("Over-pruning",
                               "You've pruned your bonsai too soon! This is stressful for the tree.",
                               Severity.WARNING)
    s.adjust("pruning_quality", pruning)
    s.adjust("happiness", happiness)
    if warning is None:
        _scale_change(s, "pruning_quality", before, factor)
    info = Notification("Pruning", f"{state.name} has been shaped through pruning!", Severity.INFORMATION)
    return f"Pruning Quality +{s.pruning_quality - before:.1f}", warning or info


def _repot(state, days, factor):
    cfg = C.REPOT
    s = state.stats
    warning = None
    soil, happiness, health = cfg["base_soil"], cfg["base_happiness"], cfg["base_health"]
    if days >= cfg["ideal_after"]:
        soil, health = cfg["ideal_soil"], cfg["ideal_health"]
    if days < cfg["too_soon"]:
        soil, health, happiness = cfg["too_soon_soil"], cfg["too_soon_health"], cfg["too_soon_happiness"]
        warning = Notification("Frequent Repotting",
                               "You've repotted your bonsai too soon! This causes significant stress.",
                               Severity.WARNING)
    # Fresh soil replaces the old one outright
    s.set("soil_quality", soil)
    s.adjust("happiness", happiness)
    s.adjust("health", health)
    info = Notification("Repotting", f"{state.name} has been moved to fresh soil!", Severity.INFORMATION)
    return f"Soil Quality {soil:.1f}, Health {health:+.1f}", warning or info


def _play(state, score):
    increase = score * C.PLAY_HAPPINESS_PER_POINT
    state.stats.adjust("happiness", increase)
    return (f"Happiness +{increase:.1f}",
            Notification("Playtime", f"{state.name} enjoyed the interaction!", Severity.INFORMATION))


def _treat_pests(state, effectiveness):
    cfg = C.PEST_TREATMENT
    s = state.stats
    reduction = cfg["reduction"] * effectiveness / 100.0
    s.adjust("pest_level", -reduction)
    s.adjust("happiness", cfg["happiness"])
    s.adjust("stress", cfg["stress"])
    if effectiveness > C.EXPERT_EFFECTIVENESS:
        note = Notification("Pests Removed",
                            f"You expertly removed the pests from {state.name}!",
                            Severity.ACHIEVEMENT)
    else:
        note = Notification("Pests Treated",
                            f"You treated {state.name} for pests. Some may remain.",
                            Severity.INFORMATION)
    return f"Pests -{reduction:.1f}", note


def _treat_disease(state, effectiveness):
    cfg = C.DISEASE_TREATMENT
    s = state.stats
    reduction = cfg["reduction"] * effectiveness / 100.0
    s.adjust("disease_level", -reduction)
    s.adjust("happiness", cfg["happiness"])
    s.adjust("stress", cfg["stress"])
    s.adjust("health", cfg["health"])
    if effectiveness > C.EXPERT_EFFECTIVENESS:
        note = Notification("Disease Treated",
                            f"Your careful treatment is curing {state.name}!",
                            Severity.ACHIEVEMENT)
    else:
        note = Notification("Disease Treatment Started",
                            f"{state.name} is receiving treatment. Keep monitoring its health.",
                            Severity.INFORMATION)
    return f"Disease -{reduction:.1f}", note


def perform(state, kind: CareActionKind, now: datetime.datetime,
            effectiveness=None, score=None, time_of_day=None) -> Optional[Notification]:
    """Applies one care action to the state in place.

    Returns the notification describing the outcome, or None when the specimen is dead.
    Penalty branches are ordinary outcomes with a WARNING notification.
    """
    if state.is_dead:
        logger.info("Ignoring %s: %s is dead", kind.name, state.name)
        return None

    days = state.days_since(kind, now)
    factor = time_of_day_factor(time_of_day)

    if kind is CareActionKind.WATER:
        effect, note = _water(state, days, factor)
    elif kind is CareActionKind.FEED:
        effect, note = _feed(state, days, factor)
    elif kind is CareActionKind.PRUNE:
        effect, note = _prune(state, days, factor)
    elif kind is CareActionKind.REPOT:
        effect, note = _repot(state, days, factor)
    elif kind is CareActionKind.PLAY:
        effect, note = _play(state, _clamp_param(score, C.DEFAULT_PLAY_SCORE))
    elif kind is CareActionKind.PEST_TREATMENT:
        effect, note = _treat_pests(state, _clamp_param(effectiveness, C.DEFAULT_EFFECTIVENESS))
    elif kind is CareActionKind.DISEASE_TREATMENT:
        effect, note = _treat_disease(state, _clamp_param(effectiveness, C.DEFAULT_EFFECTIVENESS))
    else:
        raise ValueError(f"unknown care action {kind!r}")

    scaled = kind in TIME_SCALED_ACTIONS and note.severity is not Severity.WARNING
    if scaled and factor > 1.0:
        effect += " (time of day bonus)"
    elif scaled and factor < 1.0:
        effect += " (night penalty)"

    state.last_actions[kind] = now
    state.last_activity = now
    state.care_counts[kind] = state.care_counts.get(kind, 0) + 1
    state.care_history.append(CareAction(kind, now, state.in_game_time, effect))
    if len(state.care_history) > C.CARE_HISTORY_LIMIT:
        del state.care_history[:-C.CARE_HISTORY_LIMIT]
    note.timestamp = now
    logger.debug("%s on %s: %s", kind.name, state.name, effect)
    return note
