import logging
from typing import List, Optional

from bonsaigotchi import constants as C
from bonsaigotchi.models import GrowthStage, Notification, Severity

logger = logging.getLogger(__name__)


def stage_progress(stage: GrowthStage, age: int) -> int:
    """Percent of the way through the age band of the stage."""
    lo, hi = C.STAGE_AGE_BANDS[stage.name]
    if hi <= lo:
        return 0
    return int(max(0.0, min(100.0, (age - lo) * 100.0 / (hi - lo))))


def can_advance(stage: GrowthStage, age: int, growth: float) -> bool:
    requirement = C.STAGE_REQUIREMENTS.get(stage.name)
    if requirement is None:
        return False
    min_age, min_growth = requirement
    return age >= min_age and growth >= min_growth


def check_stage_advancement(state) -> Optional[Notification]:
    """Moves the specimen up one stage when both its age and growth allow it."""
    if state.is_dead or not can_advance(state.stage, state.age, state.stats.growth):
        return None
    state.stage = state.stage.next_stage()
    state.stage_progress = 0
    logger.info("%s reached stage %s at age %d", state.name, state.stage.name, state.age)
    return Notification("Growth Milestone!",
                        f"{state.name} has reached a new stage: {state.stage.label}",
                        Severity.ACHIEVEMENT)


def update_stage_progress(state):
    state.stage_progress = stage_progress(state.stage, state.age)


def check_health(state) -> List[Notification]:
    """Sickness, recovery and death. Death is final."""
    if state.is_dead:
        return []
    s = state.stats
    notes = []

    if s.health < C.SICK_HEALTH or s.hydration < C.SICK_HYDRATION or s.hunger > C.SICK_HUNGER:
        if not state.is_sick:
            state.is_sick = True
            logger.warning("%s fell sick (health %.1f)", state.name, s.health)
            notes.append(Notification("Bonsai Sickness",
                                      f"{state.name} is not feeling well! Please attend to its needs.",
                                      Severity.ALERT))
    elif (state.is_sick and s.health > C.RECOVER_HEALTH and s.hydration > C.RECOVER_HYDRATION
          and s.hunger < C.RECOVER_HUNGER):
        state.is_sick = False
        logger.info("%s recovered", state.name)
        notes.append(Notification("Recovery", f"{state.name} is feeling better now!", Severity.INFORMATION))

    if s.health <= 0 or (state.is_sick and s.health < C.DEATH_HEALTH and state.age > C.DEATH_MIN_AGE):
        state.is_dead = True
        logger.warning("%s died at age %d", state.name, state.age)
        notes.append(Notification("Bonsai Death",
                                  f"Unfortunately, {state.name} has died. You can start a new bonsai.",
                                  Severity.CRITICAL))
    elif state.age > C.MAX_AGE_DAYS:
        state.is_dead = True
        logger.info("%s died of old age at %d days", state.name, state.age)
        notes.append(Notification("Natural Death",
                                  f"{state.name} has reached the end of its natural life cycle "
                                  f"at the age of {state.age} days.",
                                  Severity.INFORMATION))
    return notes
