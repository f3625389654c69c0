import logging
import datetime

from bonsaigotchi import constants as C
from bonsaigotchi.models import IN_GAME_EPOCH, TimeOfDay

logger = logging.getLogger(__name__)


def clamp_multiplier(value):
    return max(C.MIN_TIME_MULTIPLIER, min(C.MAX_TIME_MULTIPLIER, float(value)))


def set_time_multiplier(state, value):
    """Stores the clamped multiplier on the state and returns it."""
    state.time_multiplier = clamp_multiplier(value)
    return state.time_multiplier


def day_number(in_game_time: datetime.datetime) -> int:
    """1-based calendar day counted from the in-game epoch."""
    return (in_game_time.date() - IN_GAME_EPOCH.date()).days + 1


def advance(state, elapsed: datetime.timedelta, multiplier=None):
    """Moves the in-game clock forward.

    One real minute is sixty in-game minutes times the multiplier. Returns the new
    in-game time and how many whole calendar days the specimen has not yet aged.
    """
    if multiplier is None:
        multiplier = state.time_multiplier
    multiplier = clamp_multiplier(multiplier)
    real_minutes = max(0.0, elapsed.total_seconds() / 60.0)
    new_time = state.in_game_time + datetime.timedelta(minutes=real_minutes * 60.0 * multiplier)
    days_passed = max(0, day_number(new_time) - (state.age + 1))
    return new_time, days_passed


def time_of_day(in_game_time: datetime.datetime) -> TimeOfDay:
    hour = in_game_time.hour
    if 5 <= hour < 11:
        return TimeOfDay.MORNING
    if 11 <= hour < 17:
        return TimeOfDay.DAY
    if 17 <= hour < 21:
        return TimeOfDay.EVENING
    return TimeOfDay.NIGHT
