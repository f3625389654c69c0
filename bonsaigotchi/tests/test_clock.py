import datetime

from bonsaigotchi import clock
from bonsaigotchi.models import IN_GAME_EPOCH, SpecimenState, TimeOfDay


def make_state(**kwargs):
    return SpecimenState(name="Kaze", seed=1, **kwargs)


def test_one_real_minute_is_one_game_hour():
    state = make_state()
    new_time, days = clock.advance(state, datetime.timedelta(minutes=1))
    assert new_time == IN_GAME_EPOCH + datetime.timedelta(hours=1)
    assert days == 0


def test_crossing_midnight_counts_a_day():
    state = make_state()
    new_time, days = clock.advance(state, datetime.timedelta(minutes=16))
    assert clock.day_number(new_time) == 2
    assert days == 1


def test_days_already_aged_are_not_counted_twice():
    state = make_state(age=3, in_game_time=IN_GAME_EPOCH + datetime.timedelta(days=3))
    _, days = clock.advance(state, datetime.timedelta(minutes=1))
    assert days == 0


def test_multiplier_is_clamped():
    state = make_state()
    new_time, _ = clock.advance(state, datetime.timedelta(minutes=1), multiplier=50)
    assert new_time == IN_GAME_EPOCH + datetime.timedelta(hours=10)
    assert clock.set_time_multiplier(state, -3) == 0.0
    assert state.time_multiplier == 0.0
    new_time, _ = clock.advance(state, datetime.timedelta(hours=5))
    assert new_time == IN_GAME_EPOCH


def test_time_of_day():
    assert clock.time_of_day(IN_GAME_EPOCH) is TimeOfDay.MORNING
    assert clock.time_of_day(IN_GAME_EPOCH.replace(hour=13)) is TimeOfDay.DAY
    assert clock.time_of_day(IN_GAME_EPOCH.replace(hour=19)) is TimeOfDay.EVENING
    assert clock.time_of_day(IN_GAME_EPOCH.replace(hour=2)) is TimeOfDay.NIGHT
