import random
import datetime

import pytest

from bonsaigotchi import simulation
from bonsaigotchi.models import (
    STAT_NAMES,
    BonsaiStyle,
    CareActionKind,
    EnvironmentSnapshot,
    EnvironmentalEvent,
    EventType,
    GrowthStage,
    Season,
    SpecimenState,
    Stats,
    Weather,
)
from bonsaigotchi.simulation import Simulation, apply_action, new_specimen, tick

NOW = datetime.datetime(2024, 5, 1, 12, 0)


def needy_state():
    return SpecimenState(
        name="Kaze",
        seed=11,
        birth_date=NOW - datetime.timedelta(days=30),
        stats=Stats(hydration=15.0, hunger=75.0),
        last_actions={CareActionKind.WATER: NOW - datetime.timedelta(days=2)},
        last_activity=NOW,
    )


def test_new_specimen_is_reproducible():
    a = new_specimen("Kaze", rng=random.Random(5), now=NOW)
    b = new_specimen("Kaze", rng=random.Random(5), now=NOW)
    assert a.seed == b.seed
    assert a.stats == b.stats
    assert a.likes == b.likes
    assert a.dislikes == b.dislikes
    assert a.id != b.id


def test_new_specimen_starts_as_a_seedling():
    state = new_specimen(rng=random.Random(9), now=NOW, style=BonsaiStyle.CASCADE)
    assert state.stage is GrowthStage.SEEDLING
    assert state.age == 0
    assert state.style is BonsaiStyle.CASCADE
    assert 80 <= state.stats.health <= 100
    assert 20 <= state.stats.hunger <= 40
    assert state.stats.pruning_quality == 100.0
    assert 3 <= len(state.likes) <= 4
    assert not set(state.likes) & set(state.dislikes)
    assert state.last_actions[CareActionKind.WATER] == NOW


def test_tick_accepts_seconds():
    state = needy_state()
    a, _ = tick(state, 30, now=NOW)
    b, _ = tick(state, datetime.timedelta(seconds=30), now=NOW)
    assert a.in_game_time == b.in_game_time == state.in_game_time + datetime.timedelta(minutes=30)


def test_negative_elapsed_is_ignored():
    state = needy_state()
    new, _ = tick(state, -120, now=NOW)
    assert new.in_game_time == state.in_game_time


def test_render_key_tracks_the_look():
    state = needy_state()
    sunny = EnvironmentSnapshot(weather=Weather.SUNNY)
    assert simulation.render_key(state, sunny) == simulation.render_key(state, sunny)
    assert simulation.render_key(state, sunny) != simulation.render_key(state, EnvironmentSnapshot())
    older = SpecimenState(**{**vars(state), "stage": GrowthStage.SAPLING})
    assert simulation.render_key(older, sunny) != simulation.render_key(state, sunny)


def test_stats_stay_in_bounds():
    rng = random.Random(1234)
    state = new_specimen(rng=rng, now=NOW)
    now = NOW
    envs = [
        EnvironmentSnapshot(),
        EnvironmentSnapshot(season=Season.SUMMER, weather=Weather.STORM,
                            events=(EnvironmentalEvent(EventType.DROUGHT, 100),)),
        EnvironmentSnapshot(season=Season.WINTER, weather=Weather.SNOW,
                            events=(EnvironmentalEvent(EventType.HEAVY_RAIN, 100),)),
    ]
    for _ in range(200):
        elapsed = datetime.timedelta(seconds=rng.choice([5, 60, 3600, 86400]))
        now += elapsed
        state, _ = tick(state, elapsed, env=rng.choice(envs), now=now)
        if rng.random() < 0.3:
            kind = rng.choice(list(CareActionKind))
            state, _ = apply_action(state, kind, now=now, effectiveness=rng.uniform(-50, 150),
                                    score=rng.uniform(-50, 150))
        for name in STAT_NAMES:
            assert 0.0 <= getattr(state.stats, name) <= 100.0, name
        assert 0 <= state.stage_progress <= 100
        assert len(state.active_notifications) <= 10


# --- Simulation host ---

def test_host_drains_in_emission_order(tmp_path):
    sim = Simulation(needy_state(), save_file=str(tmp_path / "save.json"))
    emitted = sim.tick(datetime.timedelta(seconds=5), now=NOW)
    assert [n.title for n in emitted] == ["Watering Needed", "Feeding Needed"]
    note = sim.apply_action(CareActionKind.WATER, now=NOW)
    assert note.title == "Watering"

    drained = sim.drain_notifications()
    assert [n.title for n in drained] == ["Watering Needed", "Feeding Needed", "Watering"]
    assert sim.drain_notifications() == []
    assert len(sim.active_notifications()) == 3


def test_host_does_not_republish_active_titles(tmp_path):
    state = needy_state()
    state.last_actions[CareActionKind.WATER] = NOW
    sim = Simulation(state, save_file=str(tmp_path / "save.json"))
    assert sim.apply_action(CareActionKind.WATER, now=NOW).title == "Overwatering"
    assert sim.apply_action(CareActionKind.WATER, now=NOW).title == "Overwatering"
    assert [n.title for n in sim.drain_notifications()] == ["Overwatering"]

    assert sim.dismiss("Overwatering")
    assert sim.apply_action(CareActionKind.WATER, now=NOW).title == "Overwatering"
    assert [n.title for n in sim.drain_notifications()] == ["Overwatering"]


def test_host_uses_its_environment(tmp_path):
    sim = Simulation(needy_state(), save_file=str(tmp_path / "save.json"))
    sim.tick(datetime.timedelta(hours=1), env=EnvironmentSnapshot(weather=Weather.RAIN), now=NOW)
    assert sim.environment.weather is Weather.RAIN
    assert sim.render_key()[-2] is Weather.RAIN


def test_snapshot_is_a_copy(tmp_path):
    sim = Simulation(needy_state(), save_file=str(tmp_path / "save.json"))
    snap = sim.snapshot()
    snap.stats.hydration = 99.0
    assert sim.state.stats.hydration == 15.0


def test_time_multiplier_is_clamped(tmp_path):
    sim = Simulation(needy_state(), save_file=str(tmp_path / "save.json"))
    assert sim.set_time_multiplier(25) == 10.0
    assert sim.set_time_multiplier(-1) == 0.0
    assert sim.state.time_multiplier == 0.0


def test_save_and_load(tmp_path):
    path = str(tmp_path / "save.json")
    sim = Simulation(needy_state(), save_file=path)
    sim.apply_action(CareActionKind.FEED, now=NOW)
    sim.save()

    other = Simulation(rng=random.Random(2), save_file=path)
    assert other.load()
    loaded = other.state
    original = sim.state
    assert loaded.id == original.id
    assert loaded.stats == original.stats
    assert loaded.care_counts == {CareActionKind.FEED: 1}
    assert loaded.active_notifications == []


def test_load_missing_file_keeps_state(tmp_path):
    sim = Simulation(needy_state(), save_file=str(tmp_path / "nothing.json"))
    before = sim.state
    assert not sim.load()
    assert sim.state == before


def test_load_corrupt_file_keeps_state(tmp_path):
    path = tmp_path / "save.json"
    path.write_text("{not json", encoding="utf-8")
    sim = Simulation(needy_state(), save_file=str(path))
    before = sim.state
    assert not sim.load()
    assert sim.state == before


def test_render_through_the_host(tmp_path):
    sim = Simulation(needy_state(), save_file=str(tmp_path / "save.json"),
                     env=EnvironmentSnapshot(weather=Weather.SUNNY, season=Season.SUMMER))
    try:
        first = sim.render(width=40, height=20)
        again = sim.render(width=40, height=20)
        assert first == again
        background = sim.submit_render(width=40, height=20).result(timeout=30)
        assert background == first
    finally:
        sim.shutdown()


def test_dead_specimen_through_the_host(tmp_path):
    state = needy_state()
    state.is_dead = True
    sim = Simulation(state, save_file=str(tmp_path / "save.json"))
    assert sim.apply_action(CareActionKind.WATER, now=NOW) is None
    assert sim.tick(datetime.timedelta(hours=3), now=NOW) == []
    assert sim.drain_notifications() == []
    assert sim.state.stats.hydration == pytest.approx(15.0)
