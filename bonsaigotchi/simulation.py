import copy
import random
import logging
import datetime
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

from bonsaigotchi import care, clock, environment, lifecycle, notifications, persistence, renderer
from bonsaigotchi import constants as C
from bonsaigotchi.errors import ValidationError
from bonsaigotchi.models import (
    BonsaiStyle,
    CareActionKind,
    EnvironmentSnapshot,
    Notification,
    SpecimenState,
    Stats,
)

logger = logging.getLogger(__name__)

TIMED_CARE = (CareActionKind.WATER, CareActionKind.FEED, CareActionKind.PRUNE, CareActionKind.REPOT)


def _as_timedelta(elapsed):
    if isinstance(elapsed, datetime.timedelta):
        return max(elapsed, datetime.timedelta(0))
    return datetime.timedelta(seconds=max(0.0, float(elapsed)))


def new_specimen(name="Bonsai", rng=None, style=BonsaiStyle.FORMAL_UPRIGHT, traits=None, now=None) -> SpecimenState:
    """Creates a fresh seedling with slightly randomized starting stats.

    rng is the gameplay random.Random; pass a seeded one for reproducible specimens.
    """
    rng = rng or random.Random()
    now = now or datetime.datetime.now()
    stats = Stats(
        health=80 + rng.random() * 20,
        happiness=70 + rng.random() * 30,
        hunger=20 + rng.random() * 20,
        growth=0.0,
        hydration=80 + rng.random() * 20,
        soil_quality=90 + rng.random() * 10,
        pruning_quality=100.0,
        stress=20.0 + rng.randrange(10),
        pest_level=float(rng.randrange(10)),
        disease_level=float(rng.randrange(5)),
    )
    likes = rng.sample(C.POSSIBLE_LIKES, rng.randint(3, 4))
    dislikes = rng.sample([d for d in C.POSSIBLE_DISLIKES if d not in likes], rng.randint(2, 3))
    state = SpecimenState(
        name=name,
        seed=rng.randrange(2 ** 31),
        birth_date=now,
        stats=stats,
        time_multiplier=clock.clamp_multiplier(C.TIME_MULTIPLIER),
        style=style,
        traits=list(traits or []),
        likes=likes,
        dislikes=dislikes,
        last_activity=now,
        last_actions={kind: now for kind in TIMED_CARE},
    )
    logger.info("Planted %s (seed %d, %s)", state.name, state.seed, state.style.name)
    return state


def tick(state: SpecimenState, elapsed, env: Optional[EnvironmentSnapshot] = None,
         now: Optional[datetime.datetime] = None) -> Tuple[SpecimenState, List[Notification]]:
    """
    Advances the specimen by one tick of real elapsed time.

    Returns a new state and the notifications that entered its active set. The input
    state is never modified. A dead specimen comes back unchanged with no notifications.
    """
    if state.is_dead:
        return copy.deepcopy(state), []

    now = now or datetime.datetime.now()
    elapsed = _as_timedelta(elapsed)
    new = copy.deepcopy(state)
    emitted = []

    new.in_game_time, days_passed = clock.advance(new, elapsed)
    if days_passed >= 1:
        new.age += days_passed
        emitted.append(lifecycle.check_stage_advancement(new))

    days_fraction = elapsed.total_seconds() / 3600.0 / 24.0
    new.stats.decay(days_fraction)
    new.stats.update_derived()
    environment.apply(new, env, days_fraction, now)

    emitted.extend(lifecycle.check_health(new))
    lifecycle.update_stage_progress(new)
    if not new.is_dead:
        emitted.extend(notifications.scan(new))

    for note in emitted:
        if note is not None:
            note.timestamp = now
    return new, notifications.push_all(new, [n for n in emitted if n is not None])


def apply_action(state: SpecimenState, kind, now=None, effectiveness=None, score=None,
                 time_of_day=None) -> Tuple[SpecimenState, Optional[Notification]]:
    """Applies one care action to a copy of the state.

    The returned notification is also added to the new state's active set, unless one
    with the same title is already active.
    """
    kind = CareActionKind(kind)
    if state.is_dead:
        return copy.deepcopy(state), None
    now = now or datetime.datetime.now()
    new = copy.deepcopy(state)
    note = care.perform(new, kind, now, effectiveness=effectiveness, score=score, time_of_day=time_of_day)
    notifications.push(new, note)
    return new, note


def render_key(state: SpecimenState, env: Optional[EnvironmentSnapshot] = None):
    """Changes whenever a fresh render of this specimen would look different."""
    env = env or EnvironmentSnapshot()
    return state.render_key() + (env.weather, env.season)


class Simulation:
    """Owns one specimen and serialises every change to it.

    Ticks, care actions, saves and loads all run under a single lock. Renders work on a
    snapshot taken under that lock and run outside it, optionally on a worker thread.
    """

    def __init__(self, state: Optional[SpecimenState] = None, save_file=None, rng=None,
                 env: Optional[EnvironmentSnapshot] = None):
        self.rng = rng or random.Random()
        self._lock = threading.Lock()
        self._state = state if state is not None else new_specimen(rng=self.rng)
        self._outbox: List[Notification] = []
        self._executor = None
        self.save_file = save_file or C.SAVE_FILE
        self.environment = env or EnvironmentSnapshot()
        self._last_tick = datetime.datetime.now()

    @property
    def state(self) -> SpecimenState:
        return self.snapshot()

    def snapshot(self) -> SpecimenState:
        with self._lock:
            return copy.deepcopy(self._state)

    def _publish(self, notes):
        self._outbox.extend(notes)

    def tick(self, elapsed=None, env=None, now=None) -> List[Notification]:
        now = now or datetime.datetime.now()
        with self._lock:
            if elapsed is None:
                elapsed = now - self._last_tick
            self._last_tick = now
            if env is not None:
                self.environment = env
            self._state, emitted = tick(self._state, elapsed, self.environment, now=now)
            self._publish(emitted)
            return emitted

    def apply_action(self, kind, **params) -> Optional[Notification]:
        with self._lock:
            self._state, note = apply_action(self._state, kind, **params)
            if note is not None and any(n is note for n in self._state.active_notifications):
                self._publish([note])
            return note

    def set_time_multiplier(self, value) -> float:
        with self._lock:
            return clock.set_time_multiplier(self._state, value)

    def drain_notifications(self) -> List[Notification]:
        """Pops everything emitted since the last drain, oldest first."""
        with self._lock:
            drained, self._outbox = self._outbox, []
            return drained

    def active_notifications(self) -> List[Notification]:
        with self._lock:
            return list(self._state.active_notifications)

    def mark_read(self, title) -> bool:
        with self._lock:
            return notifications.mark_read(self._state, title)

    def dismiss(self, title) -> bool:
        with self._lock:
            return notifications.dismiss(self._state, title)

    def render_key(self):
        with self._lock:
            return render_key(self._state, self.environment)

    def render(self, width=C.CANVAS_WIDTH, height=C.CANVAS_HEIGHT, progress=None, cancel=None, timeout=None):
        with self._lock:
            snap = copy.deepcopy(self._state)
            env = self.environment
        return renderer.render(snap.seed, snap.stage, snap.style, snap.health_bucket, env.weather,
                               width=width, height=height, season=env.season,
                               progress=progress, cancel=cancel, timeout=timeout)

    def submit_render(self, **kwargs):
        """Runs render() on the worker thread and returns its Future."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="bonsai-render")
        return self._executor.submit(self.render, **kwargs)

    def save(self, path=None):
        path = path or self.save_file
        with self._lock:
            persistence.save(self._state, path)

    def load(self, path=None) -> bool:
        """Replaces the specimen with the saved one.

        Returns False and keeps the current specimen when there is no save file or the
        file cannot be used.
        """
        path = path or self.save_file
        with self._lock:
            try:
                loaded = persistence.load(path)
            except FileNotFoundError:
                logger.info("No save at %s, keeping current specimen", path)
                return False
            except ValidationError as e:
                logger.error("Could not load %s: %s", path, e)
                return False
            self._state = loaded
            self._last_tick = datetime.datetime.now()
            return True

    def shutdown(self):
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
