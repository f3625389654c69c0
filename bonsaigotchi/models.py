import re
import uuid
import logging
import datetime
from enum import Enum, auto
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from bonsaigotchi import constants as C

logger = logging.getLogger(__name__)

# The in-game clock starts at 08:00 on day 1
IN_GAME_EPOCH = datetime.datetime(1, 1, 1, 8, 0, 0)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


class LenientEnum(Enum):
    """
    Enum that accepts member names in any of the spellings found in save data.
    'YoungTree', 'young-tree' and 'YOUNG_TREE' all resolve to YOUNG_TREE.
    """

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            normalized = _CAMEL_BOUNDARY.sub("_", value.strip())
            normalized = normalized.replace("-", "_").replace(" ", "_").upper()
            for member in cls:
                if member.name == normalized:
                    return member
        return super()._missing_(value)


class GrowthStage(LenientEnum):
    SEEDLING = 1
    SAPLING = 2
    YOUNG_TREE = 3
    MATURE_TREE = 4
    ELDER_TREE = 5

    def __lt__(self, other):
        if not isinstance(other, GrowthStage):
            return NotImplemented
        return self.value < other.value

    @property
    def index(self) -> int:
        return self.value - 1

    def next_stage(self) -> Optional["GrowthStage"]:
        """Returns the following stage, or None for the terminal stage."""
        if self is GrowthStage.ELDER_TREE:
            return None
        return GrowthStage(self.value + 1)

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()


class BonsaiStyle(LenientEnum):
    FORMAL_UPRIGHT = auto()     # Chokkan
    INFORMAL_UPRIGHT = auto()   # Moyogi
    WINDSWEPT = auto()          # Fukinagashi
    CASCADE = auto()            # Kengai
    SLANTING = auto()           # Shakan
    LITERALLY_DYING = auto()


class CareActionKind(LenientEnum):
    WATER = auto()
    FEED = auto()
    PRUNE = auto()
    REPOT = auto()
    PLAY = auto()
    PEST_TREATMENT = auto()
    DISEASE_TREATMENT = auto()


class Severity(LenientEnum):
    INFORMATION = auto()
    WARNING = auto()
    ALERT = auto()
    CRITICAL = auto()
    ACHIEVEMENT = auto()


class Season(LenientEnum):
    SPRING = auto()
    SUMMER = auto()
    AUTUMN = auto()
    WINTER = auto()


class Weather(LenientEnum):
    SUNNY = auto()
    CLOUDY = auto()
    RAIN = auto()
    HUMID = auto()
    WIND = auto()
    STORM = auto()
    SNOW = auto()


class Climate(LenientEnum):
    TEMPERATE = auto()
    TROPICAL = auto()
    DESERT = auto()
    ALPINE = auto()


class EventType(LenientEnum):
    HEATWAVE = auto()
    DROUGHT = auto()
    HEAVY_RAIN = auto()
    STORM = auto()
    COLD_SNAP = auto()
    FROST = auto()
    INSECTS = auto()
    BLIZZARD_WARNING = auto()
    SUNNY_SPELL = auto()
    WINDY_SPELL = auto()


class TimeOfDay(LenientEnum):
    MORNING = auto()
    DAY = auto()
    EVENING = auto()
    NIGHT = auto()


class EmotionalState(LenientEnum):
    DEPRESSED = auto()
    SAD = auto()
    ANXIOUS = auto()
    NEUTRAL = auto()
    CONTENT = auto()
    HAPPY = auto()
    THRIVING = auto()

    @classmethod
    def from_score(cls, score: int) -> "EmotionalState":
        if score < -70:
            return cls.DEPRESSED
        if score < -40:
            return cls.SAD
        if score < -10:
            return cls.ANXIOUS
        if score < 10:
            return cls.NEUTRAL
        if score < 40:
            return cls.CONTENT
        if score < 70:
            return cls.HAPPY
        return cls.THRIVING


class HealthBucket(LenientEnum):
    HEALTHY = auto()
    WEAK = auto()
    SICKLY = auto()
    DEAD = auto()

    @classmethod
    def from_health(cls, health: float, is_dead: bool = False) -> "HealthBucket":
        if is_dead or health <= 0:
            return cls.DEAD
        if health < 30:
            return cls.SICKLY
        if health < 70:
            return cls.WEAK
        return cls.HEALTHY


STAT_NAMES = (
    "health",
    "happiness",
    "hunger",
    "growth",
    "hydration",
    "soil_quality",
    "pruning_quality",
    "stress",
    "pest_level",
    "disease_level",
)


@dataclass
class Stats:
    """Bounded condition of the tree. Every mutation clamps to [0, 100]."""
    health: float = 100.0
    happiness: float = 100.0
    hunger: float = 0.0       # 0 = Fed, 100 = Starving
    growth: float = 0.0
    hydration: float = 100.0
    soil_quality: float = 100.0
    pruning_quality: float = 100.0
    stress: float = 0.0
    pest_level: float = 0.0
    disease_level: float = 0.0

    @staticmethod
    def clamp(value):
        return max(C.STAT_MIN, min(C.STAT_MAX, value))

    def adjust(self, name: str, delta: float):
        setattr(self, name, self.clamp(getattr(self, name) + delta))

    def set(self, name: str, value: float):
        setattr(self, name, self.clamp(value))

    def apply(self, deltas: Dict[str, float], scale: float = 1.0):
        """Adds every delta (times scale) to its stat, then re-clamps."""
        for name, delta in deltas.items():
            if name in STAT_NAMES:
                self.adjust(name, delta * scale)

    def decay(self, days_fraction: float):
        """Linear per-day decay: Vt = V0 - (r * dt)."""
        if days_fraction < C.MIN_DAYS_FRACTION:
            return
        self.adjust("hydration", -C.HYDRATION_DECAY_PER_DAY * days_fraction)
        self.adjust("happiness", -C.HAPPINESS_DECAY_PER_DAY * days_fraction)
        self.adjust("hunger", C.HUNGER_INCREASE_PER_DAY * days_fraction)
        self.adjust("soil_quality", -C.SOIL_DECAY_PER_DAY * days_fraction)
        self.adjust("pruning_quality", -C.PRUNING_DECAY_PER_DAY * days_fraction)

    def raw_health(self) -> float:
        w = C.HEALTH_WEIGHTS
        return (self.hydration * w["hydration"]
                + (100.0 - self.hunger) * w["satiety"]
                + self.soil_quality * w["soil_quality"]
                + self.pruning_quality * w["pruning_quality"])

    def update_derived(self):
        """Smooths health toward the value implied by the other stats and grows slowly when well kept."""
        keep = C.HEALTH_SMOOTHING
        self.health = self.clamp(self.health * keep + self.raw_health() * (1.0 - keep))
        if (self.health > C.GROWTH_MIN_HEALTH and self.hunger < C.GROWTH_MAX_HUNGER
                and self.soil_quality > C.GROWTH_MIN_SOIL):
            self.adjust("growth", C.GROWTH_PER_TICK)

    @property
    def has_pests(self) -> bool:
        return self.pest_level > C.PEST_THRESHOLD

    @property
    def has_disease(self) -> bool:
        return self.disease_level > C.DISEASE_THRESHOLD


@dataclass(frozen=True)
class CareAction:
    kind: CareActionKind
    timestamp: datetime.datetime
    game_timestamp: datetime.datetime
    effect: str


@dataclass
class Notification:
    title: str
    message: str
    severity: Severity
    timestamp: datetime.datetime = field(default_factory=datetime.datetime.now)
    is_read: bool = False


@dataclass(frozen=True)
class EnvironmentalEvent:
    kind: EventType
    intensity: int = 50  # 1-100

    @property
    def description(self) -> str:
        if self.intensity > 70:
            level = "severe"
        elif self.intensity > 40:
            level = "moderate"
        else:
            level = "mild"
        return f"{level} {self.kind.name.replace('_', ' ').lower()}"


@dataclass(frozen=True)
class EnvironmentSnapshot:
    """What the environment scheduler reports for the current tick. Any field may be None."""
    season: Optional[Season] = None
    weather: Optional[Weather] = None
    climate: Optional[Climate] = None
    events: Tuple[EnvironmentalEvent, ...] = ()
    time_of_day: Optional[TimeOfDay] = None


@dataclass
class SpecimenState:
    name: str
    seed: int
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    birth_date: datetime.datetime = field(default_factory=datetime.datetime.now)
    stats: Stats = field(default_factory=Stats)
    age: int = 0  # days
    in_game_time: datetime.datetime = IN_GAME_EPOCH
    time_multiplier: float = 1.0
    stage: GrowthStage = GrowthStage.SEEDLING
    stage_progress: int = 0
    is_sick: bool = False
    is_dead: bool = False
    last_actions: Dict[CareActionKind, datetime.datetime] = field(default_factory=dict)
    last_activity: Optional[datetime.datetime] = None
    style: BonsaiStyle = BonsaiStyle.FORMAL_UPRIGHT
    traits: List[str] = field(default_factory=list)
    likes: List[str] = field(default_factory=list)
    dislikes: List[str] = field(default_factory=list)
    mood_score: int = 0
    mood: EmotionalState = EmotionalState.NEUTRAL
    care_history: List[CareAction] = field(default_factory=list)
    care_counts: Dict[CareActionKind, int] = field(default_factory=dict)
    # Never persisted; always empty after load
    active_notifications: List[Notification] = field(default_factory=list)

    @property
    def health_bucket(self) -> HealthBucket:
        return HealthBucket.from_health(self.stats.health, self.is_dead)

    def days_since(self, kind: CareActionKind, now: datetime.datetime) -> float:
        """Real days since the last action of this kind (since birth if never done)."""
        last = self.last_actions.get(kind, self.birth_date)
        return (now - last).total_seconds() / 86400.0

    def render_key(self):
        """Everything the renderer depends on from the specimen itself."""
        return (self.seed, self.stage, self.style, self.health_bucket)
