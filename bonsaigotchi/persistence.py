"""
JSON save documents for a specimen.

Every SpecimenState field except the active notifications is written. Loading checks
that the required fields are present and every value is in range, raising
ValidationError otherwise so the caller can keep the specimen it already has.

Only REQUIRED_FIELDS must be present. The rest (time_multiplier, stage_progress,
is_sick, last_actions, last_activity, style, traits, likes, dislikes, mood_score,
mood, care_history, care_counts) fall back to a fresh specimen's defaults so older
saves that predate them still load. Timestamps are naive local times.
"""
import os
import json
import math
import shutil
import logging
import datetime

from bonsaigotchi import constants as C
from bonsaigotchi.errors import ValidationError
from bonsaigotchi.models import (
    STAT_NAMES,
    BonsaiStyle,
    CareAction,
    CareActionKind,
    EmotionalState,
    GrowthStage,
    SpecimenState,
    Stats,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("id", "name", "seed", "birth_date", "stats", "age", "in_game_time", "stage", "is_dead")


def _iso(value):
    return value.isoformat() if value is not None else None


def to_document(state: SpecimenState) -> dict:
    return {
        "format_version": C.SAVE_FORMAT_VERSION,
        "id": state.id,
        "name": state.name,
        "seed": state.seed,
        "birth_date": _iso(state.birth_date),
        "stats": {name: float(getattr(state.stats, name)) for name in STAT_NAMES},
        "age": state.age,
        "in_game_time": _iso(state.in_game_time),
        "time_multiplier": state.time_multiplier,
        "stage": state.stage.name,
        "stage_progress": state.stage_progress,
        "is_sick": state.is_sick,
        "is_dead": state.is_dead,
        "last_actions": {kind.name: _iso(ts) for kind, ts in state.last_actions.items()},
        "last_activity": _iso(state.last_activity),
        "style": state.style.name,
        "traits": list(state.traits),
        "likes": list(state.likes),
        "dislikes": list(state.dislikes),
        "mood_score": state.mood_score,
        "mood": state.mood.name,
        "care_history": [
            {
                "kind": action.kind.name,
                "timestamp": _iso(action.timestamp),
                "game_timestamp": _iso(action.game_timestamp),
                "effect": action.effect,
            }
            for action in state.care_history
        ],
        "care_counts": {kind.name: count for kind, count in state.care_counts.items()},
    }


# --- field readers: each raises ValidationError naming the offending field ---

def _number(doc, key, lo=None, hi=None, integer=False, default=None):
    value = doc.get(key, default)
    if value is None:
        raise ValidationError(key, "missing")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(key, f"expected a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError(key, f"expected a finite number, got {value!r}")
    if integer and int(value) != value:
        raise ValidationError(key, f"expected a whole number, got {value!r}")
    if (lo is not None and value < lo) or (hi is not None and value > hi):
        raise ValidationError(key, f"{value!r} outside [{lo}, {hi}]")
    return int(value) if integer else float(value)


def _flag(doc, key, default=None):
    value = doc.get(key, default)
    if not isinstance(value, bool):
        raise ValidationError(key, f"expected true or false, got {value!r}")
    return value


def _text(doc, key):
    value = doc.get(key)
    if not isinstance(value, str):
        raise ValidationError(key, f"expected a string, got {value!r}")
    return value


def _timestamp(value, key, optional=False):
    if value is None and optional:
        return None
    if not isinstance(value, str):
        raise ValidationError(key, f"expected an ISO timestamp, got {value!r}")
    try:
        parsed = datetime.datetime.fromisoformat(value)
    except ValueError as e:
        raise ValidationError(key, str(e)) from e
    if parsed.tzinfo is not None:
        raise ValidationError(key, f"expected a local time without a UTC offset, got {value!r}")
    return parsed


def _member(enum_cls, value, key):
    try:
        return enum_cls(value)
    except ValueError as e:
        raise ValidationError(key, f"unknown {enum_cls.__name__} {value!r}") from e


def _strings(doc, key):
    value = doc.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValidationError(key, "expected a list of strings")
    return list(value)


def _mapping(doc, key):
    value = doc.get(key, {})
    if not isinstance(value, dict):
        raise ValidationError(key, "expected an object")
    return value


def _stats(doc):
    raw = doc["stats"]
    if not isinstance(raw, dict):
        raise ValidationError("stats", "expected an object")
    values = {}
    for name in STAT_NAMES:
        if name not in raw:
            raise ValidationError(f"stats.{name}", "missing")
        try:
            values[name] = _number(raw, name, C.STAT_MIN, C.STAT_MAX)
        except ValidationError as e:
            raise ValidationError(f"stats.{name}", e.reason) from e
    return Stats(**values)


def _care_history(doc):
    raw = doc.get("care_history", [])
    if not isinstance(raw, list):
        raise ValidationError("care_history", "expected a list")
    history = []
    for i, entry in enumerate(raw):
        key = f"care_history[{i}]"
        if not isinstance(entry, dict):
            raise ValidationError(key, "expected an object")
        history.append(CareAction(
            kind=_member(CareActionKind, entry.get("kind"), key + ".kind"),
            timestamp=_timestamp(entry.get("timestamp"), key + ".timestamp"),
            game_timestamp=_timestamp(entry.get("game_timestamp"), key + ".game_timestamp"),
            effect=str(entry.get("effect", "")),
        ))
    return history[-C.CARE_HISTORY_LIMIT:]


def from_document(doc) -> SpecimenState:
    if not isinstance(doc, dict):
        raise ValidationError("document", "expected a JSON object")
    version = doc.get("format_version", C.SAVE_FORMAT_VERSION)
    if version != C.SAVE_FORMAT_VERSION:
        raise ValidationError("format_version", f"unsupported version {version!r}")
    for key in REQUIRED_FIELDS:
        if key not in doc:
            raise ValidationError(key, "missing")

    last_actions = {
        _member(CareActionKind, kind, "last_actions"): _timestamp(ts, f"last_actions.{kind}")
        for kind, ts in _mapping(doc, "last_actions").items()
    }
    care_counts = {}
    for kind, count in _mapping(doc, "care_counts").items():
        care_counts[_member(CareActionKind, kind, "care_counts")] = _number(
            {kind: count}, kind, lo=0, integer=True)

    state = SpecimenState(
        id=_text(doc, "id"),
        name=_text(doc, "name"),
        seed=_number(doc, "seed", integer=True),
        birth_date=_timestamp(doc["birth_date"], "birth_date"),
        stats=_stats(doc),
        age=_number(doc, "age", lo=0, integer=True),
        in_game_time=_timestamp(doc["in_game_time"], "in_game_time"),
        time_multiplier=_number(doc, "time_multiplier", C.MIN_TIME_MULTIPLIER, C.MAX_TIME_MULTIPLIER,
                                default=1.0),
        stage=_member(GrowthStage, doc["stage"], "stage"),
        stage_progress=_number(doc, "stage_progress", 0, 100, integer=True, default=0),
        is_sick=_flag(doc, "is_sick", default=False),
        is_dead=_flag(doc, "is_dead"),
        last_actions=last_actions,
        last_activity=_timestamp(doc.get("last_activity"), "last_activity", optional=True),
        style=_member(BonsaiStyle, doc.get("style", BonsaiStyle.FORMAL_UPRIGHT.name), "style"),
        traits=_strings(doc, "traits"),
        likes=_strings(doc, "likes"),
        dislikes=_strings(doc, "dislikes"),
        mood_score=_number(doc, "mood_score", -100, 100, integer=True, default=0),
        mood=_member(EmotionalState, doc.get("mood", EmotionalState.NEUTRAL.name), "mood"),
        care_history=_care_history(doc),
        care_counts=care_counts,
    )
    return state


def dumps(state: SpecimenState) -> str:
    return json.dumps(to_document(state), indent=2)


def loads(text: str) -> SpecimenState:
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError("document", f"not valid JSON: {e}") from e
    return from_document(doc)


def save(state: SpecimenState, path):
    """Writes the save atomically, keeping the previous save as <path>.bak."""
    tmp = path + ".tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        f.write(dumps(state))
    if os.path.exists(path):
        shutil.copy2(path, path + ".bak")
    os.replace(tmp, path)
    logger.info("Saved %s to %s", state.name, path)


def load(path) -> SpecimenState:
    """Reads a save. A missing file raises FileNotFoundError; anything unreadable raises ValidationError."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except FileNotFoundError:
        raise
    except (OSError, UnicodeDecodeError) as e:
        raise ValidationError("document", f"cannot read {path}: {e}") from e
    state = loads(text)
    logger.info("Loaded %s from %s (dead=%s)", state.name, path, state.is_dead)
    return state
