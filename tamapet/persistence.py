"""
Persistence gateway: versioned snapshot codec over a key-value store.

Saved form (JSON under STORAGE_KEY):

    {"version": 2, "stage": "alive", "age": 3,
     "pet": {"hunger": 62.5, "happiness": 51.0, "energy": 74.6,
             "cleanliness": 83.4, "lastUpdated": 1760000000000}}

Anything that is not a valid version-2 snapshot loads as a fresh egg.
"""

import json
import logging
import math
import sqlite3
from dataclasses import dataclass

from .constants import SNAPSHOT_VERSION, STORAGE_KEY
from .models import STAT_NAMES, LifeStage, PetStats, decay, fresh_stats

logger = logging.getLogger(__name__)


@dataclass
class GameState:
    """Initial state handed to the pet on startup."""
    stage: LifeStage
    age: int
    stats: PetStats


def fresh_state(now_ms):
    return GameState(LifeStage.EGG, 0, fresh_stats(now_ms))


def encode_snapshot(stage, age, stats):
    payload = {
        "version": SNAPSHOT_VERSION,
        "stage": LifeStage(stage).value,
        "age": int(age),
        "pet": {
            "hunger": float(stats.hunger),
            "happiness": float(stats.happiness),
            "energy": float(stats.energy),
            "cleanliness": float(stats.cleanliness),
            "lastUpdated": int(stats.last_updated),
        },
    }
    return json.dumps(payload)


def _is_number(value):
    """A finite JSON number. Integers too large for a float do not count."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def decode_snapshot(raw, now_ms):
    """Parse a stored snapshot exactly as saved, without any catch-up.

    Raises ValueError (json.JSONDecodeError included) for anything that is not a
    version-2 snapshot. Missing stage/age/lastUpdated fall back to egg/0/now.
    """
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("snapshot is not an object")
    version = data.get("version")
    if not _is_number(version) or version != SNAPSHOT_VERSION:
        raise ValueError(f"unsupported snapshot version {version!r}")
    pet = data.get("pet")
    if not isinstance(pet, dict):
        raise ValueError("snapshot has no pet")

    stage_raw = data.get("stage")
    stage = LifeStage.EGG if stage_raw is None else LifeStage(stage_raw)

    age = data.get("age")
    age = max(0, int(age)) if _is_number(age) else 0

    values = {}
    for name in STAT_NAMES:
        value = pet.get(name)
        if not _is_number(value):
            raise ValueError(f"attribute {name!r} is not a number: {value!r}")
        values[name] = value

    last_updated = pet.get("lastUpdated")
    last_updated = int(last_updated) if _is_number(last_updated) and last_updated else now_ms

    return GameState(stage, age, PetStats(last_updated=last_updated, **values))


def catch_up(state, now_ms):
    """Apply one lump of decay for the time since the snapshot was written.

    Only an alive pet decays. Age is never advanced here: missed ticks are not replayed.
    """
    if state.stage != LifeStage.ALIVE:
        return GameState(state.stage, state.age, state.stats.stamped(now_ms)), 0
    elapsed_seconds = max(0, (now_ms - state.stats.last_updated) // 1000)
    stats = decay(state.stats, elapsed_seconds).stamped(now_ms)
    return GameState(state.stage, state.age, stats), elapsed_seconds


class PersistenceGateway:
    """Write-through save of the current pet and catch-up load on startup."""

    def __init__(self, store, clock, key=STORAGE_KEY):
        self.store = store
        self.clock = clock  # anything with now() -> epoch ms (a Scheduler)
        self.key = key

    def save(self, stage, age, stats):
        """Replace the stored snapshot. Failures are logged and swallowed."""
        try:
            self.store.set(self.key, encode_snapshot(stage, age, stats))
        except (sqlite3.Error, OSError) as e:
            logger.warning("Failed to save pet snapshot: %s", e)
            return False
        logger.debug("Saved snapshot: %s age=%d", LifeStage(stage).value, age)
        return True

    def load(self):
        """Restore the saved pet, or a fresh egg. Never raises."""
        now_ms = self.clock.now()
        try:
            raw = self.store.get(self.key)
        except (sqlite3.Error, OSError, ValueError, RecursionError) as e:
            logger.warning("Failed to read pet snapshot, starting fresh: %s", e)
            return fresh_state(now_ms)
        if raw is None:
            return fresh_state(now_ms)

        try:
            saved = decode_snapshot(raw, now_ms)
        except (ValueError, TypeError, OverflowError, RecursionError) as e:
            logger.warning("Discarding saved pet, starting fresh: %s", e)
            return fresh_state(now_ms)

        state, elapsed_seconds = catch_up(saved, now_ms)
        logger.info(
            "Resumed %s pet at age %d (%d seconds caught up)",
            state.stage.value, state.age, elapsed_seconds,
        )
        return state

    def clear(self):
        try:
            self.store.delete(self.key)
        except (sqlite3.Error, OSError) as e:
            logger.warning("Failed to clear pet snapshot: %s", e)
