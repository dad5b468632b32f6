import math
from dataclasses import dataclass, replace
from enum import Enum

from .constants import DECAY_PER_SECOND, STARTING_STATS

STAT_NAMES = ("hunger", "happiness", "energy", "cleanliness")


def clamp(value):
    return max(0.0, min(100.0, value))


class LifeStage(Enum):
    """
    Life stages in the order a pet moves through them.
    Restart is the only way back from DEAD to EGG.
    """
    EGG = "egg"
    HATCHING = "hatching"
    ALIVE = "alive"
    DEAD = "dead"

    @classmethod
    def _missing_(cls, value):
        """
        Flexible lookup so 'Alive', 'ALIVE' and ' alive ' all resolve.
        Anything else is still a ValueError; unknown stages are never guessed.
        """
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        return None


@dataclass(frozen=True)
class PetStats:
    """Attribute snapshot. Immutable; every value is clamped to 0..100 when the snapshot is built."""
    hunger: float = STARTING_STATS["hunger"]
    happiness: float = STARTING_STATS["happiness"]
    energy: float = STARTING_STATS["energy"]
    cleanliness: float = STARTING_STATS["cleanliness"]
    last_updated: int = 0  # epoch ms of the last decay/action

    def __post_init__(self):
        for name in STAT_NAMES:
            object.__setattr__(self, name, clamp(float(getattr(self, name))))

    def with_deltas(self, deltas, now_ms):
        """Return a new snapshot with `deltas` added (and clamped), stamped at `now_ms`."""
        changes = {name: getattr(self, name) + delta for name, delta in deltas.items()}
        return replace(self, last_updated=now_ms, **changes)

    def stamped(self, now_ms):
        return replace(self, last_updated=now_ms)

    def values(self):
        return {name: getattr(self, name) for name in STAT_NAMES}


def fresh_stats(now_ms):
    """Starting attributes for a newly hatched (or restarted) pet."""
    return PetStats(last_updated=now_ms, **STARTING_STATS)


def decay(stats: PetStats, elapsed_seconds: float) -> PetStats:
    """Uses a linear decay model: Vt = clamp(V0 + r * dt).

    Pure: `stats` is not modified and `last_updated` is carried over untouched.
    Negative or non-finite `elapsed_seconds` counts as zero (clock skew).
    There is no upper bound: an integer too large for a float floors every attribute.
    """
    try:
        seconds = float(elapsed_seconds)
        if not math.isfinite(seconds) or seconds < 0:
            seconds = 0.0
    except OverflowError:
        seconds = math.inf if elapsed_seconds > 0 else 0.0
    except (TypeError, ValueError):
        seconds = 0.0
    changes = {name: getattr(stats, name) + rate * seconds for name, rate in DECAY_PER_SECOND.items()}
    return replace(stats, **changes)
