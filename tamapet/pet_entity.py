import logging

from .constants import ACTION_EFFECTS, HATCH_MS, MAX_AGE, TICK_MS
from .models import LifeStage, decay, fresh_stats

logger = logging.getLogger(__name__)


class Pet:
    """Life stage, age and attributes of one pet, plus the timers that drive them.

    Every handler (tick, hatch timer, player command) runs to completion and ends with
    a single `on_state_change(stage, age, stats)` call, which the game wires to the
    persistence gateway.
    """

    def __init__(self, scheduler, stage=LifeStage.EGG, age=0, stats=None, on_state_change=None):
        self.scheduler = scheduler
        self.stage = LifeStage(stage)
        self.age = age
        self.stats = stats if stats is not None else fresh_stats(scheduler.now())
        self.on_state_change = on_state_change

        # Owned by the current stage; cancelled whenever that stage is left
        self._tick_timer = None
        self._hatch_timer = None

    @classmethod
    def from_state(cls, scheduler, state, on_state_change=None):
        """Build a pet from a loaded `GameState` (see persistence.load)."""
        return cls(scheduler, state.stage, state.age, state.stats, on_state_change)

    @property
    def is_alive(self):
        return self.stage == LifeStage.ALIVE

    def hatch_progress(self):
        """0.0 .. 1.0 while hatching; 0.0 in every other stage."""
        if self.stage != LifeStage.HATCHING or self._hatch_timer is None:
            return 0.0
        return 1.0 - self._hatch_timer.remaining() / HATCH_MS

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------
    def start(self):
        """Arm the timers the current stage needs. Called once after construction or load."""
        self._cancel_timers()
        if self.stage == LifeStage.HATCHING:
            self._arm_hatch_timer()
        elif self.stage == LifeStage.ALIVE:
            if self.age >= MAX_AGE:
                self._transition_to(LifeStage.DEAD)
                self._notify()
                return
            self._arm_tick_timer()

    def close(self):
        """End the session: no timer may fire after this."""
        self._cancel_timers()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # ------------------------------------------------------------------
    # Lifecycle commands
    # ------------------------------------------------------------------
    def hatch(self):
        if self.stage != LifeStage.EGG:
            logger.debug("hatch ignored while %s", self.stage.value)
            return
        self.age = 0
        self.stats = fresh_stats(self.scheduler.now())
        self._transition_to(LifeStage.HATCHING)
        self._notify()

    def restart(self):
        self.age = 0
        self.stats = fresh_stats(self.scheduler.now())
        self._transition_to(LifeStage.EGG)
        logger.info("Restarted: a new egg")
        self._notify()

    # ------------------------------------------------------------------
    # Care actions (only while alive)
    # ------------------------------------------------------------------
    def feed(self):
        self.perform("feed")

    def play(self):
        self.perform("play")

    def nap(self):
        self.perform("nap")

    def clean(self):
        self.perform("clean")

    def perform(self, action):
        """Apply a care action by name ('feed', 'play', 'nap', 'clean')."""
        try:
            deltas = ACTION_EFFECTS[action]
        except KeyError:
            raise ValueError(f"Unknown action '{action}'") from None
        if not self.is_alive:
            logger.debug("%s ignored while %s", action, self.stage.value)
            return
        self.stats = self.stats.with_deltas(deltas, self.scheduler.now())
        self._notify()

    # ------------------------------------------------------------------
    # Timer callbacks
    # ------------------------------------------------------------------
    def _on_hatched(self):
        self._hatch_timer = None
        if self.stage != LifeStage.HATCHING:
            return
        self._transition_to(LifeStage.ALIVE)
        self._notify()

    def _on_tick(self):
        if not self.is_alive:
            return
        self.age += 1
        self.stats = decay(self.stats, TICK_MS / 1000).stamped(self.scheduler.now())
        logger.debug("Tick: age=%d %s", self.age, self.stats.values())
        # Death is checked after this tick's decay so the last decay is kept
        if self.age >= MAX_AGE:
            self._transition_to(LifeStage.DEAD)
        self._notify()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _transition_to(self, new_stage: LifeStage):
        if self.stage != new_stage:
            logger.debug("Pet transitioning from %s to %s", self.stage.value, new_stage.value)
            if new_stage == LifeStage.DEAD:
                logger.info("The pet died at age %d", self.age)
        self.stage = new_stage
        self._cancel_timers()
        if new_stage == LifeStage.HATCHING:
            self._arm_hatch_timer()
        elif new_stage == LifeStage.ALIVE:
            self._arm_tick_timer()

    def _arm_hatch_timer(self):
        self._hatch_timer = self.scheduler.call_later(HATCH_MS, self._on_hatched)

    def _arm_tick_timer(self):
        self._tick_timer = self.scheduler.call_every(TICK_MS, self._on_tick)

    def _cancel_timers(self):
        for timer in (self._tick_timer, self._hatch_timer):
            if timer is not None:
                timer.cancel()
        self._tick_timer = None
        self._hatch_timer = None

    def _notify(self):
        if self.on_state_change is not None:
            self.on_state_change(self.stage, self.age, self.stats)

    def snapshot(self):
        """(stage, age, stats) as the presentation layer reads it."""
        return self.stage, self.age, self.stats
