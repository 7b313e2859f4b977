from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from .clock import Scheduler, TimerHandle

_logger = logging.getLogger(__name__)


class DrillPhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    RESULT = "result"


class DrillOutcome(str, Enum):
    SUCCESS = "success"
    FAIL = "fail"


class DrillAction(str, Enum):
    TAKE_COVER = "take_cover"
    RUN_TO_CORRIDOR = "run_to_corridor"
    TAKE_LIFT = "take_lift"


ACTION_LABELS: dict[DrillAction, str] = {
    DrillAction.TAKE_COVER: "Hide under desk",
    DrillAction.RUN_TO_CORRIDOR: "Run to corridor",
    DrillAction.TAKE_LIFT: "Take the lift",
}

OPENING_LINE = "Shaking detected. Drop, Cover, Hold On!"
COVER_ACK_LINE = "You get under a sturdy desk and hold the leg."
COVER_FOLLOW_UP_LINE = "Good. Keep your head covered; wait till shaking stops."

SUCCESS_MESSAGE = "Excellent response. Now evacuate via stairs to open ground."
TIMEOUT_MESSAGE = "You ran out of time. Always act quickly and safely."
UNSAFE_MESSAGES: dict[DrillAction, str] = {
    DrillAction.RUN_TO_CORRIDOR: "Running during shaking is dangerous. Drop, Cover, Hold On first.",
    DrillAction.TAKE_LIFT: "Never use lifts in an earthquake. Use stairs after shaking stops.",
}


@dataclass(frozen=True, slots=True)
class DrillConfig:
    duration_s: int = 30
    tick_s: float = 1.0
    follow_up_s: float = 0.8
    resolve_s: float = 1.6
    success_delta: int = 8
    fail_delta: int = -5

    def __post_init__(self) -> None:
        if self.duration_s <= 0:
            raise ValueError("duration_s must be > 0")
        if self.tick_s <= 0.0:
            raise ValueError("tick_s must be > 0")
        if not (0.0 <= self.follow_up_s <= self.resolve_s):
            raise ValueError("follow_up_s must be in [0, resolve_s]")


@dataclass(frozen=True, slots=True)
class DrillSnapshot:
    """View model for the UI (pure data)."""

    session: int
    phase: DrillPhase
    remaining_s: int
    outcome: DrillOutcome | None
    message: str
    log: tuple[str, ...]
    accepting_actions: bool
    elapsed_s: int = 0


class EarthquakeDrill:
    """Timed earthquake drill: idle -> running -> result.

    - start() is valid from any phase and always opens a fresh session.
    - Time only advances through the injected Scheduler; one tick is pending
      at most while running, and none once the session has ended.
    - The first transition into RESULT wins. Callbacks that belong to an older
      session, or arrive after the end, are dropped.
    """

    def __init__(
        self,
        *,
        scheduler: Scheduler,
        on_delta: Callable[[int], None],
        on_finish: Callable[[DrillSnapshot], None] | None = None,
        config: DrillConfig | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._on_delta = on_delta
        self._on_finish = on_finish
        self._cfg = config or DrillConfig()

        self._session = 0
        self._phase = DrillPhase.IDLE
        self._remaining_s = self._cfg.duration_s
        self._outcome: DrillOutcome | None = None
        self._message = ""
        self._log: list[str] = []
        self._covered = False

        self._tick_handle: TimerHandle | None = None
        self._follow_ups: list[TimerHandle] = []

    @property
    def config(self) -> DrillConfig:
        return self._cfg

    @property
    def phase(self) -> DrillPhase:
        return self._phase

    @property
    def remaining_s(self) -> int:
        return self._remaining_s

    @property
    def outcome(self) -> DrillOutcome | None:
        return self._outcome

    def log(self) -> list[str]:
        return list(self._log)

    def start(self) -> None:
        self._cancel_timers()
        self._session += 1
        self._phase = DrillPhase.RUNNING
        self._remaining_s = self._cfg.duration_s
        self._outcome = None
        self._message = ""
        self._log = [OPENING_LINE]
        self._covered = False
        self._arm_tick()
        _logger.debug("drill session %d started", self._session)

    def act(self, choice: DrillAction | str) -> bool:
        """Dispatch a user action. Returns False when the action was dropped."""

        if self._phase is not DrillPhase.RUNNING or self._covered:
            return False
        try:
            action = DrillAction(choice)
        except ValueError:
            return False

        if action is DrillAction.TAKE_COVER:
            self._covered = True
            self._log.append(COVER_ACK_LINE)
            session = self._session
            self._follow_ups = [
                self._scheduler.call_later(self._cfg.follow_up_s, lambda: self._follow_up(session)),
                self._scheduler.call_later(self._cfg.resolve_s, lambda: self._resolve_cover(session)),
            ]
            return True

        self._end(DrillOutcome.FAIL, UNSAFE_MESSAGES[action])
        return True

    def snapshot(self) -> DrillSnapshot:
        running = self._phase is DrillPhase.RUNNING
        return DrillSnapshot(
            session=self._session,
            phase=self._phase,
            # The idle and result screens show the full duration.
            remaining_s=self._remaining_s if running else self._cfg.duration_s,
            outcome=self._outcome,
            message=self._message,
            log=tuple(self._log),
            accepting_actions=running and not self._covered,
            elapsed_s=self._cfg.duration_s - self._remaining_s,
        )

    def _arm_tick(self) -> None:
        session = self._session
        self._tick_handle = self._scheduler.call_later(self._cfg.tick_s, lambda: self._tick(session))

    def _tick(self, session: int) -> None:
        if session != self._session or self._phase is not DrillPhase.RUNNING:
            return
        self._tick_handle = None
        self._remaining_s -= 1
        if self._remaining_s <= 0:
            self._remaining_s = 0
            self._end(DrillOutcome.FAIL, TIMEOUT_MESSAGE)
            return
        self._arm_tick()

    def _follow_up(self, session: int) -> None:
        if session != self._session or self._phase is not DrillPhase.RUNNING:
            return
        self._log.append(COVER_FOLLOW_UP_LINE)

    def _resolve_cover(self, session: int) -> None:
        if session != self._session or self._phase is not DrillPhase.RUNNING:
            return
        self._end(DrillOutcome.SUCCESS, SUCCESS_MESSAGE)

    def _end(self, outcome: DrillOutcome, message: str) -> None:
        # Stop the countdown before anything observes the new phase.
        self._cancel_timers()
        self._phase = DrillPhase.RESULT
        self._outcome = outcome
        self._message = message
        delta = self._cfg.success_delta if outcome is DrillOutcome.SUCCESS else self._cfg.fail_delta
        _logger.debug("drill session %d ended %s (delta %+d)", self._session, outcome.value, delta)
        self._on_delta(delta)
        if self._on_finish is not None:
            self._on_finish(self.snapshot())

    def _cancel_timers(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None
        for handle in self._follow_ups:
            handle.cancel()
        self._follow_ups = []
