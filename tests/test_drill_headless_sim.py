from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from disasterprep.clock import ClockScheduler
from disasterprep.drill import DrillAction, DrillOutcome, DrillPhase
from disasterprep.history import drill_log, summarize
from disasterprep.state import PreparednessState
from disasterprep.store import MemoryStore


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += dt


def _frames(clock: FakeClock, sched: ClockScheduler, seconds: float, fps: int = 60) -> None:
    # Pump the scheduler the way the UI loop does, one frame at a time.
    for _ in range(int(seconds * fps)):
        clock.advance(1.0 / fps)
        sched.run_due()


def test_headless_scripted_session_sequence(tmp_path: Path) -> None:
    clock = FakeClock()
    sched = ClockScheduler(clock)
    history = tmp_path / "history.sqlite3"
    state = PreparednessState(
        store=MemoryStore(),
        scheduler=sched,
        now=lambda: datetime(2025, 3, 14, 10, 30, 0),
        history_path=history,
    )
    assert state.score == 42

    # Session 1: react correctly after a few seconds.
    state.start_drill()
    _frames(clock, sched, 2.5)
    assert state.drill().remaining_s == 28
    assert state.act(DrillAction.TAKE_COVER) is True
    _frames(clock, sched, 2.0)

    snap = state.drill()
    assert snap.phase is DrillPhase.RESULT
    assert snap.outcome is DrillOutcome.SUCCESS
    assert state.score == 50

    # Session 2: panic and take the lift.
    state.start_drill()
    _frames(clock, sched, 1.2)
    assert state.act("take_lift") is True
    assert state.drill().outcome is DrillOutcome.FAIL
    assert state.score == 45

    # Session 3: freeze until the timer runs out.
    state.start_drill()
    _frames(clock, sched, 31.0)
    assert state.drill().outcome is DrillOutcome.FAIL
    assert state.score == 40
    assert sched.pending() == 0

    summary = summarize(db_path=history)
    assert summary.drills == 3
    assert summary.successes == 1
    assert summary.success_rate == 1 / 3
    assert len(summary.monthly) == 1
    assert summary.monthly[0].drills == 3

    lines = drill_log(db_path=history, drill_id=1)
    assert len(lines) == 3
    assert lines[0] == "Shaking detected. Drop, Cover, Hold On!"
