from __future__ import annotations

from dataclasses import dataclass

from disasterprep.clock import ClockScheduler


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += dt


def test_callbacks_fire_in_due_order_then_arm_order() -> None:
    clock = FakeClock()
    sched = ClockScheduler(clock)
    fired: list[str] = []

    sched.call_later(2.0, lambda: fired.append("late"))
    sched.call_later(1.0, lambda: fired.append("a"))
    sched.call_later(1.0, lambda: fired.append("b"))

    assert sched.run_due() == 0
    clock.advance(1.0)
    assert sched.run_due() == 2
    assert fired == ["a", "b"]

    clock.advance(5.0)
    assert sched.run_due() == 1
    assert fired == ["a", "b", "late"]
    assert sched.pending() == 0


def test_cancelled_handle_never_fires_and_cancel_is_idempotent() -> None:
    clock = FakeClock()
    sched = ClockScheduler(clock)
    fired: list[int] = []

    handle = sched.call_later(1.0, lambda: fired.append(1))
    assert handle.active
    assert sched.pending() == 1

    handle.cancel()
    handle.cancel()
    assert handle.cancelled
    assert sched.pending() == 0

    clock.advance(2.0)
    assert sched.run_due() == 0
    assert fired == []


def test_cancel_after_fire_is_a_no_op() -> None:
    clock = FakeClock()
    sched = ClockScheduler(clock)

    handle = sched.call_later(0.5, lambda: None)
    clock.advance(0.5)
    sched.run_due()
    handle.cancel()

    assert handle.fired
    assert not handle.cancelled


def test_callback_armed_from_callback_waits_for_its_own_due_time() -> None:
    clock = FakeClock()
    sched = ClockScheduler(clock)
    fired: list[float] = []

    def rearm() -> None:
        fired.append(clock.now())
        if len(fired) < 3:
            sched.call_later(1.0, rearm)

    sched.call_later(1.0, rearm)
    clock.advance(1.0)
    assert sched.run_due() == 1
    assert sched.pending() == 1

    for _ in range(3):
        clock.advance(1.0)
        sched.run_due()

    assert fired == [1.0, 2.0, 3.0]
    assert sched.pending() == 0


def test_zero_delay_callback_armed_from_callback_fires_in_same_pump() -> None:
    clock = FakeClock()
    sched = ClockScheduler(clock)
    fired: list[str] = []

    def outer() -> None:
        fired.append("outer")
        sched.call_later(0.0, lambda: fired.append("inner"))

    sched.call_later(1.0, outer)
    clock.advance(1.0)

    assert sched.run_due() == 2
    assert fired == ["outer", "inner"]
