from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from disasterprep.drill import DrillOutcome, DrillPhase, DrillSnapshot
from disasterprep.history import (
    SCHEMA_VERSION,
    DrillRecord,
    drill_log,
    drill_record_from_snapshot,
    open_db,
    record_drill,
    record_quiz_answer,
    summarize,
)


def _record(outcome: DrillOutcome, score_after: int, log: tuple[str, ...] = ("a", "b")) -> DrillRecord:
    return DrillRecord(
        outcome=outcome,
        elapsed_s=5,
        delta=8 if outcome is DrillOutcome.SUCCESS else -5,
        score_after=score_after,
        log=log,
        message="done",
    )


def test_open_db_creates_schema(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "history.sqlite3"
    conn = open_db(path)
    try:
        assert conn.execute("PRAGMA user_version;").fetchone()[0] == SCHEMA_VERSION
        tables = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    finally:
        conn.close()

    assert {"drill_run", "drill_log_line", "quiz_answer"} <= tables


def test_empty_summary(tmp_path: Path) -> None:
    s = summarize(db_path=tmp_path / "h.sqlite3")

    assert s.drills == 0
    assert s.success_rate == 0.0
    assert s.quiz_answers == 0
    assert s.monthly == []


def test_drill_log_round_trip(tmp_path: Path) -> None:
    db = tmp_path / "h.sqlite3"

    drill_id = record_drill(db_path=db, record=_record(DrillOutcome.SUCCESS, 50, ("one", "two", "three")))

    assert drill_log(db_path=db, drill_id=drill_id) == ["one", "two", "three"]
    assert drill_log(db_path=db, drill_id=drill_id + 1) == []


def test_summary_groups_by_month(tmp_path: Path) -> None:
    db = tmp_path / "h.sqlite3"
    record_drill(db_path=db, record=_record(DrillOutcome.SUCCESS, 50), finished_at_utc="2025-01-10T09:00:00Z")
    record_drill(db_path=db, record=_record(DrillOutcome.FAIL, 40), finished_at_utc="2025-01-20T09:00:00Z")
    record_drill(db_path=db, record=_record(DrillOutcome.SUCCESS, 60), finished_at_utc="2025-02-01T09:00:00Z")
    record_quiz_answer(db_path=db, hazard="flood", correct=True, delta=5, score_after=65)
    record_quiz_answer(db_path=db, hazard="fire", correct=False, delta=-2, score_after=63)

    s = summarize(db_path=db)

    assert s.drills == 3
    assert s.successes == 2
    assert s.success_rate == pytest.approx(2 / 3)
    assert s.quiz_answers == 2
    assert s.quiz_correct == 1
    assert [(m.month, m.drills) for m in s.monthly] == [("2025-01", 2), ("2025-02", 1)]
    assert s.monthly[0].avg_score == pytest.approx(45.0)


def test_record_from_snapshot() -> None:
    snap = DrillSnapshot(
        session=1,
        phase=DrillPhase.RESULT,
        remaining_s=30,
        outcome=DrillOutcome.FAIL,
        message="m",
        log=("x",),
        accepting_actions=False,
        elapsed_s=12,
    )

    rec = drill_record_from_snapshot(snap, delta=-5, score_after=37)

    assert rec.elapsed_s == 12
    assert rec.log == ("x",)

    unfinished = DrillSnapshot(1, DrillPhase.RUNNING, 20, None, "", (), True)
    with pytest.raises(ValueError):
        drill_record_from_snapshot(unfinished, delta=0, score_after=0)


def test_reopen_keeps_rows(tmp_path: Path) -> None:
    db = tmp_path / "h.sqlite3"
    record_drill(db_path=db, record=_record(DrillOutcome.FAIL, 37))

    conn = sqlite3.connect(db)
    try:
        (count,) = conn.execute("SELECT COUNT(*) FROM drill_run").fetchone()
    finally:
        conn.close()

    assert count == 1
    assert summarize(db_path=db).drills == 1
