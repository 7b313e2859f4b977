from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import sqlite3
import time

from .drill import DrillOutcome, DrillSnapshot

SCHEMA_VERSION = 1


@dataclass(frozen=True, slots=True)
class DrillRecord:
    """Persistable summary + log for one finished drill."""

    outcome: DrillOutcome
    elapsed_s: int
    delta: int
    score_after: int
    log: tuple[str, ...]
    message: str


@dataclass(frozen=True, slots=True)
class MonthlyDrills:
    month: str  # YYYY-MM
    drills: int
    avg_score: float


@dataclass(frozen=True, slots=True)
class HistorySummary:
    drills: int
    successes: int
    success_rate: float
    quiz_answers: int
    quiz_correct: int
    monthly: list[MonthlyDrills]


def drill_record_from_snapshot(snap: DrillSnapshot, *, delta: int, score_after: int) -> DrillRecord:
    if snap.outcome is None:
        raise ValueError("drill has not finished")
    return DrillRecord(
        outcome=snap.outcome,
        elapsed_s=int(snap.elapsed_s),
        delta=int(delta),
        score_after=int(score_after),
        log=tuple(snap.log),
        message=str(snap.message),
    )


def open_db(path: Path) -> sqlite3.Connection:
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.execute("PRAGMA foreign_keys=ON;")
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    _migrate(conn)
    return conn


def _utc_now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(time.time()))


def _migrate(conn: sqlite3.Connection) -> None:
    row = conn.execute("PRAGMA user_version;").fetchone()
    ver = int(row[0]) if row else 0
    if ver >= SCHEMA_VERSION:
        return

    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS drill_run (
                id INTEGER PRIMARY KEY,
                outcome TEXT NOT NULL,
                elapsed_s INTEGER NOT NULL,
                delta INTEGER NOT NULL,
                score_after INTEGER NOT NULL,
                message TEXT NOT NULL,
                finished_at_utc TEXT NOT NULL
            );
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS drill_log_line (
                drill_id INTEGER NOT NULL REFERENCES drill_run(id) ON DELETE CASCADE,
                seq INTEGER NOT NULL,
                line TEXT NOT NULL,
                PRIMARY KEY (drill_id, seq)
            );
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS quiz_answer (
                id INTEGER PRIMARY KEY,
                hazard TEXT NOT NULL,
                is_correct INTEGER NOT NULL,
                delta INTEGER NOT NULL,
                score_after INTEGER NOT NULL,
                answered_at_utc TEXT NOT NULL
            );
            """
        )
        conn.execute(f"PRAGMA user_version={SCHEMA_VERSION};")


def record_drill(*, db_path: Path, record: DrillRecord, finished_at_utc: str | None = None) -> int:
    conn = open_db(db_path)
    try:
        with conn:
            cur = conn.execute(
                """
                INSERT INTO drill_run(outcome, elapsed_s, delta, score_after, message, finished_at_utc)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    str(record.outcome.value),
                    int(record.elapsed_s),
                    int(record.delta),
                    int(record.score_after),
                    record.message,
                    finished_at_utc or _utc_now_iso(),
                ),
            )
            drill_id = int(cur.lastrowid)
            for seq, line in enumerate(record.log):
                conn.execute(
                    "INSERT INTO drill_log_line(drill_id, seq, line) VALUES (?, ?, ?)",
                    (drill_id, seq, line),
                )
        return drill_id
    finally:
        conn.close()


def record_quiz_answer(
    *,
    db_path: Path,
    hazard: str,
    correct: bool,
    delta: int,
    score_after: int,
) -> int:
    conn = open_db(db_path)
    try:
        with conn:
            cur = conn.execute(
                """
                INSERT INTO quiz_answer(hazard, is_correct, delta, score_after, answered_at_utc)
                VALUES (?, ?, ?, ?, ?)
                """,
                (hazard, 1 if correct else 0, int(delta), int(score_after), _utc_now_iso()),
            )
        return int(cur.lastrowid)
    finally:
        conn.close()


def drill_log(*, db_path: Path, drill_id: int) -> list[str]:
    conn = open_db(db_path)
    try:
        rows = conn.execute(
            "SELECT line FROM drill_log_line WHERE drill_id = ? ORDER BY seq", (int(drill_id),)
        ).fetchall()
        return [str(r[0]) for r in rows]
    finally:
        conn.close()


def summarize(*, db_path: Path) -> HistorySummary:
    """Totals plus per-month drill count and average score after each drill."""

    conn = open_db(db_path)
    try:
        drills, successes = conn.execute(
            "SELECT COUNT(*), COALESCE(SUM(outcome = 'success'), 0) FROM drill_run"
        ).fetchone()
        quiz_answers, quiz_correct = conn.execute(
            "SELECT COUNT(*), COALESCE(SUM(is_correct), 0) FROM quiz_answer"
        ).fetchone()
        monthly_rows = conn.execute(
            """
            SELECT substr(finished_at_utc, 1, 7) AS month, COUNT(*), AVG(score_after)
            FROM drill_run
            GROUP BY month
            ORDER BY month
            """
        ).fetchall()
    finally:
        conn.close()

    drills = int(drills)
    successes = int(successes)
    return HistorySummary(
        drills=drills,
        successes=successes,
        success_rate=0.0 if drills == 0 else successes / drills,
        quiz_answers=int(quiz_answers),
        quiz_correct=int(quiz_correct),
        monthly=[MonthlyDrills(month=str(m), drills=int(n), avg_score=float(avg)) for m, n, avg in monthly_rows],
    )
