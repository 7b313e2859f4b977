"""The single owner of preparedness state.

Score, drill session, selected region/view, alert feed and contacts all live
on one PreparednessState instance which the UI holds and calls into. Every
score change goes through score.apply_delta and is written to the store
before the call returns.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable
from datetime import datetime
from enum import Enum
from pathlib import Path

from .alerts import Alert, generate_alerts
from .catalog import CONTACTS_SEED, QUIZ_BANK, Region, default_region, region_by_id
from .clock import Scheduler
from .drill import DrillAction, DrillConfig, DrillSnapshot, EarthquakeDrill
from .emergency import Contact, ContactDirectory, PanicButton
from .history import drill_record_from_snapshot, record_drill, record_quiz_answer
from .quiz import QuizAttempt, QuizResult
from .score import DEFAULT_SCORE, apply_delta, coerce_score
from .store import KeyValueStore

_logger = logging.getLogger(__name__)

KEY_VIEW = "dp.view"
KEY_REGION = "dp.region"
KEY_SCORE = "dp.score"
KEY_ALERTS = "dp.alerts"
KEY_CONTACTS = "dp.contacts"


class View(str, Enum):
    HOME = "home"
    LEARN = "learn"
    DRILL = "drill"
    ADMIN = "admin"
    EMERGENCY = "emergency"


class PreparednessState:
    def __init__(
        self,
        *,
        store: KeyValueStore,
        scheduler: Scheduler,
        now: Callable[[], datetime] = datetime.now,
        history_path: Path | None = None,
        drill_config: DrillConfig | None = None,
        panic_reset_s: float = 2.0,
    ) -> None:
        self._store = store
        self._now = now
        self._history_path = history_path

        raw_view = store.read(KEY_VIEW, View.HOME.value)
        try:
            self._view = View(raw_view)
        except ValueError:
            self._view = View.HOME

        self._region = region_by_id(store.read(KEY_REGION, None)) or default_region()
        self._score = coerce_score(store.read(KEY_SCORE, DEFAULT_SCORE))

        # The feed is regenerated on every open; the stored copy is a snapshot for readers only.
        self._alerts = generate_alerts(self._region, self._now())
        self._store.write(KEY_ALERTS, [a.to_dict() for a in self._alerts])

        self._contacts = ContactDirectory.from_list(store.read(KEY_CONTACTS, None), fallback=CONTACTS_SEED)

        self._drill = EarthquakeDrill(
            scheduler=scheduler,
            on_delta=self._on_drill_delta,
            on_finish=self._on_drill_finish,
            config=drill_config,
        )
        self._last_drill_delta = 0
        self._panic = PanicButton(scheduler, reset_after_s=panic_reset_s)

    # ---- outputs -------------------------------------------------------

    @property
    def score(self) -> int:
        return self._score

    @property
    def region(self) -> Region:
        return self._region

    @property
    def view(self) -> View:
        return self._view

    @property
    def alerts(self) -> list[Alert]:
        return list(self._alerts)

    @property
    def contacts(self) -> list[Contact]:
        return self._contacts.contacts()

    @property
    def panic(self) -> PanicButton:
        return self._panic

    def drill(self) -> DrillSnapshot:
        return self._drill.snapshot()

    # ---- intents -------------------------------------------------------

    def apply_delta(self, delta: int) -> int:
        self._score = apply_delta(self._score, delta)
        self._store.write(KEY_SCORE, self._score)
        return self._score

    def start_drill(self) -> None:
        self._drill.start()

    def act(self, choice: DrillAction | str) -> bool:
        return self._drill.act(choice)

    def new_quiz_attempt(self, hazard: str) -> QuizAttempt | None:
        question = QUIZ_BANK.get(hazard)
        return None if question is None else QuizAttempt(question)

    def answer(self, attempt: QuizAttempt, option_index: int) -> QuizResult | None:
        if attempt.resolved:
            return attempt.result
        result = attempt.answer(option_index)
        if result is None:
            return None
        score_after = self.apply_delta(result.delta)
        self._record_history(
            lambda path: record_quiz_answer(
                db_path=path,
                hazard=attempt.question.hazard,
                correct=result.correct,
                delta=result.delta,
                score_after=score_after,
            )
        )
        return result

    def select_region(self, region_id: str) -> bool:
        region = region_by_id(region_id)
        if region is None:
            return False
        self._region = region
        self._alerts = generate_alerts(region, self._now())
        self._store.write(KEY_REGION, region.region_id)
        self._store.write(KEY_ALERTS, [a.to_dict() for a in self._alerts])
        return True

    def select_view(self, view: View | str) -> bool:
        try:
            self._view = View(view)
        except ValueError:
            return False
        self._store.write(KEY_VIEW, self._view.value)
        return True

    def press_panic(self) -> None:
        self._panic.press()

    def add_contact(self, contact: Contact) -> bool:
        return self._save_contacts_if(self._contacts.add(contact))

    def remove_contact(self, index: int) -> bool:
        return self._save_contacts_if(self._contacts.remove(index))

    def update_contact(self, index: int, contact: Contact) -> bool:
        return self._save_contacts_if(self._contacts.update(index, contact))

    # ---- internals -----------------------------------------------------

    def _save_contacts_if(self, changed: bool) -> bool:
        if changed:
            self._store.write(KEY_CONTACTS, self._contacts.to_list())
        return changed

    def _on_drill_delta(self, delta: int) -> None:
        self._last_drill_delta = delta
        self.apply_delta(delta)

    def _on_drill_finish(self, snap: DrillSnapshot) -> None:
        record = drill_record_from_snapshot(snap, delta=self._last_drill_delta, score_after=self._score)
        self._record_history(lambda path: record_drill(db_path=path, record=record))

    def _record_history(self, write: Callable[[Path], int]) -> None:
        if self._history_path is None:
            return
        try:
            write(self._history_path)
        except (sqlite3.Error, OSError):
            _logger.warning("could not record history to %s", self._history_path, exc_info=True)
