"""Pygame UI shell for DisasterPrep EDU.

Screens:
- Home (region-aware alert feed and priority tips)
- Learn (hazard micro-quizzes)
- Drill (30-second earthquake drill)
- Admin (preparedness score and drill history)
- Emergency (quick contacts and mock panic button)

All timing/scoring/state lives in disasterprep/* (core modules); screens only
dispatch intents into PreparednessState and render its snapshots.
"""

from __future__ import annotations

import functools
import logging
import sqlite3
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Protocol

import pygame

from .alerts import AlertLevel
from .catalog import HAZARDS, REGIONS, priority_tips
from .clock import ClockScheduler, RealClock
from .config import AppConfig, configure_logging
from .drill import ACTION_LABELS, DrillAction, DrillOutcome, DrillPhase
from .history import HistorySummary, summarize
from .quiz import QuizAttempt
from .score import score_tone
from .state import PreparednessState, View
from .store import JsonFileStore

_logger = logging.getLogger(__name__)

WINDOW_SIZE = (960, 540)
TARGET_FPS = 60

BG = (3, 9, 78)
PANEL_BG = (8, 18, 104)
HEADER_BG = (18, 30, 118)
BORDER = (226, 236, 255)
TEXT_MAIN = (238, 245, 255)
TEXT_MUTED = (186, 200, 224)

TONE_COLORS = {
    "good": (52, 211, 153),
    "fair": (251, 191, 36),
    "low": (248, 113, 113),
}

LEVEL_COLORS = {
    AlertLevel.INFO: (56, 130, 200),
    AlertLevel.WARN: (200, 150, 40),
    AlertLevel.OK: (40, 170, 120),
    AlertLevel.ALERT: (200, 60, 60),
}


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str
    action: Callable[[], None]


class App:
    def __init__(self, surface: pygame.Surface, state: PreparednessState) -> None:
        self._surface = surface
        self._state = state
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def state(self) -> PreparednessState:
        return self._state

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the last/root screen; root handles its own quit/back behavior.
        if len(self._screens) > 1:
            self._screens.pop()
        if len(self._screens) == 1:
            self._state.select_view(View.HOME)

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


@functools.lru_cache(maxsize=None)
def _font(size: int) -> pygame.font.Font:
    return pygame.font.Font(None, size)


def _fit_label(font: pygame.font.Font, label: str, max_width: int) -> str:
    if max_width <= 0:
        return ""
    if font.size(label)[0] <= max_width:
        return label
    clipped = label
    while clipped and font.size(f"{clipped}...")[0] > max_width:
        clipped = clipped[:-1]
    return f"{clipped}..." if clipped else "..."


def _wrap_text(font: pygame.font.Font, text: str, max_width: int) -> list[str]:
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = word if current == "" else f"{current} {word}"
        if font.size(candidate)[0] <= max_width or current == "":
            current = candidate
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines


def _draw_frame(surface: pygame.Surface, title: str, tag: str, state: PreparednessState) -> pygame.Rect:
    """Draw the shared panel + header (title, region, score badge). Returns the content rect."""

    w, h = surface.get_size()
    surface.fill(BG)

    margin = max(10, min(26, w // 34))
    frame = pygame.Rect(margin, margin, max(260, w - margin * 2), max(220, h - margin * 2))
    pygame.draw.rect(surface, PANEL_BG, frame)
    pygame.draw.rect(surface, BORDER, frame, 2)

    header_h = max(34, min(52, h // 8))
    header = pygame.Rect(frame.x + 2, frame.y + 2, frame.w - 4, header_h)
    pygame.draw.rect(surface, HEADER_BG, header)
    pygame.draw.line(surface, BORDER, (header.x, header.bottom), (header.right, header.bottom), 1)

    small = _font(22)
    title_font = _font(36)

    tag_img = small.render(tag, True, TEXT_MUTED)
    surface.blit(tag_img, (header.x + 12, header.y + (header.h - tag_img.get_height()) // 2))

    title_img = title_font.render(title, True, TEXT_MAIN)
    surface.blit(title_img, title_img.get_rect(center=(frame.centerx, header.centery)))

    score = state.score
    badge = small.render(f"{state.region.name}  |  Preparedness {score}", True, TONE_COLORS[score_tone(score)])
    surface.blit(badge, badge.get_rect(midright=(header.right - 12, header.centery)))

    return pygame.Rect(frame.x + 16, header.bottom + 12, frame.w - 32, frame.bottom - header.bottom - 48)


def _draw_footer(surface: pygame.Surface, text: str) -> None:
    w, h = surface.get_size()
    small = _font(22)
    foot = small.render(text, True, TEXT_MUTED)
    surface.blit(foot, foot.get_rect(midbottom=(w // 2, h - max(10, min(26, w // 34)) - 10)))


class MenuScreen:
    def __init__(self, app: App, title: str, items: list[MenuItem], *, is_root: bool = False) -> None:
        self._app = app
        self._title = title
        self._items = items
        self._selected = 0
        self._is_root = is_root
        self._item_font = _font(32)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        key = event.key
        if key in (pygame.K_UP, pygame.K_w):
            self._move(-1)
        elif key in (pygame.K_DOWN, pygame.K_s):
            self._move(1)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            self._activate()
        elif key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._back()

    def _move(self, delta: int) -> None:
        if not self._items:
            return
        self._selected = (self._selected + delta) % len(self._items)

    def _activate(self) -> None:
        if not self._items:
            return
        self._items[self._selected].action()

    def _back(self) -> None:
        if self._is_root:
            self._app.quit()
        else:
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        content = _draw_frame(surface, self._title, "MENU", self._app.state)

        item_count = max(1, len(self._items))
        gap = 8
        row_h = max(30, min(44, (content.h - gap * (item_count + 1)) // item_count))
        total_h = row_h * item_count + gap * (item_count - 1)
        y = content.y + max(8, (content.h - total_h) // 2)

        for idx, item in enumerate(self._items):
            row = pygame.Rect(content.x + 12, y, content.w - 24, row_h)
            selected = idx == self._selected
            if selected:
                pygame.draw.rect(surface, (244, 248, 255), row)
                pygame.draw.rect(surface, (120, 142, 196), row, 2)
            else:
                pygame.draw.rect(surface, (9, 20, 106), row)
                pygame.draw.rect(surface, (62, 84, 152), row, 1)

            color = (14, 26, 74) if selected else TEXT_MAIN
            label = _fit_label(self._item_font, item.label, row.w - 20)
            text = self._item_font.render(label, True, color)
            surface.blit(text, (row.x + 10, row.y + (row.h - text.get_height()) // 2))
            y += row_h + gap

        _draw_footer(surface, "Enter/Space: Select  |  Esc/Backspace: Back")


class HomeScreen:
    def __init__(self, app: App) -> None:
        self._app = app
        self._font = _font(26)
        self._small = _font(22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if event.key in (pygame.K_LEFT, pygame.K_RIGHT):
            self._shift_region(-1 if event.key == pygame.K_LEFT else 1)
        elif event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._app.pop()

    def _shift_region(self, delta: int) -> None:
        state = self._app.state
        ids = [r.region_id for r in REGIONS]
        idx = ids.index(state.region.region_id)
        state.select_region(ids[(idx + delta) % len(ids)])

    def render(self, surface: pygame.Surface) -> None:
        state = self._app.state
        content = _draw_frame(surface, "Live Campus Feed", "HOME", state)

        col_w = (content.w - 16) // 2
        x, y = content.x, content.y
        for alert in state.alerts:
            card = pygame.Rect(x, y, col_w, 62)
            pygame.draw.rect(surface, LEVEL_COLORS[alert.level], card, 0)
            pygame.draw.rect(surface, BORDER, card, 1)
            head = self._font.render(f"{alert.category}  {alert.when_label()}", True, TEXT_MAIN)
            surface.blit(head, (card.x + 8, card.y + 6))
            body = self._small.render(_fit_label(self._small, alert.message, card.w - 16), True, TEXT_MAIN)
            surface.blit(body, (card.x + 8, card.y + 34))
            y += card.h + 8

        tx, ty = content.x + col_w + 16, content.y
        title = self._font.render(f"Region Focus: {state.region.name}", True, TEXT_MAIN)
        surface.blit(title, (tx, ty))
        ty += 30
        for hazard, tips in priority_tips(state.region):
            surface.blit(self._font.render(hazard.capitalize(), True, TONE_COLORS["fair"]), (tx, ty))
            ty += 24
            for tip in tips:
                for line in _wrap_text(self._small, f"- {tip}", col_w):
                    surface.blit(self._small.render(line, True, TEXT_MUTED), (tx, ty))
                    ty += 20
            ty += 6

        _draw_footer(surface, "Left/Right: Change region  |  Esc: Back")


class LearnScreen:
    def __init__(self, app: App) -> None:
        self._app = app
        self._hazard_index = 0
        self._attempts: dict[str, QuizAttempt] = {}
        self._font = _font(28)
        self._small = _font(22)

    def _current_attempt(self) -> QuizAttempt | None:
        hazard = HAZARDS[self._hazard_index].key
        attempt = self._attempts.get(hazard)
        if attempt is None:
            attempt = self._app.state.new_quiz_attempt(hazard)
            if attempt is not None:
                self._attempts[hazard] = attempt
        return attempt

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        key = event.key
        if key in (pygame.K_UP, pygame.K_LEFT):
            self._hazard_index = (self._hazard_index - 1) % len(HAZARDS)
        elif key in (pygame.K_DOWN, pygame.K_RIGHT):
            self._hazard_index = (self._hazard_index + 1) % len(HAZARDS)
        elif key == pygame.K_r:
            # Fresh attempt: a resolved one never accepts another answer.
            self._attempts.pop(HAZARDS[self._hazard_index].key, None)
        elif pygame.K_1 <= key <= pygame.K_9:
            attempt = self._current_attempt()
            # Digit keys beyond the question's option count are ignored.
            if attempt is not None and key - pygame.K_1 < len(attempt.question.options):
                self._app.state.answer(attempt, key - pygame.K_1)
        elif key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        content = _draw_frame(surface, "Interactive Micro-Quizzes", "LEARN", self._app.state)
        attempt = self._current_attempt()
        if attempt is None:
            return

        question = attempt.question
        x, y = content.x, content.y
        name = HAZARDS[self._hazard_index].name
        surface.blit(self._font.render(f"{name} ({self._hazard_index + 1}/{len(HAZARDS)})", True, TEXT_MUTED), (x, y))
        y += 30
        for line in _wrap_text(self._font, question.prompt, content.w):
            surface.blit(self._font.render(line, True, TEXT_MAIN), (x, y))
            y += 28
        y += 8

        for idx, option in enumerate(question.options):
            row = pygame.Rect(x, y, content.w, 54)
            if attempt.chosen_index == idx:
                fill = (30, 120, 80) if option.correct else (140, 40, 40)
            else:
                fill = (9, 20, 106)
            pygame.draw.rect(surface, fill, row)
            pygame.draw.rect(surface, (62, 84, 152), row, 1)
            surface.blit(self._font.render(f"{idx + 1}. {option.text}", True, TEXT_MAIN), (row.x + 10, row.y + 6))
            why = attempt.explanation_for(idx)
            if why is not None:
                surface.blit(self._small.render(why, True, TEXT_MUTED), (row.x + 28, row.y + 32))
            y += row.h + 8

        _draw_footer(surface, f"1-{len(question.options)}: Answer  |  Up/Down: Hazard  |  R: Retry  |  Esc: Back")


class DrillScreen:
    _keys_to_action = {
        pygame.K_1: DrillAction.TAKE_COVER,
        pygame.K_2: DrillAction.RUN_TO_CORRIDOR,
        pygame.K_3: DrillAction.TAKE_LIFT,
    }

    def __init__(self, app: App) -> None:
        self._app = app
        self._font = _font(28)
        self._small = _font(22)
        self._big = _font(72)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        key = event.key
        if key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            self._app.state.start_drill()
        elif key in self._keys_to_action:
            self._app.state.act(self._keys_to_action[key])
        elif key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        snap = self._app.state.drill()
        content = _draw_frame(surface, "30-Second Virtual Drill - Earthquake", "DRILL", self._app.state)

        left_w = content.w * 2 // 3
        timer = self._big.render(f"{snap.remaining_s:02d}s", True, TEXT_MAIN)
        surface.blit(timer, (content.x, content.y))

        y = content.y + 80
        for idx, action in enumerate(DrillAction):
            enabled = snap.accepting_actions
            color = TEXT_MAIN if enabled else (110, 120, 150)
            surface.blit(self._font.render(f"{idx + 1}. {ACTION_LABELS[action]}", True, color), (content.x, y))
            y += 32

        if snap.phase is DrillPhase.RESULT and snap.outcome is not None:
            y += 10
            ok = snap.outcome is DrillOutcome.SUCCESS
            box = pygame.Rect(content.x, y, left_w - 16, 80)
            pygame.draw.rect(surface, (30, 120, 80) if ok else (140, 40, 40), box)
            head = "Great job" if ok else "Not safe"
            surface.blit(self._font.render(head, True, TEXT_MAIN), (box.x + 10, box.y + 8))
            for i, line in enumerate(_wrap_text(self._small, snap.message, box.w - 20)[:2]):
                surface.blit(self._small.render(line, True, TEXT_MAIN), (box.x + 10, box.y + 36 + i * 20))

        lx, ly = content.x + left_w, content.y
        surface.blit(self._font.render("Drill Log", True, TEXT_MAIN), (lx, ly))
        ly += 30
        if not snap.log:
            surface.blit(self._small.render("Start the drill to see live guidance.", True, TEXT_MUTED), (lx, ly))
        for entry in snap.log:
            for line in _wrap_text(self._small, f"- {entry}", content.w - left_w):
                surface.blit(self._small.render(line, True, TEXT_MUTED), (lx, ly))
                ly += 20

        _draw_footer(surface, "Enter: Start drill  |  1-3: Act  |  Esc: Back")


class AdminScreen:
    def __init__(self, app: App, *, history_path: Path | None) -> None:
        self._app = app
        self._history_path = history_path
        self._font = _font(28)
        self._big = _font(72)
        self._summary = self._load_summary()

    def _load_summary(self) -> HistorySummary | None:
        if self._history_path is None:
            return None
        try:
            return summarize(db_path=self._history_path)
        except (sqlite3.Error, OSError):
            _logger.warning("could not read history from %s", self._history_path, exc_info=True)
            return None

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if event.key == pygame.K_r:
            self._summary = self._load_summary()
        elif event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        state = self._app.state
        content = _draw_frame(surface, "Campus Preparedness", "ADMIN", state)

        score_img = self._big.render(f"{state.score}/100", True, TONE_COLORS[score_tone(state.score)])
        surface.blit(score_img, (content.x, content.y))
        bar = pygame.Rect(content.x, content.y + 70, content.w, 12)
        pygame.draw.rect(surface, (40, 50, 120), bar)
        pygame.draw.rect(surface, TONE_COLORS["good"], (bar.x, bar.y, bar.w * state.score // 100, bar.h))

        y = bar.bottom + 20
        s = self._summary
        if s is None:
            surface.blit(self._font.render("No drill history available.", True, TEXT_MUTED), (content.x, y))
        else:
            lines = [
                f"Drills: {s.drills}   Successful: {s.successes}   Success rate: {int(round(s.success_rate * 100))}%",
                f"Quiz answers: {s.quiz_answers}   Correct: {s.quiz_correct}",
                "",
                "Monthly drills & avg score:",
            ]
            lines += [f"  {m.month}: {m.drills} drill(s), avg {m.avg_score:.1f}" for m in s.monthly[-6:]]
            for line in lines:
                surface.blit(self._font.render(line, True, TEXT_MAIN), (content.x, y))
                y += 28

        _draw_footer(surface, "Improve via quizzes & successful drills  |  R: Refresh  |  Esc: Back")


class EmergencyScreen:
    def __init__(self, app: App) -> None:
        self._app = app
        self._font = _font(28)
        self._small = _font(22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if event.key == pygame.K_p:
            self._app.state.press_panic()
        elif event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        state = self._app.state
        content = _draw_frame(surface, "Emergency Controls", "EMERGENCY", state)

        left_w = content.w // 2
        button = pygame.Rect(content.x, content.y, left_w - 16, 60)
        pressed = state.panic.pressed
        pygame.draw.rect(surface, (230, 50, 50) if pressed else (190, 40, 40), button)
        label = "Emergency Alert Sent!" if pressed else "PANIC BUTTON (P)"
        surface.blit(self._font.render(label, True, TEXT_MAIN), (button.x + 12, button.y + 18))

        y = button.bottom + 12
        if pressed:
            msg = "Broadcast sent to Security, Admin, and Guardians (demo)."
            for line in _wrap_text(self._small, msg, left_w - 16):
                surface.blit(self._small.render(line, True, (254, 202, 202)), (content.x, y))
                y += 20
        y += 8
        surface.blit(self._font.render("Alert Logs", True, TEXT_MAIN), (content.x, y))
        y += 28
        log = state.panic.log()
        if not log:
            surface.blit(self._small.render("No emergency alerts yet.", True, TEXT_MUTED), (content.x, y))
        for line in log[-6:]:
            surface.blit(self._small.render(line, True, TEXT_MUTED), (content.x, y))
            y += 20

        cx, cy = content.x + left_w, content.y
        surface.blit(self._font.render("Quick Contacts", True, TEXT_MAIN), (cx, cy))
        cy += 30
        for contact in state.contacts:
            surface.blit(self._font.render(contact.name, True, TEXT_MAIN), (cx, cy))
            phone = self._font.render(contact.phone, True, TONE_COLORS["good"])
            surface.blit(phone, phone.get_rect(topright=(content.right, cy)))
            surface.blit(self._small.render(contact.category, True, TEXT_MUTED), (cx, cy + 22))
            cy += 46

        _draw_footer(surface, "P: Panic (mock, nothing is sent)  |  Esc: Back")


def build_state(config: AppConfig, scheduler: ClockScheduler) -> PreparednessState:
    return PreparednessState(
        store=JsonFileStore(config.store_path),
        scheduler=scheduler,
        now=datetime.now,
        history_path=config.history_path,
        drill_config=config.drill,
    )


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    config: AppConfig | None = None,
) -> int:
    cfg = config or AppConfig.from_env()
    configure_logging(cfg.log_level)

    pygame.init()
    pygame.display.set_caption("DisasterPrep EDU")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    clock = pygame.time.Clock()

    scheduler = ClockScheduler(RealClock())
    state = build_state(cfg, scheduler)
    app = App(surface=surface, state=state)

    screens: dict[View, Callable[[], Screen]] = {
        View.HOME: lambda: HomeScreen(app),
        View.LEARN: lambda: LearnScreen(app),
        View.DRILL: lambda: DrillScreen(app),
        View.ADMIN: lambda: AdminScreen(app, history_path=cfg.history_path),
        View.EMERGENCY: lambda: EmergencyScreen(app),
    }

    def open_view(view: View) -> None:
        state.select_view(view)
        app.push(screens[view]())

    main_items = [
        MenuItem("Home: Live Campus Feed", lambda: open_view(View.HOME)),
        MenuItem("Learn Safety", lambda: open_view(View.LEARN)),
        MenuItem("Start Drill", lambda: open_view(View.DRILL)),
        MenuItem("Admin Dashboard", lambda: open_view(View.ADMIN)),
        MenuItem("Emergency", lambda: open_view(View.EMERGENCY)),
        MenuItem("Quit", app.quit),
    ]

    app.push(MenuScreen(app, "DisasterPrep EDU", main_items, is_root=True))
    if state.view is not View.HOME:
        # Reopen whichever page was showing when the app last closed.
        app.push(screens[state.view]())

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            scheduler.run_due()
            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        _font.cache_clear()
        pygame.quit()

    _logger.debug("ui loop exited after %d frame(s)", frame)
    return 0
