"""Hazard micro-quizzes: single-choice questions scored against a fixed key."""

from __future__ import annotations

import logging
from dataclasses import dataclass

_logger = logging.getLogger(__name__)

CORRECT_DELTA = 5
INCORRECT_DELTA = -2


@dataclass(frozen=True, slots=True)
class QuizOption:
    text: str
    correct: bool
    explanation: str


@dataclass(frozen=True, slots=True)
class QuizQuestion:
    hazard: str
    prompt: str
    options: tuple[QuizOption, ...]

    def __post_init__(self) -> None:
        if len(self.options) < 2:
            raise ValueError("a question needs at least two options")
        if sum(1 for o in self.options if o.correct) != 1:
            raise ValueError("exactly one option must be correct")

    @property
    def correct_index(self) -> int:
        return next(i for i, o in enumerate(self.options) if o.correct)


@dataclass(frozen=True, slots=True)
class QuizResult:
    option_index: int
    correct: bool
    explanation: str
    delta: int


class QuizAttempt:
    """One user answering one question. Accepts at most one answer."""

    def __init__(self, question: QuizQuestion) -> None:
        self._question = question
        self._chosen: int | None = None
        self._result: QuizResult | None = None

    @property
    def question(self) -> QuizQuestion:
        return self._question

    @property
    def chosen_index(self) -> int | None:
        return self._chosen

    @property
    def resolved(self) -> bool:
        return self._result is not None

    @property
    def result(self) -> QuizResult | None:
        return self._result

    def explanation_for(self, option_index: int) -> str | None:
        """Explanations stay hidden for every option except the chosen one."""

        if self._chosen is None or option_index != self._chosen:
            return None
        return self._question.options[option_index].explanation

    def answer(self, option_index: int) -> QuizResult | None:
        if self._result is not None:
            return self._result
        if not (0 <= option_index < len(self._question.options)):
            return None

        option = self._question.options[option_index]
        self._chosen = option_index
        self._result = QuizResult(
            option_index=option_index,
            correct=option.correct,
            explanation=option.explanation,
            delta=CORRECT_DELTA if option.correct else INCORRECT_DELTA,
        )
        _logger.debug(
            "quiz %s answered option %d (correct=%s)", self._question.hazard, option_index, option.correct
        )
        return self._result


def answer(attempt: QuizAttempt, option_index: int) -> QuizResult | None:
    """Score an answer. Repeat calls return the first result unchanged."""

    return attempt.answer(option_index)
