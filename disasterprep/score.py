from __future__ import annotations

import math

MIN_SCORE = 0
MAX_SCORE = 100
DEFAULT_SCORE = 42


def apply_delta(current: int, delta: int) -> int:
    """Return current + delta clamped to [MIN_SCORE, MAX_SCORE].

    Every score change in the app goes through here.
    """

    value = int(current) + int(delta)
    return MIN_SCORE if value <= MIN_SCORE else MAX_SCORE if value >= MAX_SCORE else value


def coerce_score(value: object, default: int = DEFAULT_SCORE) -> int:
    """Turn a persisted value into a valid score."""

    # bool is an int subclass but never a meaningful score.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return apply_delta(default, 0)
    if not math.isfinite(value):
        return apply_delta(default, 0)
    return apply_delta(int(value), 0)


def score_tone(score: int) -> str:
    if score >= 80:
        return "good"
    if score >= 50:
        return "fair"
    return "low"
