"""
Two-outcome spaced-repetition scheduling.

A simplified SM-2: the learner only reports remembered / forgotten.
  - remembered: repetitions + 1; interval 1, then 6, then interval × ease
  - forgotten:  repetitions reset, interval 1, ease lowered (floor MIN_EASE)

All functions are pure given ``now``. Timestamps are UTC-aware.
"""
from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from flashdeck.models.schedule import ScheduleUpdate

DEFAULT_INTERVAL = 1
DEFAULT_EASE = 2.5
MIN_EASE = 1.3
EASE_PENALTY = 0.2
SECOND_INTERVAL = 6


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normalize to an aware UTC datetime; naive values are read as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def next_schedule(
    correct: bool,
    current_interval: int = DEFAULT_INTERVAL,
    current_ease: float = DEFAULT_EASE,
    current_repetitions: int = 0,
    now: datetime | None = None,
) -> ScheduleUpdate:
    """
    Compute the schedule that follows one outcome.

    Raises ValueError for inputs no stored schedule can hold
    (interval < 1, ease < MIN_EASE, negative repetitions).
    """
    if current_interval < 1:
        raise ValueError(f"interval must be >= 1, got {current_interval}")
    if current_ease < MIN_EASE:
        raise ValueError(f"ease factor must be >= {MIN_EASE}, got {current_ease}")
    if current_repetitions < 0:
        raise ValueError(f"repetitions must be >= 0, got {current_repetitions}")

    if correct:
        repetitions = current_repetitions + 1
        if repetitions == 1:
            interval = DEFAULT_INTERVAL
        elif repetitions == 2:
            interval = SECOND_INTERVAL
        else:
            interval = _round_half_up(current_interval * current_ease)
        ease = current_ease
    else:
        repetitions = 0
        interval = DEFAULT_INTERVAL
        ease = max(MIN_EASE, round(current_ease - EASE_PENALTY, 2))

    reference = as_utc(now) if now is not None else utc_now()
    return ScheduleUpdate(
        interval_days=interval,
        ease_factor=ease,
        repetitions=repetitions,
        next_review_date=reference + timedelta(days=interval),
    )


def is_due(next_review_date: datetime, now: datetime | None = None) -> bool:
    reference = as_utc(now) if now is not None else utc_now()
    return as_utc(next_review_date) <= reference


def initialize_schedule(now: datetime | None = None) -> ScheduleUpdate:
    """Schedule for a card that has never been reviewed: due immediately."""
    return ScheduleUpdate(
        interval_days=DEFAULT_INTERVAL,
        ease_factor=DEFAULT_EASE,
        repetitions=0,
        next_review_date=as_utc(now) if now is not None else utc_now(),
    )
