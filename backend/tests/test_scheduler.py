from datetime import datetime, timedelta, timezone

import pytest

from flashdeck.services.scheduler import (
    DEFAULT_EASE,
    MIN_EASE,
    initialize_schedule,
    is_due,
    next_schedule,
)


def test_correct_streak_interval_progression(now):
    interval, ease, reps = 1, DEFAULT_EASE, 0
    seen = []
    for _ in range(4):
        result = next_schedule(True, interval, ease, reps, now=now)
        assert result.repetitions == reps + 1
        assert result.ease_factor == DEFAULT_EASE
        interval, ease, reps = result.interval_days, result.ease_factor, result.repetitions
        seen.append(interval)
    assert seen == [1, 6, 15, 38]


def test_half_intervals_round_up(now):
    # 5 × 2.5 = 12.5
    result = next_schedule(True, 5, 2.5, 2, now=now)
    assert result.interval_days == 13


@pytest.mark.parametrize("reps", [0, 1, 2, 7])
def test_failure_resets_regardless_of_history(now, reps):
    result = next_schedule(False, 38, 2.5, reps, now=now)
    assert result.repetitions == 0
    assert result.interval_days == 1
    assert result.ease_factor == pytest.approx(2.3)


def test_failure_ease_is_floored(now):
    result = next_schedule(False, 1, 1.4, 0, now=now)
    assert result.ease_factor == MIN_EASE
    again = next_schedule(False, 1, result.ease_factor, 0, now=now)
    assert again.ease_factor == MIN_EASE


def test_next_review_date_is_whole_days_from_now(now):
    result = next_schedule(True, 1, 2.5, 1, now=now)
    assert result.next_review_date == now + timedelta(days=6)
    assert result.next_review_date.tzinfo is not None


def test_naive_now_is_read_as_utc():
    naive = datetime(2024, 1, 1, 8, 30)
    result = next_schedule(True, now=naive)
    assert result.next_review_date == datetime(2024, 1, 2, 8, 30, tzinfo=timezone.utc)


def test_end_to_end_four_attempts(now):
    state = initialize_schedule(now)
    expected = [(True, 1, 1), (True, 6, 2), (True, 15, 3), (False, 1, 0)]
    for correct, interval, reps in expected:
        state = next_schedule(
            correct, state.interval_days, state.ease_factor, state.repetitions, now=now
        )
        assert (state.interval_days, state.repetitions) == (interval, reps)
    assert state.ease_factor == pytest.approx(2.3)


@pytest.mark.parametrize(
    "interval, ease, reps",
    [(0, 2.5, 0), (-3, 2.5, 0), (1, 1.2, 0), (1, 0.5, 0), (1, 2.5, -1)],
)
def test_invalid_inputs_are_rejected(now, interval, ease, reps):
    with pytest.raises(ValueError):
        next_schedule(True, interval, ease, reps, now=now)


def test_is_due_boundary(now):
    assert is_due(now, now)
    assert is_due(now - timedelta(seconds=1), now)
    assert not is_due(now + timedelta(seconds=1), now)


def test_is_due_compares_across_timezones(now):
    plus_two = timezone(timedelta(hours=2))
    same_instant = now.astimezone(plus_two)
    assert is_due(same_instant, now)
    assert is_due(now.replace(tzinfo=None), now)


def test_initialize_schedule_is_due_immediately(now):
    fresh = initialize_schedule(now)
    assert fresh.interval_days == 1
    assert fresh.ease_factor == 2.5
    assert fresh.repetitions == 0
    assert fresh.next_review_date == now
    assert is_due(fresh.next_review_date, now)
