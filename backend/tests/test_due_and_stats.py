from datetime import timedelta

from conftest import make_card

from flashdeck.models.schedule import AttemptRecord, ScheduleUpdate
from flashdeck.services.due import due_items
from flashdeck.services.stats import deck_stats


def _schedule(next_review):
    return ScheduleUpdate(
        interval_days=1, ease_factor=2.5, repetitions=1, next_review_date=next_review
    )


def test_due_items_keeps_unscheduled_and_past_in_order(now):
    cards = [make_card(1), make_card(2), make_card(3)]
    schedules = {
        2: _schedule(now - timedelta(days=1)),
        3: _schedule(now + timedelta(days=1)),
    }
    assert [c.id for c in due_items(cards, schedules, now)] == [1, 2]


def test_due_items_does_not_reorder(now):
    cards = [make_card(5), make_card(2), make_card(9)]
    assert [c.id for c in due_items(cards, {}, now)] == [5, 2, 9]


def test_due_items_boundary_counts_as_due(now):
    cards = [make_card(1)]
    assert due_items(cards, {1: _schedule(now)}, now) == cards


def test_deck_stats_without_attempts(now):
    cards = [make_card(1), make_card(2)]
    stats = deck_stats(cards, {}, [], now)
    assert stats.total_cards == 2
    assert stats.due_cards == 2
    assert stats.total_attempts == 0
    assert stats.correct_attempts == 0
    assert stats.accuracy == 0


def test_deck_stats_counts_only_deck_attempts(now):
    cards = [make_card(1), make_card(2), make_card(3)]
    schedules = {3: _schedule(now + timedelta(days=6))}
    attempts = [
        AttemptRecord(card_id=1, correct=True, timestamp=now),
        AttemptRecord(card_id=2, correct=False, timestamp=now),
        AttemptRecord(card_id=3, correct=True, timestamp=now),
        AttemptRecord(card_id=99, correct=False, timestamp=now),
    ]
    stats = deck_stats(cards, schedules, attempts, now)
    assert stats.model_dump() == {
        "total_cards": 3,
        "due_cards": 2,
        "total_attempts": 3,
        "correct_attempts": 2,
        "accuracy": 67,
    }


def test_deck_stats_accuracy_rounds_half_up(now):
    cards = [make_card(1)]
    attempts = [
        AttemptRecord(card_id=1, correct=i < 1, timestamp=now) for i in range(8)
    ]
    # 12.5% → 13
    assert deck_stats(cards, {}, attempts, now).accuracy == 13
