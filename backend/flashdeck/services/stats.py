from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime

from flashdeck.models.card import Card
from flashdeck.models.schedule import AttemptRecord, DeckStats, ScheduleUpdate
from flashdeck.services.due import due_items


def deck_stats(
    cards: Sequence[Card],
    schedule_by_card_id: Mapping[int, ScheduleUpdate],
    attempts: Iterable[AttemptRecord],
    now: datetime | None = None,
) -> DeckStats:
    """Summary counts for a deck; attempts on cards outside ``cards`` are ignored."""
    card_ids = {card.id for card in cards}
    relevant = [a for a in attempts if a.card_id in card_ids]
    correct = sum(1 for a in relevant if a.correct)

    # No attempts yet: accuracy is 0 rather than undefined
    accuracy = math.floor(100 * correct / len(relevant) + 0.5) if relevant else 0

    return DeckStats(
        total_cards=len(cards),
        due_cards=len(due_items(cards, schedule_by_card_id, now)),
        total_attempts=len(relevant),
        correct_attempts=correct,
        accuracy=accuracy,
    )
