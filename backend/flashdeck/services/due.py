from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime

from flashdeck.models.card import Card
from flashdeck.models.schedule import ScheduleUpdate
from flashdeck.services.scheduler import as_utc, is_due, utc_now


def due_items(
    cards: Iterable[Card],
    schedule_by_card_id: Mapping[int, ScheduleUpdate],
    now: datetime | None = None,
) -> list[Card]:
    """
    Return the cards due at ``now``, in input order.

    A card without a schedule has never been reviewed and is always due.
    """
    reference = as_utc(now) if now is not None else utc_now()
    due: list[Card] = []
    for card in cards:
        schedule = schedule_by_card_id.get(card.id)
        if schedule is None or is_due(schedule.next_review_date, reference):
            due.append(card)
    return due
