"""
Outcome persistence.

  apply_outcome()     — read schedule, run the scheduler, write schedule + attempt.
                        Errors propagate; used by the attempts endpoint.
  persist_outcome()   — best-effort wrapper opening its own connection.
                        Never raises; failures are logged.
  dispatch_outcome()  — fire-and-forget: schedules persist_outcome() as a
                        background task and returns immediately.

The read-modify-write is not transactional. Two overlapping outcomes for the
same card can lose one update (last write wins).
"""
from __future__ import annotations

import logging
from datetime import datetime

import aiosqlite

from flashdeck.db.sqlite import append_attempt, get_db, get_schedule, upsert_schedule
from flashdeck.models.schedule import AttemptRecord, ScheduleRecord
from flashdeck.services.scheduler import as_utc, initialize_schedule, next_schedule, utc_now
from flashdeck.services.task_registry import start_task

logger = logging.getLogger(__name__)


async def apply_outcome(
    db: aiosqlite.Connection,
    card_id: int,
    correct: bool,
    now: datetime | None = None,
) -> ScheduleRecord:
    reference = as_utc(now) if now is not None else utc_now()

    current = await get_schedule(db, card_id)
    if current is None:
        current = initialize_schedule(reference)

    update = next_schedule(
        correct,
        current_interval=current.interval_days,
        current_ease=current.ease_factor,
        current_repetitions=current.repetitions,
        now=reference,
    )
    record = ScheduleRecord(card_id=card_id, **update.model_dump())
    await upsert_schedule(db, record)
    await append_attempt(
        db, AttemptRecord(card_id=card_id, correct=correct, timestamp=reference)
    )
    return record


async def persist_outcome(card_id: int, correct: bool) -> ScheduleRecord | None:
    record = None
    try:
        async for db in get_db():
            record = await apply_outcome(db, card_id, correct)
    except Exception as e:
        logger.warning("Schedule update failed for card %s: %s", card_id, e)
    return record


def dispatch_outcome(card_id: int, correct: bool) -> None:
    """Start persist_outcome() in the background without awaiting it."""
    coro = persist_outcome(card_id, correct)
    try:
        start_task(f"outcome-{card_id}", coro)
    except RuntimeError as e:
        # No running event loop to host the task
        coro.close()
        logger.warning("Could not dispatch outcome for card %s: %s", card_id, e)
