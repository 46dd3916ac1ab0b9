import asyncio
from datetime import timedelta

import aiosqlite
import pytest

from flashdeck.db import sqlite as db_sqlite
from flashdeck.db.sqlite import (
    create_card,
    create_deck,
    get_db,
    get_schedule,
    init_sqlite,
    list_attempts_for_cards,
)
from flashdeck.models.card import CardCreate
from flashdeck.services import review, task_registry
from flashdeck.services.review import apply_outcome, dispatch_outcome, persist_outcome


async def _setup(data_dir) -> int:
    data_dir.mkdir(parents=True, exist_ok=True)
    await init_sqlite(data_dir)
    async for db in get_db():
        deck = await create_deck(db, "verbs")
        card = await create_card(
            db, deck.id, CardCreate(front_text="comer", back_text="to eat")
        )
        return card.id


def test_apply_outcome_creates_then_replaces_schedule(data_dir, now):
    async def scenario():
        card_id = await _setup(data_dir)
        async for db in get_db():
            assert await get_schedule(db, card_id) is None

            first = await apply_outcome(db, card_id, True, now=now)
            second = await apply_outcome(db, card_id, True, now=now)
            third = await apply_outcome(db, card_id, True, now=now)
            fourth = await apply_outcome(db, card_id, False, now=now)

            stored = await get_schedule(db, card_id)
            attempts = await list_attempts_for_cards(db, [card_id])
            return [first, second, third, fourth], stored, attempts

    records, stored, attempts = asyncio.run(scenario())

    assert [(r.interval_days, r.repetitions) for r in records] == [
        (1, 1),
        (6, 2),
        (15, 3),
        (1, 0),
    ]
    assert stored == records[-1]
    assert stored.ease_factor == pytest.approx(2.3)
    assert stored.next_review_date == now + timedelta(days=1)
    assert [a.correct for a in attempts] == [True, True, True, False]


def test_persist_outcome_swallows_failures(data_dir, monkeypatch, caplog):
    async def boom(*args, **kwargs):
        raise aiosqlite.OperationalError("disk I/O error")

    async def scenario():
        card_id = await _setup(data_dir)
        monkeypatch.setattr(review, "upsert_schedule", boom)
        return await persist_outcome(card_id, True)

    assert asyncio.run(scenario()) is None
    assert "Schedule update failed" in caplog.text


def test_persist_outcome_without_database(monkeypatch, caplog):
    monkeypatch.setattr(db_sqlite, "_db_path", None)
    assert asyncio.run(persist_outcome(1, True)) is None
    assert "Schedule update failed" in caplog.text


def test_dispatch_outcome_runs_in_background(data_dir):
    async def scenario():
        card_id = await _setup(data_dir)
        dispatch_outcome(card_id, True)
        # Returned before the write happened
        assert task_registry.pending_count() >= 1
        await task_registry.wait_for_pending(timeout=5)
        async for db in get_db():
            return await get_schedule(db, card_id)

    stored = asyncio.run(scenario())
    assert stored is not None
    assert stored.repetitions == 1


def test_dispatch_outcome_without_loop_is_logged(caplog):
    dispatch_outcome(1, True)
    assert "Could not dispatch outcome" in caplog.text
