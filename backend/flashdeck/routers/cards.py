"""
Card router.

Endpoints:
  GET    /cards/{id}            — single card
  PATCH  /cards/{id}            — edit front / back / tags
  DELETE /cards/{id}            — delete card with its schedule and attempts
  POST   /cards/{id}/attempts   — record remembered / forgotten, return new schedule
  GET    /cards/{id}/schedule   — stored schedule, null when never reviewed
"""
from __future__ import annotations

import aiosqlite
from fastapi import APIRouter, Depends, HTTPException

from flashdeck.db.sqlite import delete_card, get_card, get_db, get_schedule, update_card
from flashdeck.models.card import Card, CardUpdate
from flashdeck.models.schedule import AttemptCreate, ScheduleRecord
from flashdeck.services.review import apply_outcome

router = APIRouter()


@router.get("/{card_id}", response_model=Card)
async def get_one_card(
    card_id: int,
    db: aiosqlite.Connection = Depends(get_db),
) -> Card:
    card = await get_card(db, card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Card not found")
    return card


@router.patch("/{card_id}", response_model=Card)
async def edit_card(
    card_id: int,
    body: CardUpdate,
    db: aiosqlite.Connection = Depends(get_db),
) -> Card:
    updated = await update_card(db, card_id, body)
    if not updated:
        raise HTTPException(status_code=404, detail="Card not found")
    return updated


@router.delete("/{card_id}", status_code=204)
async def remove_card(
    card_id: int,
    db: aiosqlite.Connection = Depends(get_db),
) -> None:
    deleted = await delete_card(db, card_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Card not found")


@router.post("/{card_id}/attempts", response_model=ScheduleRecord, status_code=201)
async def record_attempt(
    card_id: int,
    body: AttemptCreate,
    db: aiosqlite.Connection = Depends(get_db),
) -> ScheduleRecord:
    """Record one outcome for a card and return its new schedule."""
    card = await get_card(db, card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Card not found")
    try:
        return await apply_outcome(db, card_id, body.correct)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


@router.get("/{card_id}/schedule", response_model=ScheduleRecord | None)
async def card_schedule(
    card_id: int,
    db: aiosqlite.Connection = Depends(get_db),
) -> ScheduleRecord | None:
    """Current schedule of a card; null when it has never been reviewed."""
    card = await get_card(db, card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Card not found")
    return await get_schedule(db, card_id)
