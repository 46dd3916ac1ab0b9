"""
Deck & card router.

Endpoints:
  GET  /decks                  — all decks with card counts
  POST /decks                  — create a deck
  GET  /decks/{id}             — single deck
  PATCH /decks/{id}            — rename a deck
  DELETE /decks/{id}           — delete a deck and all its cards
  GET  /decks/{id}/cards       — cards, optionally filtered by ?tags=a,b, paged
  POST /decks/{id}/cards       — add a card
  GET  /decks/{id}/tags        — distinct tags used in the deck
  GET  /decks/{id}/due         — cards due for review now, in deck order
  GET  /decks/{id}/stats       — total/due cards, attempts and accuracy
"""
from __future__ import annotations

import aiosqlite
from fastapi import APIRouter, Depends, HTTPException, Query

from flashdeck.db.sqlite import (
    create_card,
    create_deck,
    delete_deck,
    get_db,
    get_deck,
    get_schedules_for_cards,
    list_attempts_for_cards,
    list_cards,
    list_deck_tags,
    list_decks,
    rename_deck,
)
from flashdeck.models.card import (
    Card,
    CardCreate,
    CardList,
    Deck,
    DeckCreate,
    DeckList,
    DeckUpdate,
)
from flashdeck.models.schedule import DeckStats
from flashdeck.services.due import due_items
from flashdeck.services.stats import deck_stats

router = APIRouter()


def parse_tags(raw: str | None) -> list[str]:
    return [t.strip() for t in (raw or "").split(",") if t.strip()]


async def _require_deck(db: aiosqlite.Connection, deck_id: int) -> Deck:
    deck = await get_deck(db, deck_id)
    if not deck:
        raise HTTPException(status_code=404, detail="Deck not found")
    return deck


@router.get("", response_model=DeckList)
async def list_all_decks(db: aiosqlite.Connection = Depends(get_db)) -> DeckList:
    items = await list_decks(db)
    return DeckList(items=items, total=len(items))


@router.post("", response_model=Deck, status_code=201)
async def create_new_deck(
    body: DeckCreate, db: aiosqlite.Connection = Depends(get_db)
) -> Deck:
    return await create_deck(db, body.name)


@router.get("/{deck_id}", response_model=Deck)
async def get_one_deck(deck_id: int, db: aiosqlite.Connection = Depends(get_db)) -> Deck:
    return await _require_deck(db, deck_id)


@router.patch("/{deck_id}", response_model=Deck)
async def rename_one_deck(
    deck_id: int,
    body: DeckUpdate,
    db: aiosqlite.Connection = Depends(get_db),
) -> Deck:
    deck = await rename_deck(db, deck_id, body.name)
    if not deck:
        raise HTTPException(status_code=404, detail="Deck not found")
    return deck


@router.delete("/{deck_id}", status_code=204)
async def delete_one_deck(deck_id: int, db: aiosqlite.Connection = Depends(get_db)) -> None:
    deleted = await delete_deck(db, deck_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Deck not found")


@router.get("/{deck_id}/cards", response_model=CardList)
async def list_deck_cards(
    deck_id: int,
    tags: str | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
    db: aiosqlite.Connection = Depends(get_db),
) -> CardList:
    await _require_deck(db, deck_id)
    cards = await list_cards(db, deck_id, parse_tags(tags))
    return CardList(
        items=cards[offset : offset + limit], total=len(cards), offset=offset, limit=limit
    )


@router.post("/{deck_id}/cards", response_model=Card, status_code=201)
async def add_card(
    deck_id: int,
    body: CardCreate,
    db: aiosqlite.Connection = Depends(get_db),
) -> Card:
    await _require_deck(db, deck_id)
    return await create_card(db, deck_id, body)


@router.get("/{deck_id}/tags", response_model=list[str])
async def deck_tags(deck_id: int, db: aiosqlite.Connection = Depends(get_db)) -> list[str]:
    await _require_deck(db, deck_id)
    return await list_deck_tags(db, deck_id)


@router.get("/{deck_id}/due", response_model=CardList)
async def due_cards(
    deck_id: int,
    tags: str | None = Query(default=None),
    db: aiosqlite.Connection = Depends(get_db),
) -> CardList:
    """Cards never reviewed or past their next review date, in deck order."""
    await _require_deck(db, deck_id)
    cards = await list_cards(db, deck_id, parse_tags(tags))
    schedules = await get_schedules_for_cards(db, [c.id for c in cards])
    items = due_items(cards, schedules)
    return CardList(items=items, total=len(items))


@router.get("/{deck_id}/stats", response_model=DeckStats)
async def stats(deck_id: int, db: aiosqlite.Connection = Depends(get_db)) -> DeckStats:
    await _require_deck(db, deck_id)
    cards = await list_cards(db, deck_id)
    card_ids = [c.id for c in cards]
    schedules = await get_schedules_for_cards(db, card_ids)
    attempts = await list_attempts_for_cards(db, card_ids)
    return deck_stats(cards, schedules, attempts)
