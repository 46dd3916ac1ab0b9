"""
Practice session router.

Endpoints:
  POST   /sessions                — prepare cards for a deck and start a session
  GET    /sessions/{id}           — current prompt/answer, progress and stats
  POST   /sessions/{id}/results   — record remembered / forgotten for the current card
  DELETE /sessions/{id}           — reset and discard the session

Recording a result persists the new schedule in the background; the response
does not wait for it and a failed write never changes the session.
"""
from __future__ import annotations

import logging

import aiosqlite
from fastapi import APIRouter, Depends, HTTPException, Request

from flashdeck.config import settings
from flashdeck.db.sqlite import get_db, get_deck, get_schedules_for_cards, list_cards
from flashdeck.models.session import ResultSubmit, SessionStart, SessionView
from flashdeck.services.review import dispatch_outcome
from flashdeck.services.session import PracticeSession, SessionRegistry, build_session_cards

logger = logging.getLogger(__name__)
router = APIRouter()


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def _view(session_id: str, deck_id: int, session: PracticeSession) -> SessionView:
    return SessionView(
        id=session_id,
        deck_id=deck_id,
        state=session.state,
        direction=session.direction,
        position=session.position,
        length=session.length,
        current_card=session.current_card,
        prompt_text=session.prompt_text,
        answer_text=session.answer_text,
        is_complete=session.is_complete,
        stats=session.stats,
        results=session.results,
    )


def _require_session(
    registry: SessionRegistry, session_id: str
) -> tuple[int, PracticeSession]:
    entry = registry.get(session_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return entry


@router.post("", response_model=SessionView, status_code=201)
async def start_session(
    body: SessionStart,
    registry: SessionRegistry = Depends(get_registry),
    db: aiosqlite.Connection = Depends(get_db),
) -> SessionView:
    deck = await get_deck(db, body.deck_id)
    if not deck:
        raise HTTPException(status_code=404, detail="Deck not found")

    cards = await list_cards(db, body.deck_id, body.tags)
    schedules = (
        await get_schedules_for_cards(db, [c.id for c in cards]) if body.due_only else {}
    )
    selected = build_session_cards(
        cards,
        schedules,
        due_only=body.due_only,
        limit=body.limit or settings.session_limit_default,
        shuffle=body.shuffle,
    )

    session = PracticeSession(dispatcher=dispatch_outcome)
    try:
        session.start(selected, body.direction)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    session_id = registry.add(body.deck_id, session)
    logger.info(
        "Started session %s on deck %s (%d cards, %s)",
        session_id,
        body.deck_id,
        session.length,
        body.direction.value,
    )
    return _view(session_id, body.deck_id, session)


@router.get("/{session_id}", response_model=SessionView)
async def get_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionView:
    deck_id, session = _require_session(registry, session_id)
    return _view(session_id, deck_id, session)


@router.post("/{session_id}/results", response_model=SessionView)
async def submit_result(
    session_id: str,
    body: ResultSubmit,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionView:
    """Stale submissions after completion are accepted and ignored."""
    deck_id, session = _require_session(registry, session_id)
    session.record_result(body.correct)
    return _view(session_id, deck_id, session)


@router.delete("/{session_id}", status_code=204)
async def end_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> None:
    if not registry.discard(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
