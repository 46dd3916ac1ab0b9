from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from flashdeck.models.card import Card


class Direction(str, Enum):
    FORWARD = "forward"
    REVERSE = "reverse"
    RANDOM = "random"


class SessionState(str, Enum):
    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class CardResult(BaseModel):
    card_id: int
    correct: bool


class SessionStats(BaseModel):
    total_cards: int
    correct_count: int
    missed_count: int


class SessionStart(BaseModel):
    deck_id: int
    direction: Direction = Direction.FORWARD
    tags: list[str] = []
    limit: int | None = Field(default=None, ge=1)
    due_only: bool = False
    shuffle: bool = True


class ResultSubmit(BaseModel):
    correct: bool


class SessionView(BaseModel):
    id: str
    deck_id: int
    state: SessionState
    direction: Direction
    position: int
    length: int
    current_card: Card | None
    prompt_text: str
    answer_text: str
    is_complete: bool
    stats: SessionStats
    results: list[CardResult]
