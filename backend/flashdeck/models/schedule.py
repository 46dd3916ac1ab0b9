from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ScheduleUpdate(BaseModel):
    """Output of the scheduling engine for a single card."""

    interval_days: int = Field(ge=1)
    ease_factor: float = Field(ge=1.3)
    repetitions: int = Field(ge=0)
    next_review_date: datetime


class ScheduleRecord(ScheduleUpdate):
    card_id: int


class AttemptCreate(BaseModel):
    correct: bool


class AttemptRecord(BaseModel):
    card_id: int
    correct: bool
    timestamp: datetime


class DeckStats(BaseModel):
    total_cards: int
    due_cards: int
    total_attempts: int
    correct_attempts: int
    accuracy: int
