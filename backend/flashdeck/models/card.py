from __future__ import annotations

from pydantic import BaseModel, Field


class Deck(BaseModel):
    id: int
    name: str
    card_count: int = 0
    created_at: str


class DeckCreate(BaseModel):
    name: str = Field(min_length=1)


class DeckUpdate(BaseModel):
    name: str = Field(min_length=1)


class DeckList(BaseModel):
    items: list[Deck]
    total: int


class Card(BaseModel):
    id: int
    deck_id: int
    front_text: str
    back_text: str
    tags: list[str] = []


class CardCreate(BaseModel):
    front_text: str = Field(min_length=1)
    back_text: str = Field(min_length=1)
    tags: list[str] = []


class CardUpdate(BaseModel):
    front_text: str | None = Field(default=None, min_length=1)
    back_text: str | None = Field(default=None, min_length=1)
    tags: list[str] | None = None


class CardList(BaseModel):
    items: list[Card]
    total: int
    offset: int = 0
    limit: int | None = None
