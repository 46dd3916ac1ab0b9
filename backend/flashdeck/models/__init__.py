from flashdeck.models.card import (
    Card,
    CardCreate,
    CardList,
    CardUpdate,
    Deck,
    DeckCreate,
    DeckList,
    DeckUpdate,
)
from flashdeck.models.schedule import (
    AttemptCreate,
    AttemptRecord,
    DeckStats,
    ScheduleRecord,
    ScheduleUpdate,
)
from flashdeck.models.session import (
    CardResult,
    Direction,
    ResultSubmit,
    SessionStart,
    SessionState,
    SessionStats,
    SessionView,
)

__all__ = [
    "AttemptCreate",
    "AttemptRecord",
    "Card",
    "CardCreate",
    "CardList",
    "CardResult",
    "CardUpdate",
    "Deck",
    "DeckCreate",
    "DeckList",
    "DeckStats",
    "DeckUpdate",
    "Direction",
    "ResultSubmit",
    "ScheduleRecord",
    "ScheduleUpdate",
    "SessionStart",
    "SessionState",
    "SessionStats",
    "SessionView",
]
