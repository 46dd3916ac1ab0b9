"""
Practice session runtime.

A PracticeSession walks one learner through an ordered list of cards:

  Idle ──start()──▶ InProgress ──last record_result()──▶ Complete
    ▲                                                        │
    └──────────────────────────reset()───────────────────────┘

Sessions are plain objects owned by whoever drives them. The HTTP runtime
keeps its live sessions in a SessionRegistry attached to the application.
"""
from __future__ import annotations

import logging
import random
import uuid
from collections import OrderedDict
from collections.abc import Callable, Mapping, Sequence

from flashdeck.models.card import Card
from flashdeck.models.schedule import ScheduleUpdate
from flashdeck.models.session import CardResult, Direction, SessionState, SessionStats
from flashdeck.services.due import due_items

logger = logging.getLogger(__name__)

# Called with (card_id, correct) after every recorded result. Must not block.
OutcomeDispatcher = Callable[[int, bool], None]

_SIDES = (Direction.FORWARD, Direction.REVERSE)


class PracticeSession:
    def __init__(
        self,
        dispatcher: OutcomeDispatcher | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._rng = rng or random.Random()
        self._cards: list[Card] = []
        self._direction = Direction.FORWARD
        self._active_direction = Direction.FORWARD
        self._position = 0
        self._results: list[CardResult] = []
        self._started = False

    # --- lifecycle ---

    def start(self, cards: Sequence[Card], direction: Direction = Direction.FORWARD) -> None:
        if not cards:
            raise ValueError("cannot start a practice session without cards")
        direction = Direction(direction)

        self._cards = list(cards)
        self._direction = direction
        self._position = 0
        self._results = []
        self._started = True
        self._active_direction = self._resolve_direction()

    def reset(self) -> None:
        self._cards = []
        self._direction = Direction.FORWARD
        self._active_direction = Direction.FORWARD
        self._position = 0
        self._results = []
        self._started = False

    def record_result(self, correct: bool) -> None:
        """Record the outcome for the current card and advance.

        Does nothing when there is no current card (not started, or complete).
        """
        card = self.current_card
        if card is None:
            return

        self._results.append(CardResult(card_id=card.id, correct=correct))
        self._position += 1
        self._dispatch(card.id, correct)

        if not self.is_complete:
            self._active_direction = self._resolve_direction()

    # --- read side ---

    @property
    def state(self) -> SessionState:
        if not self._started:
            return SessionState.IDLE
        if self.is_complete:
            return SessionState.COMPLETE
        return SessionState.IN_PROGRESS

    @property
    def direction(self) -> Direction:
        return self._direction

    @property
    def active_direction(self) -> Direction:
        return self._active_direction

    @property
    def position(self) -> int:
        return self._position

    @property
    def length(self) -> int:
        return len(self._cards)

    @property
    def cards(self) -> list[Card]:
        return list(self._cards)

    @property
    def results(self) -> list[CardResult]:
        return list(self._results)

    @property
    def current_card(self) -> Card | None:
        if self._position >= len(self._cards):
            return None
        return self._cards[self._position]

    @property
    def prompt_text(self) -> str:
        card = self.current_card
        if card is None:
            return ""
        return card.front_text if self._active_direction == Direction.FORWARD else card.back_text

    @property
    def answer_text(self) -> str:
        card = self.current_card
        if card is None:
            return ""
        return card.back_text if self._active_direction == Direction.FORWARD else card.front_text

    @property
    def is_complete(self) -> bool:
        return self._started and self._position == len(self._cards)

    @property
    def stats(self) -> SessionStats:
        correct = sum(1 for r in self._results if r.correct)
        return SessionStats(
            total_cards=len(self._results),
            correct_count=correct,
            missed_count=len(self._results) - correct,
        )

    # --- internals ---

    def _resolve_direction(self) -> Direction:
        if self._direction == Direction.RANDOM:
            return self._rng.choice(_SIDES)
        return self._direction

    def _dispatch(self, card_id: int, correct: bool) -> None:
        if self._dispatcher is None:
            return
        try:
            self._dispatcher(card_id, correct)
        except Exception as e:
            logger.warning("Outcome dispatch failed for card %s: %s", card_id, e)


def build_session_cards(
    cards: Sequence[Card],
    schedule_by_card_id: Mapping[int, ScheduleUpdate] | None = None,
    due_only: bool = False,
    limit: int | None = None,
    shuffle: bool = False,
    rng: random.Random | None = None,
) -> list[Card]:
    """Prepare the ordered card list a session is started with.

    Order of operations: due filter, shuffle, then truncation to ``limit``.
    """
    selected = list(cards)
    if due_only:
        selected = due_items(selected, schedule_by_card_id or {})
    if shuffle:
        (rng or random.Random()).shuffle(selected)
    if limit is not None:
        selected = selected[:limit]
    return selected


class SessionRegistry:
    """Live sessions keyed by id. The oldest session is evicted past ``max_sessions``."""

    def __init__(self, max_sessions: int = 256) -> None:
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[str, tuple[int, PracticeSession]] = OrderedDict()

    def add(self, deck_id: int, session: PracticeSession) -> str:
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = (deck_id, session)
        while len(self._sessions) > self.max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.info("Evicted practice session %s", evicted)
        return session_id

    def get(self, session_id: str) -> tuple[int, PracticeSession] | None:
        return self._sessions.get(session_id)

    def discard(self, session_id: str) -> bool:
        entry = self._sessions.pop(session_id, None)
        if entry is None:
            return False
        entry[1].reset()
        return True

    def __len__(self) -> int:
        return len(self._sessions)
