from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

from flashdeck.config import settings
from flashdeck.models.card import Card, CardCreate, CardUpdate, Deck
from flashdeck.models.schedule import AttemptRecord, ScheduleRecord

_db_path: Path | None = None

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA foreign_keys=ON;

CREATE TABLE IF NOT EXISTS decks (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT NOT NULL,
    created_at  TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS cards (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    deck_id     INTEGER NOT NULL REFERENCES decks(id) ON DELETE CASCADE,
    front_text  TEXT NOT NULL,
    back_text   TEXT NOT NULL,
    tags        TEXT DEFAULT '',
    created_at  TEXT NOT NULL DEFAULT (datetime('now'))
);
CREATE INDEX IF NOT EXISTS idx_cards_deck_id ON cards(deck_id);

CREATE TABLE IF NOT EXISTS card_attempts (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    card_id     INTEGER NOT NULL REFERENCES cards(id) ON DELETE CASCADE,
    correct     INTEGER NOT NULL,
    created_at  TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_card_attempts_card_id ON card_attempts(card_id);
CREATE INDEX IF NOT EXISTS idx_card_attempts_created_at ON card_attempts(created_at);

CREATE TABLE IF NOT EXISTS card_schedule (
    card_id          INTEGER PRIMARY KEY REFERENCES cards(id) ON DELETE CASCADE,
    next_review_date TEXT NOT NULL,
    interval_days    INTEGER NOT NULL DEFAULT 1,
    ease_factor      REAL NOT NULL DEFAULT 2.5,
    repetitions      INTEGER NOT NULL DEFAULT 0,
    updated_at       TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_card_schedule_next_review ON card_schedule(next_review_date);

CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);
INSERT OR IGNORE INTO schema_version(version) VALUES (1);
"""

DEMO_DECK = (
    "Spanish basics",
    [
        ("hola", "hello", "greetings"),
        ("adiós", "goodbye", "greetings"),
        ("gracias", "thank you", "greetings,courtesy"),
        ("manzana", "apple", "food"),
        ("pan", "bread", "food"),
        ("agua", "water", "food,drinks"),
    ],
)


async def init_sqlite(data_dir: Path) -> None:
    global _db_path
    _db_path = data_dir / settings.sqlite_filename
    async with aiosqlite.connect(_db_path) as db:
        await db.executescript(SCHEMA_SQL)
        await db.commit()


async def get_db() -> AsyncIterator[aiosqlite.Connection]:
    assert _db_path is not None, "SQLite not initialized"
    async with aiosqlite.connect(_db_path) as db:
        db.row_factory = aiosqlite.Row
        await db.execute("PRAGMA foreign_keys=ON")
        yield db


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _split_tags(raw: str | None) -> list[str]:
    return [t.strip() for t in (raw or "").split(",") if t.strip()]


def _join_tags(tags: list[str]) -> str:
    return ",".join(t.strip() for t in tags if t.strip())


def _parse_ts(raw: str) -> datetime:
    value = datetime.fromisoformat(raw)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


# --- Decks ---


def _row_to_deck(row: aiosqlite.Row) -> Deck:
    return Deck(**dict(row))


async def create_deck(db: aiosqlite.Connection, name: str) -> Deck:
    cursor = await db.execute(
        "INSERT INTO decks (name, created_at) VALUES (?, ?)", (name, _now())
    )
    await db.commit()
    return await get_deck(db, cursor.lastrowid)  # type: ignore[arg-type,return-value]


async def get_deck(db: aiosqlite.Connection, deck_id: int) -> Deck | None:
    cursor = await db.execute(
        """SELECT d.id, d.name, d.created_at, COUNT(c.id) AS card_count
           FROM decks d LEFT JOIN cards c ON c.deck_id = d.id
           WHERE d.id = ?
           GROUP BY d.id""",
        (deck_id,),
    )
    row = await cursor.fetchone()
    return _row_to_deck(row) if row else None


async def list_decks(db: aiosqlite.Connection) -> list[Deck]:
    cursor = await db.execute(
        """SELECT d.id, d.name, d.created_at, COUNT(c.id) AS card_count
           FROM decks d LEFT JOIN cards c ON c.deck_id = d.id
           GROUP BY d.id
           ORDER BY d.name ASC"""
    )
    rows = await cursor.fetchall()
    return [_row_to_deck(r) for r in rows]


async def rename_deck(
    db: aiosqlite.Connection, deck_id: int, name: str
) -> Deck | None:
    cursor = await db.execute(
        "UPDATE decks SET name = ? WHERE id = ?", (name, deck_id)
    )
    await db.commit()
    if (cursor.rowcount or 0) == 0:
        return None
    return await get_deck(db, deck_id)


async def delete_deck(db: aiosqlite.Connection, deck_id: int) -> bool:
    cursor = await db.execute("DELETE FROM decks WHERE id = ?", (deck_id,))
    await db.commit()
    return (cursor.rowcount or 0) > 0


# --- Cards ---


def _row_to_card(row: aiosqlite.Row) -> Card:
    return Card(
        id=row["id"],
        deck_id=row["deck_id"],
        front_text=row["front_text"],
        back_text=row["back_text"],
        tags=_split_tags(row["tags"]),
    )


async def create_card(
    db: aiosqlite.Connection, deck_id: int, card: CardCreate
) -> Card:
    cursor = await db.execute(
        """INSERT INTO cards (deck_id, front_text, back_text, tags, created_at)
           VALUES (?, ?, ?, ?, ?)""",
        (deck_id, card.front_text, card.back_text, _join_tags(card.tags), _now()),
    )
    await db.commit()
    return await get_card(db, cursor.lastrowid)  # type: ignore[arg-type,return-value]


async def get_card(db: aiosqlite.Connection, card_id: int) -> Card | None:
    cursor = await db.execute("SELECT * FROM cards WHERE id = ?", (card_id,))
    row = await cursor.fetchone()
    return _row_to_card(row) if row else None


async def list_cards(
    db: aiosqlite.Connection,
    deck_id: int,
    tags: list[str] | None = None,
) -> list[Card]:
    """Cards of a deck in creation order. With ``tags``, keep cards carrying any of them."""
    cursor = await db.execute(
        "SELECT * FROM cards WHERE deck_id = ? ORDER BY id ASC", (deck_id,)
    )
    rows = await cursor.fetchall()
    cards = [_row_to_card(r) for r in rows]
    if tags:
        wanted = {t.strip() for t in tags if t.strip()}
        cards = [c for c in cards if wanted.intersection(c.tags)]
    return cards


async def update_card(
    db: aiosqlite.Connection,
    card_id: int,
    update: CardUpdate,
) -> Card | None:
    card = await get_card(db, card_id)
    if not card:
        return None
    new_front = update.front_text if update.front_text is not None else card.front_text
    new_back = update.back_text if update.back_text is not None else card.back_text
    new_tags = update.tags if update.tags is not None else card.tags
    await db.execute(
        "UPDATE cards SET front_text = ?, back_text = ?, tags = ? WHERE id = ?",
        (new_front, new_back, _join_tags(new_tags), card_id),
    )
    await db.commit()
    return await get_card(db, card_id)


async def delete_card(db: aiosqlite.Connection, card_id: int) -> bool:
    """Delete a card; its schedule and attempts go with it (ON DELETE CASCADE)."""
    cursor = await db.execute("DELETE FROM cards WHERE id = ?", (card_id,))
    await db.commit()
    return (cursor.rowcount or 0) > 0


async def list_deck_tags(db: aiosqlite.Connection, deck_id: int) -> list[str]:
    cursor = await db.execute(
        "SELECT tags FROM cards WHERE deck_id = ? AND tags != ''", (deck_id,)
    )
    rows = await cursor.fetchall()
    found: set[str] = set()
    for row in rows:
        found.update(_split_tags(row[0]))
    return sorted(found)


# --- Schedules ---


def _row_to_schedule(row: aiosqlite.Row) -> ScheduleRecord:
    return ScheduleRecord(
        card_id=row["card_id"],
        interval_days=row["interval_days"],
        ease_factor=row["ease_factor"],
        repetitions=row["repetitions"],
        next_review_date=_parse_ts(row["next_review_date"]),
    )


async def get_schedule(
    db: aiosqlite.Connection, card_id: int
) -> ScheduleRecord | None:
    cursor = await db.execute(
        "SELECT * FROM card_schedule WHERE card_id = ?", (card_id,)
    )
    row = await cursor.fetchone()
    return _row_to_schedule(row) if row else None


async def get_schedules_for_cards(
    db: aiosqlite.Connection, card_ids: list[int]
) -> dict[int, ScheduleRecord]:
    if not card_ids:
        return {}
    placeholders = ", ".join("?" for _ in card_ids)
    cursor = await db.execute(
        f"SELECT * FROM card_schedule WHERE card_id IN ({placeholders})",  # noqa: S608
        card_ids,
    )
    rows = await cursor.fetchall()
    return {row["card_id"]: _row_to_schedule(row) for row in rows}


async def upsert_schedule(
    db: aiosqlite.Connection, record: ScheduleRecord
) -> ScheduleRecord:
    """Replace the card's schedule wholesale (last write wins)."""
    await db.execute(
        """INSERT INTO card_schedule
           (card_id, next_review_date, interval_days, ease_factor, repetitions, updated_at)
           VALUES (?, ?, ?, ?, ?, ?)
           ON CONFLICT(card_id) DO UPDATE SET
               next_review_date = excluded.next_review_date,
               interval_days = excluded.interval_days,
               ease_factor = excluded.ease_factor,
               repetitions = excluded.repetitions,
               updated_at = excluded.updated_at""",
        (
            record.card_id,
            record.next_review_date.isoformat(),
            record.interval_days,
            record.ease_factor,
            record.repetitions,
            _now(),
        ),
    )
    await db.commit()
    return record


# --- Attempt log ---


async def append_attempt(db: aiosqlite.Connection, attempt: AttemptRecord) -> None:
    await db.execute(
        "INSERT INTO card_attempts (card_id, correct, created_at) VALUES (?, ?, ?)",
        (attempt.card_id, int(attempt.correct), attempt.timestamp.isoformat()),
    )
    await db.commit()


async def list_attempts_for_cards(
    db: aiosqlite.Connection, card_ids: list[int]
) -> list[AttemptRecord]:
    if not card_ids:
        return []
    placeholders = ", ".join("?" for _ in card_ids)
    cursor = await db.execute(
        f"""SELECT card_id, correct, created_at FROM card_attempts
            WHERE card_id IN ({placeholders})
            ORDER BY created_at ASC, id ASC""",  # noqa: S608
        card_ids,
    )
    rows = await cursor.fetchall()
    return [
        AttemptRecord(card_id=r[0], correct=bool(r[1]), timestamp=_parse_ts(r[2]))
        for r in rows
    ]


# --- Demo data ---


async def seed_demo_deck(db: aiosqlite.Connection) -> Deck | None:
    """Insert the demo deck when the database holds no decks. Returns it, or None."""
    cursor = await db.execute("SELECT COUNT(*) FROM decks")
    row = await cursor.fetchone()
    if row and row[0] > 0:
        return None
    name, cards = DEMO_DECK
    deck = await create_deck(db, name)
    for front, back, tags in cards:
        await create_card(
            db, deck.id, CardCreate(front_text=front, back_text=back, tags=_split_tags(tags))
        )
    return await get_deck(db, deck.id)
