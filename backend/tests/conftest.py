from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from flashdeck import app
from flashdeck.config import settings
from flashdeck.models.card import Card


@pytest.fixture()
def data_dir(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "data_dir", tmp_path / "data")
    monkeypatch.setattr(settings, "seed_demo_deck", False)
    return settings.data_dir


@pytest.fixture()
def client(data_dir):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def now() -> datetime:
    return datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_card(card_id: int, front: str | None = None, back: str | None = None) -> Card:
    return Card(
        id=card_id,
        deck_id=1,
        front_text=front or f"front-{card_id}",
        back_text=back or f"back-{card_id}",
    )
