import os
from datetime import datetime, timezone

import pytest

from retain.domain.models import Card, CardState


@pytest.fixture(autouse=True)
def mock_home(tmp_path, monkeypatch):
    """Point HOME at a temp dir and drop RETAIN_* variables so config stays default."""
    home = tmp_path / "home"
    home.mkdir()

    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))

    for key in list(os.environ):
        if key.startswith("RETAIN_"):
            monkeypatch.delenv(key)
    return home


@pytest.fixture
def now():
    return datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_card(now):
    """Factory for card snapshots; defaults describe a fresh New card due now."""

    def _make(
        state: CardState = CardState.NEW,
        repetitions: int = 0,
        ease_factor: float = 2.5,
        interval: int = 0,
        due_at: datetime | None = None,
        card_id: str = "card_1",
        pre_lapse_interval: int | None = None,
    ) -> Card:
        return Card(
            id=card_id,
            state=state,
            repetitions=repetitions,
            ease_factor=ease_factor,
            interval=interval,
            due_at=due_at or now,
            created_at=now,
            modified_at=now,
            pre_lapse_interval=pre_lapse_interval,
        )

    return _make
