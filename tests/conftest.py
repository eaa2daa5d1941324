import pytest

import session_logic
from app_types import Player
from tests.utils import FakeClock


@pytest.fixture
def sample_players():
    """Returns a list of eight available players with mixed skill levels."""
    return [
        Player(id="alice", name="Alice", skill_level=5, available_since=100.0),
        Player(id="bob", name="Bob", skill_level=4, available_since=200.0),
        Player(id="charlie", name="Charlie", skill_level=3, available_since=300.0),
        Player(id="dave", name="Dave", skill_level=2, available_since=400.0),
        Player(id="eve", name="Eve", skill_level=4, available_since=500.0),
        Player(id="frank", name="Frank", skill_level=3, available_since=600.0),
        Player(id="grace", name="Grace", skill_level=1, available_since=700.0),
        Player(id="heidi", name="Heidi", skill_level=2, available_since=800.0),
    ]


@pytest.fixture
def players_by_id(sample_players):
    """Returns a mapping of player ids to players."""
    return {p.id: p for p in sample_players}


@pytest.fixture
def clock():
    return FakeClock(start=1_000.0)


@pytest.fixture
def sessions_dir(tmp_path, monkeypatch):
    """Points the session pickles at a temporary directory."""
    path = tmp_path / "sessions"
    monkeypatch.setattr(session_logic, "SESSIONS_DIR", str(path))
    return path
