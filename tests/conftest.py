"""
Shared pytest fixtures for knockout engine tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from knockout.models import Participant
from knockout.scores import StaticScoreSource


def make_participants(count):
    """Participants with entry ids 101.. and seeds 1..count."""
    return [
        Participant(entry_id=100 + seed, team_name=f"Team {seed}", manager_name=f"Manager {seed}", seed=seed)
        for seed in range(1, count + 1)
    ]


def make_standings(count, league_id=314, league_name="Test League"):
    """FPL-style classic league standings with `count` rows in rank order."""
    return {
        'league': {'id': league_id, 'name': league_name},
        'standings': {
            'results': [
                {
                    'entry': 100 + rank,
                    'entry_name': f"Team {rank}",
                    'player_name': f"Manager {rank}",
                    'rank': rank,
                    'total': 1500 - rank * 10,
                }
                for rank in range(1, count + 1)
            ]
        },
    }


class FakeFplSource(StaticScoreSource):
    """Static scores plus league standings, standing in for the FPL API."""

    def __init__(self, standings=None, **kwargs):
        super().__init__(**kwargs)
        self.standings = standings

    def get_league_standings(self, league_id):
        return self.standings


@pytest.fixture
def participants():
    return make_participants(8)


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the service's YAML store at a temporary directory."""
    import app as app_module

    tournaments_dir = tmp_path / "tournaments"
    monkeypatch.setattr(app_module, 'DATA_DIR', str(tmp_path))
    monkeypatch.setattr(app_module, 'TOURNAMENTS_DIR', str(tournaments_dir))
    return str(tmp_path)


@pytest.fixture
def client(temp_data_dir):
    """Create a test client backed by the temporary store."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client
