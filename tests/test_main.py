"""
Tests for the command line runner against the sample data files.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from main import format_match, load_standings, main
from knockout.models import Match, MatchPlayer

DATA_DIR = os.path.join(os.path.dirname(__file__), '..', 'data')
LEAGUE_FILE = os.path.join(DATA_DIR, 'league.yaml')
SCORES_FILE = os.path.join(DATA_DIR, 'scores.yaml')


def test_load_standings():
    """Test the sample roster loads in rank order."""
    standings = load_standings(LEAGUE_FILE)
    assert standings['league']['name'] == 'Office League'
    assert [r['entry'] for r in standings['standings']['results']] == [101, 102, 103, 104, 105, 106]


def test_format_match():
    """Test a bye is printed with its winner."""
    match = Match(match_id=1, round_number=1, position=0, is_bye=True, winner_id=101, slots=[
        MatchPlayer(entry_id=101, seed=1, slot=1, team_name='Alpha'), None,
    ])
    assert format_match(match) == '[1] Alpha vs BYE  -> winner 101'


def test_bracket_only(monkeypatch, capsys):
    """Test printing a bracket without scores."""
    monkeypatch.setattr(sys, 'argv', ['main.py', LEAGUE_FILE])
    main()
    out = capsys.readouterr().out

    assert 'Office League knockout' in out
    assert 'Quarter-Finals (GW1, Upcoming)' in out
    assert 'Remaining participants: 6' in out
    assert 'Champion' not in out


def test_full_run(monkeypatch, capsys):
    """Sample scores settle all three rounds; the semi-final goes to transfer cost."""
    monkeypatch.setattr(sys, 'argv', ['main.py', LEAGUE_FILE, '--scores', SCORES_FILE])
    main()
    out = capsys.readouterr().out

    assert 'Resolved 5 matches' in out
    assert 'Champion: Saka Potatoes' in out


def test_empty_roster(tmp_path, monkeypatch, capsys):
    """Test a roster with no entries stops early."""
    roster = tmp_path / 'empty.yaml'
    roster.write_text('league: {id: 1, name: Empty}\n')
    monkeypatch.setattr(sys, 'argv', ['main.py', str(roster)])
    main()
    assert 'No entries loaded' in capsys.readouterr().out
