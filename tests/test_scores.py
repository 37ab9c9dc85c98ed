"""
Tests for score sources: the FPL API client and static score data.
"""
import pytest
import sys
import os
from unittest.mock import Mock, patch

import requests

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from knockout.models import Match, MatchPlayer
from knockout.scores import FplApiError, FplScoreSource, StaticScoreSource

BASE_URL = 'https://fpl.test/api'


def make_response(status_code=200, payload=None):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


def picks_payload(points, transfer_cost=0, bench_points=0):
    return {'entry_history': {
        'points': points,
        'event_transfers_cost': transfer_cost,
        'points_on_bench': bench_points,
    }}


def make_source(responses, **kwargs):
    """FplScoreSource whose session answers from a {url: response} map."""
    session = Mock()
    session.get.side_effect = lambda url, params=None, timeout=None: responses.get(url, make_response(404))
    return FplScoreSource(base_url=BASE_URL, session=session, **kwargs), session


class TestFplCurrentGameweek:
    """Tests for reading the current gameweek."""

    def test_current_event(self):
        """Test the event flagged current is returned."""
        payload = {'events': [
            {'id': 1, 'is_current': False, 'finished': True},
            {'id': 2, 'is_current': True, 'finished': False},
        ]}
        source, session = make_source({f'{BASE_URL}/bootstrap-static/': make_response(200, payload)})

        assert source.get_current_gameweek() == {'event': 2, 'finished': False}
        session.get.assert_called_once_with(f'{BASE_URL}/bootstrap-static/', params=None, timeout=10)

    def test_no_current_event(self):
        """Test None when no event is current."""
        payload = {'events': [{'id': 1, 'is_current': False, 'finished': False}]}
        source, _ = make_source({f'{BASE_URL}/bootstrap-static/': make_response(200, payload)})
        assert source.get_current_gameweek() is None

    def test_api_error(self, caplog):
        """Test an API error is logged and gives None."""
        source, _ = make_source({f'{BASE_URL}/bootstrap-static/': make_response(503)})
        assert source.get_current_gameweek() is None
        assert "Failed to fetch current gameweek" in caplog.text

    def test_network_error(self):
        """Test a connection failure gives None."""
        session = Mock()
        session.get.side_effect = requests.exceptions.ConnectionError("down")
        source = FplScoreSource(base_url=BASE_URL, session=session)
        assert source.get_current_gameweek() is None


class TestFplLeagueStandings:
    """Tests for fetching league standings."""

    def test_follows_pages(self):
        """Test every standings page is fetched and joined."""
        session = Mock()
        session.get.side_effect = [
            make_response(200, {
                'league': {'id': 42, 'name': 'Cup League'},
                'standings': {'has_next': True, 'results': [{'entry': 1, 'rank': 1}]},
            }),
            make_response(200, {
                'league': {'id': 42, 'name': 'Cup League'},
                'standings': {'has_next': False, 'results': [{'entry': 2, 'rank': 2}]},
            }),
        ]
        source = FplScoreSource(base_url=BASE_URL, session=session)

        standings = source.get_league_standings(42)

        assert standings['league']['name'] == 'Cup League'
        assert [r['entry'] for r in standings['standings']['results']] == [1, 2]
        assert session.get.call_count == 2
        last_call = session.get.call_args_list[1]
        assert last_call.args[0] == f'{BASE_URL}/leagues-classic/42/standings/'
        assert last_call.kwargs['params'] == {'page_standings': 2}

    def test_missing_league(self):
        """Test an unknown league raises with the 404 status."""
        source, _ = make_source({})
        with pytest.raises(FplApiError) as exc_info:
            source.get_league_standings(42)
        assert exc_info.value.status_code == 404

    def test_network_error(self):
        """Test a timeout raises FplApiError without a status."""
        session = Mock()
        session.get.side_effect = requests.exceptions.Timeout("slow")
        source = FplScoreSource(base_url=BASE_URL, session=session)
        with pytest.raises(FplApiError) as exc_info:
            source.get_league_standings(42)
        assert exc_info.value.status_code is None


class TestFplEntryScores:
    """Tests for fetching entry scores."""

    def picks_url(self, entry_id, gameweek=5):
        return f'{BASE_URL}/entry/{entry_id}/event/{gameweek}/picks/'

    def test_reads_entry_history(self):
        """Test points, transfer cost and bench points come from entry history."""
        source, _ = make_source({self.picks_url(101): make_response(200, picks_payload(64, 4, 9))})
        score = source.get_entry_scores([101], 5)[101]

        assert (score.points, score.transfer_cost, score.bench_points) == (64, 4, 9)

    def test_missing_entry_skipped(self):
        """Test an entry without picks is left out."""
        source, _ = make_source({self.picks_url(101): make_response(200, picks_payload(64))})
        assert list(source.get_entry_scores([101, 102], 5)) == [101]

    def test_missing_entry_as_zero(self):
        """Test an entry without picks scores 0 when asked."""
        source, _ = make_source({self.picks_url(101): make_response(200, picks_payload(64))},
                                treat_missing_as_zero=True)
        scores = source.get_entry_scores([101, 102], 5)
        assert scores[102].points == 0

    def test_batches_with_pause(self):
        """Test entries are fetched in batches with a pause between them."""
        responses = {self.picks_url(e): make_response(200, picks_payload(e)) for e in range(1, 6)}
        source, session = make_source(responses, batch_size=2, batch_delay=0.5)

        with patch('knockout.scores.time.sleep') as sleep:
            scores = source.get_entry_scores([1, 2, 3, 4, 5], 5)

        assert len(scores) == 5
        assert session.get.call_count == 5
        assert sleep.call_count == 2
        sleep.assert_called_with(0.5)

    def test_match_scores(self):
        """Test matches missing any score are left out."""
        match = Match(match_id=9, round_number=1, position=0, slots=[
            MatchPlayer(entry_id=101, seed=1, slot=1),
            MatchPlayer(entry_id=102, seed=2, slot=2),
        ])
        open_match = Match(match_id=10, round_number=1, position=1, slots=[
            MatchPlayer(entry_id=103, seed=3, slot=1),
            MatchPlayer(entry_id=104, seed=4, slot=2),
        ])
        responses = {self.picks_url(e): make_response(200, picks_payload(e - 50)) for e in (101, 102, 103)}
        source, _ = make_source(responses)

        match_scores = source.get_match_scores([match, open_match], 5)

        assert list(match_scores) == [9]
        assert [(s.entry_id, s.points, s.seed) for s in match_scores[9]] == [(101, 51, 1), (102, 52, 2)]


class TestStaticScoreSource:
    """Tests for in-memory and YAML scores."""

    def test_plain_and_detailed_scores(self):
        """Test plain numbers and detail dicts both work."""
        source = StaticScoreSource({'3': {'101': 55, 102: {'points': 40, 'bench_points': 12}}})
        scores = source.get_entry_scores([101, 102, 103], 3)

        assert scores[101].points == 55
        assert scores[102].bench_points == 12
        assert 103 not in scores
        assert source.get_entry_scores([101], 4) == {}

    def test_current_gameweek(self):
        """Test the configured gameweek and finished flag."""
        assert StaticScoreSource(current_gameweek=7).get_current_gameweek() == {'event': 7, 'finished': True}
        assert StaticScoreSource(current_gameweek=7, finished=False).get_current_gameweek()['finished'] is False
        assert StaticScoreSource().get_current_gameweek() is None

    def test_from_yaml(self, tmp_path):
        """Test loading scores from a YAML file."""
        path = tmp_path / "scores.yaml"
        path.write_text(
            "current_gameweek: 12\n"
            "finished: false\n"
            "scores:\n"
            "  11:\n"
            "    101: {points: 60, transfer_cost: 4, bench_points: 7}\n"
            "    102: 48\n"
        )
        source = StaticScoreSource.from_yaml(str(path))

        assert source.get_current_gameweek() == {'event': 12, 'finished': False}
        scores = source.get_entry_scores([101, 102], 11)
        assert (scores[101].points, scores[101].transfer_cost) == (60, 4)
        assert scores[102].points == 48
