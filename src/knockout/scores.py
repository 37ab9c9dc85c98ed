"""
Score sources: where gameweek scores come from.

The engine only needs one capability: given matches and a gameweek, return
per-slot scores. ScoreSource defines it on top of a per-entry lookup;
FplScoreSource reads the public FPL API and StaticScoreSource serves fixed
data (fixtures, the CLI and tests).
"""
import logging
import time
from typing import Dict, Iterable, List, Optional

import requests
import yaml

from knockout.models import EntryScore, Match, PlayerScore
from knockout.resolver import collect_match_scores

logger = logging.getLogger(__name__)

FPL_API_BASE = 'https://fantasy.premierleague.com/api'


class FplApiError(Exception):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class ScoreSource:
    """Supplies the current gameweek and per-entry gameweek scores."""

    def get_current_gameweek(self) -> Optional[Dict]:
        """Return {'event': int, 'finished': bool}, or None if unknown."""
        raise NotImplementedError

    def get_entry_scores(self, entry_ids: Iterable[int], gameweek: int) -> Dict[int, EntryScore]:
        raise NotImplementedError

    def get_match_scores(self, matches: List[Match], gameweek: int) -> Dict[int, List[PlayerScore]]:
        """
        Scores for every occupied slot of each match, keyed by match id.
        Matches with any missing entry score are left out.
        """
        entry_ids = set()
        for match in matches:
            entry_ids.update(match.entry_ids)

        entry_scores = self.get_entry_scores(sorted(entry_ids), gameweek) if entry_ids else {}

        match_scores = {}
        for match in matches:
            scores = collect_match_scores(match, entry_scores)
            if scores is not None:
                match_scores[match.match_id] = scores
        return match_scores


class FplScoreSource(ScoreSource):
    """
    Reads scores from the Fantasy Premier League API.

    Entries are fetched in batches with a short pause between batches to go
    easy on the API. An entry whose picks cannot be fetched is skipped, or
    scored as zero when treat_missing_as_zero is set (deleted FPL teams).
    """

    def __init__(self, base_url: str = FPL_API_BASE, session: Optional[requests.Session] = None,
                 timeout: float = 10, batch_size: int = 10, batch_delay: float = 0.1,
                 treat_missing_as_zero: bool = False):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self.treat_missing_as_zero = treat_missing_as_zero

    def _fetch_json(self, path: str, params: Optional[Dict] = None):
        url = f"{self.base_url}/{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise FplApiError(f"FPL API request failed for {url}: {e}") from e
        if response.status_code != 200:
            raise FplApiError(f"FPL API error for {url}: {response.status_code}",
                              status_code=response.status_code)
        return response.json()

    def get_bootstrap_static(self) -> Dict:
        return self._fetch_json('bootstrap-static/')

    def get_current_gameweek(self) -> Optional[Dict]:
        try:
            data = self.get_bootstrap_static()
        except FplApiError as e:
            logger.error(f"Failed to fetch current gameweek: {e}")
            return None

        current_event = next((e for e in data.get('events', []) if e.get('is_current')), None)
        if current_event is None:
            return None
        return {'event': current_event['id'], 'finished': bool(current_event.get('finished'))}

    def get_league_standings(self, league_id: int) -> Dict:
        """
        Fetch a classic league's standings, following every page.

        Returns {'league': {...}, 'standings': {'results': [...]}} with all
        pages' rows concatenated.
        """
        page = 1
        league = None
        results = []
        while True:
            data = self._fetch_json(f'leagues-classic/{league_id}/standings/',
                                    params={'page_standings': page})
            league = data.get('league', league)
            standings = data.get('standings') or {}
            results.extend(standings.get('results', []))
            if not standings.get('has_next'):
                break
            page += 1
        return {'league': league, 'standings': {'results': results}}

    def get_entry_picks(self, entry_id: int, gameweek: int) -> Optional[Dict]:
        try:
            return self._fetch_json(f'entry/{entry_id}/event/{gameweek}/picks/')
        except FplApiError as e:
            logger.error(f"Failed to fetch picks for entry {entry_id} gameweek {gameweek}: {e}")
            return None

    def get_entry_scores(self, entry_ids: Iterable[int], gameweek: int) -> Dict[int, EntryScore]:
        entry_ids = list(entry_ids)
        results = {}
        for i in range(0, len(entry_ids), self.batch_size):
            batch = entry_ids[i:i + self.batch_size]
            for entry_id in batch:
                picks = self.get_entry_picks(entry_id, gameweek)
                if picks is not None:
                    results[entry_id] = _entry_score_from_picks(entry_id, picks)
                elif self.treat_missing_as_zero:
                    logger.warning(f"Entry {entry_id} has no picks for gameweek {gameweek}, scoring as 0")
                    results[entry_id] = EntryScore(entry_id=entry_id, points=0)

            if i + self.batch_size < len(entry_ids) and self.batch_delay:
                time.sleep(self.batch_delay)

        return results


def _entry_score_from_picks(entry_id: int, picks: Dict) -> EntryScore:
    history = picks.get('entry_history') or {}
    return EntryScore(
        entry_id=entry_id,
        points=history.get('points', 0),
        transfer_cost=history.get('event_transfers_cost', 0),
        bench_points=history.get('points_on_bench', 0),
    )


class StaticScoreSource(ScoreSource):
    """
    Scores held in memory.

    `scores` maps gameweek -> entry id -> either a number of points or a dict
    with points / transfer_cost / bench_points.
    """

    def __init__(self, scores: Optional[Dict] = None, current_gameweek: Optional[int] = None,
                 finished: bool = True):
        self.scores = {int(gw): {int(e): s for e, s in (entries or {}).items()}
                       for gw, entries in (scores or {}).items()}
        self.current_gameweek = current_gameweek
        self.finished = finished

    @classmethod
    def from_yaml(cls, file_path: str) -> 'StaticScoreSource':
        """
        Load from YAML of the form:

            current_gameweek: 12
            finished: true
            scores:
              11:
                101: {points: 60, transfer_cost: 4, bench_points: 7}
                102: 48
        """
        with open(file_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        return cls(
            scores=data.get('scores', {}),
            current_gameweek=data.get('current_gameweek'),
            finished=data.get('finished', True),
        )

    def get_current_gameweek(self) -> Optional[Dict]:
        if self.current_gameweek is None:
            return None
        return {'event': self.current_gameweek, 'finished': self.finished}

    def get_entry_scores(self, entry_ids: Iterable[int], gameweek: int) -> Dict[int, EntryScore]:
        gameweek_scores = self.scores.get(gameweek, {})
        results = {}
        for entry_id in entry_ids:
            if entry_id not in gameweek_scores:
                continue
            value = gameweek_scores[entry_id]
            if isinstance(value, dict):
                results[entry_id] = EntryScore(
                    entry_id=entry_id,
                    points=value.get('points', 0),
                    transfer_cost=value.get('transfer_cost', 0),
                    bench_points=value.get('bench_points', 0),
                )
            else:
                results[entry_id] = EntryScore(entry_id=entry_id, points=value)
        return results
