"""
Flask web service for Knockout tournaments.
"""
import os
import re
import yaml
from filelock import FileLock
from flask import Flask, jsonify, request

from knockout.elimination import get_bracket_summary
from knockout.errors import BracketError
from knockout.models import Tournament
from knockout.scores import FPL_API_BASE, FplApiError, FplScoreSource
from knockout.status import calculate_remaining_participants, get_entry_overview, get_round_statuses
from knockout.tournament import create_tournament, update_tournament

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(BASE_DIR, 'data'))
TOURNAMENTS_DIR = os.path.join(DATA_DIR, 'tournaments')

app.config['FPL_API_BASE'] = os.environ.get('FPL_API_BASE', FPL_API_BASE)
app.config['MIN_PARTICIPANTS'] = int(os.environ.get('KNOCKOUT_MIN_PARTICIPANTS', 4))
app.config['MAX_PARTICIPANTS'] = int(os.environ.get('KNOCKOUT_MAX_PARTICIPANTS', 50))

_TOURNAMENT_ID_PATTERN = re.compile(r'^[A-Za-z0-9-]+$')


def get_score_source():
    """Score source used by the service; missing FPL teams score zero."""
    return FplScoreSource(base_url=app.config['FPL_API_BASE'], treat_missing_as_zero=True)


def _data_lock() -> FileLock:
    os.makedirs(DATA_DIR, exist_ok=True)
    return FileLock(os.path.join(DATA_DIR, '.lock'), timeout=10)


def _tournament_file(tournament_id: str):
    if not _TOURNAMENT_ID_PATTERN.match(tournament_id or ''):
        return None
    return os.path.join(TOURNAMENTS_DIR, f'{tournament_id}.yaml')


def load_tournament(tournament_id: str):
    """Load one tournament from YAML, or None if it does not exist."""
    path = _tournament_file(tournament_id)
    if path is None or not os.path.exists(path):
        return None
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    return Tournament.from_dict(data) if data else None


def load_tournaments() -> list:
    if not os.path.isdir(TOURNAMENTS_DIR):
        return []
    tournaments = []
    for file_name in sorted(os.listdir(TOURNAMENTS_DIR)):
        if not file_name.endswith('.yaml'):
            continue
        try:
            tournament = load_tournament(file_name[:-len('.yaml')])
        except (yaml.YAMLError, KeyError) as e:
            app.logger.warning(f'Failed to parse {file_name}: {e}')
            continue
        if tournament:
            tournaments.append(tournament)
    return tournaments


def save_tournament(tournament: Tournament):
    """Save a tournament to YAML."""
    os.makedirs(TOURNAMENTS_DIR, exist_ok=True)
    with open(_tournament_file(tournament.tournament_id), 'w', encoding='utf-8') as f:
        yaml.dump(tournament.to_dict(), f, default_flow_style=False, sort_keys=False)


def _tournament_summary(tournament: Tournament) -> dict:
    return {
        'tournament_id': tournament.tournament_id,
        'league_id': tournament.league_id,
        'league_name': tournament.league_name,
        'participant_count': tournament.participant_count,
        'total_rounds': tournament.total_rounds,
        'current_round': tournament.current_round,
        'status': tournament.status,
        'winner_id': tournament.winner_id,
    }


def _tournament_payload(tournament: Tournament) -> dict:
    payload = tournament.to_dict()
    payload['round_statuses'] = get_round_statuses(tournament)
    payload['summary'] = get_bracket_summary(tournament.rounds)
    payload['remaining_participants'] = calculate_remaining_participants(tournament.rounds)
    return payload


def _error(message: str, status: int):
    return jsonify({'success': False, 'error': message}), status


@app.route('/api/tournaments', methods=['GET'])
def api_list_tournaments():
    """List stored tournaments."""
    tournaments = load_tournaments()
    return jsonify({'success': True, 'tournaments': [_tournament_summary(t) for t in tournaments]})


@app.route('/api/tournaments', methods=['POST'])
def api_create_tournament():
    """Create a tournament from an FPL classic league."""
    data = request.get_json(silent=True) or {}
    league_id = data.get('league_id')
    match_size = data.get('match_size', 2)

    if not isinstance(league_id, int) or isinstance(league_id, bool):
        return _error('league_id must be a number.', 400)
    if not isinstance(match_size, int) or isinstance(match_size, bool):
        return _error('match_size must be a number.', 400)

    source = get_score_source()
    try:
        standings = source.get_league_standings(league_id)
    except FplApiError as e:
        if e.status_code == 404:
            return _error('League not found.', 404)
        app.logger.error(f'Failed to fetch standings for league {league_id}: {e}')
        return _error('FPL is unavailable, try again later.', 502)

    gameweek = source.get_current_gameweek()
    if gameweek is None:
        return _error('Could not determine current gameweek.', 502)

    try:
        tournament = create_tournament(
            standings,
            current_gameweek=gameweek['event'],
            match_size=match_size,
            min_participants=app.config['MIN_PARTICIPANTS'],
            max_participants=app.config['MAX_PARTICIPANTS'],
        )
    except BracketError as e:
        return _error(str(e), 400)

    with _data_lock():
        save_tournament(tournament)

    app.logger.info(f'Created tournament {tournament.tournament_id} for league {league_id}')
    return jsonify({'success': True, 'tournament': _tournament_payload(tournament)}), 201


@app.route('/api/tournaments/<tournament_id>', methods=['GET'])
def api_get_tournament(tournament_id):
    """Bracket, round statuses and summary for one tournament."""
    tournament = load_tournament(tournament_id)
    if tournament is None:
        return _error('Tournament not found.', 404)
    return jsonify({'success': True, 'tournament': _tournament_payload(tournament)})


@app.route('/api/tournaments/<tournament_id>/entries/<int:entry_id>', methods=['GET'])
def api_get_entry(tournament_id, entry_id):
    """Status of one entry, their match and their possible next opponents."""
    tournament = load_tournament(tournament_id)
    if tournament is None:
        return _error('Tournament not found.', 404)

    overview = get_entry_overview(tournament, entry_id)
    if overview is None:
        return _error('Team not found in this tournament.', 404)
    return jsonify({'success': True, 'entry': overview})


@app.route('/api/tournaments/<tournament_id>/refresh', methods=['POST'])
def api_refresh_tournament(tournament_id):
    """Settle any rounds whose gameweek has finished."""
    source = get_score_source()
    with _data_lock():
        tournament = load_tournament(tournament_id)
        if tournament is None:
            return _error('Tournament not found.', 404)

        try:
            tournament, results = update_tournament(tournament, source)
        except FplApiError as e:
            app.logger.error(f'Refresh of tournament {tournament_id} failed: {e}')
            return _error('FPL is unavailable, try again later.', 502)

        save_tournament(tournament)

    app.logger.info(f'Refreshed tournament {tournament_id}: {len(results)} matches resolved')
    return jsonify({
        'success': True,
        'results': [r.to_dict() for r in results],
        'tournament': _tournament_payload(tournament),
    })


if __name__ == '__main__':
    app.run(debug=True, port=5000)
