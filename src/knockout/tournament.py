"""
Tournament lifecycle: creation from league standings and weekly updates.

Every function returns a new Tournament and leaves its input untouched.
"""
import copy
import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from knockout.elimination import advance_winner, seed_participants_from_standings
from knockout.errors import InvalidParticipantCount
from knockout.models import MatchResult, PlayerScore, Round, Tournament
from knockout.navigation import get_match_at, is_match_playable, validate_feeders_complete
from knockout.nway import build_nway_bracket
from knockout.resolver import resolve_match
from knockout.scores import ScoreSource

logger = logging.getLogger(__name__)


def validate_league_size(count: int, min_participants: int = 1,
                         max_participants: Optional[int] = None) -> None:
    if count < min_participants or (max_participants is not None and count > max_participants):
        raise InvalidParticipantCount(count, min_participants, max_participants)


def create_tournament(standings: Dict, current_gameweek: int, match_size: int = 2,
                      tournament_id: Optional[str] = None, min_participants: int = 1,
                      max_participants: Optional[int] = None) -> Tournament:
    """
    Create a tournament from FPL classic league standings.

    `standings` has the shape {'league': {'id', 'name'}, 'standings': {'results': [...]}}.
    Seeds follow league rank and round 1 is played in the gameweek after
    `current_gameweek`. A single entrant wins immediately.
    """
    results = (standings.get('standings') or {}).get('results') or []
    league = standings.get('league') or {}

    validate_league_size(len(results), min_participants, max_participants)

    participants = seed_participants_from_standings(results)
    start_gameweek = current_gameweek + 1
    rounds = build_nway_bracket(participants, match_size, start_gameweek)

    timestamp = datetime.now().isoformat()
    tournament = Tournament(
        tournament_id=tournament_id or str(uuid.uuid4()),
        league_id=league.get('id'),
        league_name=league.get('name', ''),
        participants=participants,
        rounds=rounds,
        start_gameweek=start_gameweek,
        current_round=1,
        current_gameweek=current_gameweek,
        match_size=match_size,
        created_at=timestamp,
        updated_at=timestamp,
    )
    _sync_progress(tournament)

    logger.info(f"Created tournament {tournament.tournament_id} for league {tournament.league_name}: "
                f"{tournament.participant_count} participants, {tournament.total_rounds} rounds, "
                f"starting gameweek {start_gameweek}")
    return tournament


def _sync_progress(tournament: Tournament) -> None:
    """Derive round completion, current round and tournament status from winners."""
    for round_ in tournament.rounds:
        if round_.matches and all(m.winner_id is not None for m in round_.matches):
            round_.is_complete = True

    incomplete = [r.round_number for r in tournament.rounds if not r.is_complete]
    tournament.current_round = incomplete[0] if incomplete else tournament.total_rounds

    if not tournament.rounds:
        return
    final_match = tournament.rounds[-1].matches[0]
    if final_match.winner_id is not None and not tournament.is_complete:
        tournament.status = Tournament.COMPLETED
        tournament.winner_id = final_match.winner_id
        logger.info(f"Tournament {tournament.tournament_id} complete! Winner: {final_match.winner_id}")


def _record_scores(rounds: List[Round], round_number: int, position: int,
                   scores: List[PlayerScore], timestamp: str) -> None:
    match = get_match_at(rounds, round_number, position)
    for score in scores:
        player = match.get_player(score.entry_id)
        if player is not None:
            player.score = score.points
    match.updated_at = timestamp


def process_round(tournament: Tournament, round_number: int,
                  score_source: ScoreSource) -> Tuple[Tournament, List[MatchResult]]:
    """
    Resolve every open match of a round whose scores are all available.

    Matches still waiting on feeder matches are skipped. Winners move into the
    next round as soon as their match resolves; the round is complete once
    every match has a winner, and the tournament once the final has one.
    """
    tournament = copy.deepcopy(tournament)
    round_ = tournament.get_round(round_number)
    if round_ is None:
        logger.warning(f"Tournament {tournament.tournament_id} has no round {round_number}")
        return tournament, []

    ready = []
    for match in round_.matches:
        if match.winner_id is not None:
            continue
        if not is_match_playable(tournament.rounds, round_number, match):
            _, waiting_on = validate_feeders_complete(tournament.rounds, round_number, match.position)
            if waiting_on:
                logger.info(f"Match {match.match_id} waiting on feeder matches {waiting_on}")
            else:
                logger.warning(f"Match {match.match_id} has fewer than two entries, skipping")
            continue
        ready.append(match)

    logger.info(f"Processing round {round_number} of tournament {tournament.tournament_id}: "
                f"{len(ready)} matches to resolve")

    match_scores = score_source.get_match_scores(ready, round_.gameweek) if ready else {}

    timestamp = datetime.now().isoformat()
    rounds = tournament.rounds
    results = []
    for match in ready:
        scores = match_scores.get(match.match_id, [])
        result = resolve_match(match.match_id, scores)
        if result is None:
            continue

        _record_scores(rounds, round_number, match.position, scores, timestamp)
        rounds = advance_winner(rounds, round_number, match.position, result.winner_id)
        results.append(result)

        winner_points = result.rankings[0].points
        logger.info(f"Match {match.match_id}: winner={result.winner_id} ({winner_points} pts)"
                    f"{' [tiebreaker]' if result.decided_by_tiebreaker else ''}")

    tournament.rounds = rounds
    tournament.updated_at = timestamp
    _sync_progress(tournament)

    if tournament.get_round(round_number).is_complete:
        logger.info(f"Round {round_number} of tournament {tournament.tournament_id} complete")

    return tournament, results


def update_tournament(tournament: Tournament, score_source: ScoreSource,
                      gameweek_status: Optional[Dict] = None) -> Tuple[Tournament, List[MatchResult]]:
    """
    Run the weekly update.

    Rounds are only settled against finished gameweeks: the current one if it
    has finished, otherwise the one before. Rounds are processed in order and
    processing stops at the first round that cannot complete yet.
    """
    if tournament.is_complete:
        return tournament, []

    if gameweek_status is None:
        gameweek_status = score_source.get_current_gameweek()
    if gameweek_status is None:
        logger.warning(f"Could not determine current gameweek for tournament {tournament.tournament_id}")
        return tournament, []

    tournament = copy.deepcopy(tournament)
    current_event = gameweek_status['event']
    tournament.current_gameweek = current_event
    max_event = current_event if gameweek_status.get('finished') else current_event - 1

    results = []
    for round_number in range(1, tournament.total_rounds + 1):
        round_ = tournament.get_round(round_number)
        if round_.is_complete:
            continue
        if round_.gameweek > max_event:
            logger.info(f"Gameweek {round_.gameweek} not finished yet, round {round_number} waits")
            break

        tournament, round_results = process_round(tournament, round_number, score_source)
        results.extend(round_results)

        if not tournament.get_round(round_number).is_complete:
            break

    return tournament, results
