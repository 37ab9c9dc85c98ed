"""
Single elimination bracket generation and winner advancement.
"""
import copy
import logging
import math
from typing import Dict, List

from knockout.errors import (
    DuplicateSeed,
    InvalidParticipantCount,
    InvalidWinner,
    MatchNotFound,
    NonContiguousSeeds,
    WinnerAlreadyRecorded,
)
from knockout.models import Match, MatchPlayer, Participant, Round
from knockout.navigation import find_round, get_feed_ratio, get_match_at

logger = logging.getLogger(__name__)


def get_round_name(round_number: int, total_rounds: int) -> str:
    """Get the name of a round from its distance to the final."""
    rounds_from_final = total_rounds - round_number
    if rounds_from_final == 0:
        return "Final"
    elif rounds_from_final == 1:
        return "Semi-Finals"
    elif rounds_from_final == 2:
        return "Quarter-Finals"
    else:
        return f"Round {round_number}"


def calculate_bracket_size(num_participants: int) -> int:
    """Calculate the bracket size (next power of 2)."""
    if num_participants <= 0:
        return 0
    return 2 ** math.ceil(math.log2(num_participants))


def calculate_byes(num_participants: int) -> int:
    """Calculate number of byes needed."""
    bracket_size = calculate_bracket_size(num_participants)
    return bracket_size - num_participants


def calculate_total_rounds(num_participants: int) -> int:
    """Number of rounds; a lone participant still gets a one-match final."""
    if num_participants <= 0:
        return 0
    return max(1, int(math.log2(calculate_bracket_size(num_participants))))


def get_match_count_for_round(bracket_size: int, round_number: int) -> int:
    return bracket_size // (2 ** round_number)


def get_next_round_slot(position: int, match_size: int = 2) -> int:
    """1-based slot the winner of `position` takes in the next-round match."""
    return position % match_size + 1


def _generate_bracket_order(bracket_size: int) -> List[int]:
    """
    Generate the standard tournament bracket order.
    This ensures that if all higher seeds win, they meet in the proper rounds.

    For 8 participants: [1, 8, 4, 5, 2, 7, 3, 6]
    This gives matchups: 1v8, 4v5, 2v7, 3v6
    Winners: 1v4 side, 2v3 side
    Final: 1v2 (if chalk)
    """
    if bracket_size <= 2:
        return list(range(1, bracket_size + 1))

    # Recursive generation
    half_size = bracket_size // 2
    upper_half = _generate_bracket_order(half_size)

    # Create lower half as complement
    lower_half = [bracket_size + 1 - seed for seed in upper_half]

    # Interleave: pair each upper seed with its complement
    result = []
    for u, l in zip(upper_half, lower_half):
        result.extend([u, l])

    return result


def seed_participants_from_standings(results: List[Dict]) -> List[Participant]:
    """
    Create seeded participants from league standings rows.

    Each row carries the FPL standings fields (entry, entry_name, player_name,
    rank, total). Rows are ordered by league rank, keeping standings order for
    equal ranks, and seed = position in that order: seed 1 is the league leader.
    """
    ordered = sorted(results, key=lambda row: row.get('rank', 0))

    participants = []
    for seed, row in enumerate(ordered, start=1):
        participants.append(Participant(
            entry_id=row['entry'],
            team_name=row.get('entry_name', ''),
            manager_name=row.get('player_name', ''),
            seed=seed,
            league_rank=row.get('rank'),
            league_points=row.get('total'),
        ))
    return participants


def validate_seeds(participants: List[Participant]) -> None:
    """Seeds must be a permutation of 1..N."""
    if len(participants) < 1:
        raise InvalidParticipantCount(len(participants))

    seen = set()
    for participant in participants:
        if participant.seed in seen:
            raise DuplicateSeed(participant.seed)
        seen.add(participant.seed)

    missing = set(range(1, len(participants) + 1)) - seen
    if missing:
        raise NonContiguousSeeds(missing)


def build_bracket(participants: List[Participant], start_gameweek: int = 1) -> List[Round]:
    """
    Build the full single elimination bracket.

    Round 1 is populated with the standard bracket order; a pairing whose
    lower seed does not exist is a bye, won by its sole occupant without a
    score and advanced into round 2 straight away. Later rounds start with
    empty slots. Round r is settled against gameweek start_gameweek + r - 1.
    """
    validate_seeds(participants)

    num_participants = len(participants)
    total_rounds = calculate_total_rounds(num_participants)
    bracket_size = max(2, calculate_bracket_size(num_participants))
    seed_to_participant = {p.seed: p for p in participants}
    bracket_order = _generate_bracket_order(bracket_size)

    rounds = _build_round_skeleton(bracket_size, 2, total_rounds, start_gameweek)

    byes = []
    for position, match in enumerate(rounds[0].matches):
        seeds = bracket_order[position * 2:position * 2 + 2]
        match.slots = [
            MatchPlayer.from_participant(seed_to_participant[seed], slot)
            if seed in seed_to_participant else None
            for slot, seed in enumerate(seeds, start=1)
        ]
        # Standard ordering puts the higher seed first, so the bye is always slot 2
        if len(match.players) == 1:
            match.is_bye = True
            byes.append((position, match.players[0].entry_id))

    logger.info(f"Built bracket: {num_participants} participants, {total_rounds} rounds, {len(byes)} byes")

    return _resolve_byes(rounds, byes)


def _build_round_skeleton(bracket_size: int, match_size: int, total_rounds: int,
                          start_gameweek: int) -> List[Round]:
    """Create every round with empty matches, numbering matches round by round."""
    rounds = []
    match_id = 1
    for round_number in range(1, total_rounds + 1):
        match_count = max(1, bracket_size // (match_size ** round_number))
        matches = []
        for position in range(match_count):
            matches.append(Match(
                match_id=match_id,
                round_number=round_number,
                position=position,
                slots=[None] * match_size,
            ))
            match_id += 1
        rounds.append(Round(
            round_number=round_number,
            name=get_round_name(round_number, total_rounds),
            gameweek=start_gameweek + round_number - 1,
            matches=matches,
        ))
    return rounds


def _resolve_byes(rounds: List[Round], byes) -> List[Round]:
    for position, winner_id in byes:
        rounds = advance_winner(rounds, 1, position, winner_id)
    return rounds


def advance_winner(rounds: List[Round], round_number: int, position: int, winner_id) -> List[Round]:
    """
    Record a match winner and move them into the next round.

    Returns a new list of rounds; the input is left untouched. Applying the
    same winner twice is a no-op. A recorded winner can never be replaced.
    """
    rounds = copy.deepcopy(rounds)

    match = get_match_at(rounds, round_number, position)
    if match is None:
        raise MatchNotFound(round_number, position)

    player = match.get_player(winner_id)
    if player is None:
        raise InvalidWinner(match.match_id, winner_id)
    if match.winner_id is not None and match.winner_id != winner_id:
        raise WinnerAlreadyRecorded(match.match_id, match.winner_id, winner_id)
    match.winner_id = winner_id

    ratio = get_feed_ratio(rounds, round_number)
    if not ratio:
        return rounds

    next_match = find_round(rounds, round_number + 1).matches[position // ratio]
    slot = get_next_round_slot(position, ratio)
    existing = next_match.slots[slot - 1]
    if existing is not None and existing.entry_id != winner_id:
        raise WinnerAlreadyRecorded(next_match.match_id, existing.entry_id, winner_id)

    if existing is None:
        next_match.slots[slot - 1] = MatchPlayer(
            entry_id=winner_id,
            seed=player.seed,
            slot=slot,
            team_name=player.team_name,
            manager_name=player.manager_name,
        )
        logger.debug(f"Advanced entry {winner_id} to match {next_match.match_id} slot {slot}")

    return rounds


def get_bracket_summary(rounds: List[Round]) -> Dict:
    """
    Get bracket statistics for display.
    """
    if not rounds:
        return {
            'total_participants': 0,
            'total_rounds': 0,
            'byes': 0,
            'matches_per_round': {},
            'champion': None,
        }

    first_round = rounds[0]
    total_participants = sum(len(m.players) for m in first_round.matches)
    first_round_byes = sum(1 for m in first_round.matches if m.is_bye)

    # Count actual matches (non-byes) per round
    matches_per_round = {}
    for round_ in rounds:
        actual_matches = [m for m in round_.matches if not m.is_bye]
        matches_per_round[round_.name] = len(actual_matches)

    final_round = rounds[-1]
    champion = final_round.matches[0].winner_id if final_round.matches else None

    return {
        'total_participants': total_participants,
        'total_rounds': len(rounds),
        'byes': first_round_byes,
        'matches_per_round': matches_per_round,
        'champion': champion,
    }
