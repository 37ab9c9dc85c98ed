"""
Brackets with more than two entries per match.

Each round-1 group of `match_size` entries produces one winner, so a bracket
needs match_size ** rounds slots; the slots left over are byes.
"""
import logging
import math
from typing import Dict, List

from knockout.elimination import (
    _build_round_skeleton,
    _resolve_byes,
    build_bracket,
    validate_seeds,
)
from knockout.errors import InvalidMatchSize
from knockout.models import MatchPlayer, Participant, Round

logger = logging.getLogger(__name__)

# log(27) / log(3) comes out as 3.0000000000000004
_LOG_EPSILON = 1e-10


def calculate_nway_bracket(participant_count: int, match_size: int) -> Dict:
    """
    Calculate bracket structure for N-way matches.

    Returns dict with:
    - 'rounds': minimum rounds so that match_size ** rounds >= participant_count
    - 'total_slots': match_size ** rounds
    - 'bye_count': slots without a participant
    - 'matches_per_round': [round 1 matches, round 2 matches, ...]
    """
    if match_size < 2:
        raise InvalidMatchSize(match_size)
    if participant_count <= 0:
        return {'rounds': 0, 'total_slots': 0, 'bye_count': 0, 'matches_per_round': []}

    raw_rounds = math.log(participant_count) / math.log(match_size)
    rounds = math.ceil(raw_rounds - _LOG_EPSILON)
    total_slots = match_size ** rounds

    return {
        'rounds': rounds,
        'total_slots': total_slots,
        'bye_count': total_slots - participant_count,
        'matches_per_round': [match_size ** (rounds - r) for r in range(1, rounds + 1)],
    }


def distribute_byes_across_groups(group_count: int, bye_count: int, match_size: int) -> Dict:
    """
    Spread byes over round 1 groups, at most one per group before any group
    gets a second.

    A group auto-advances when only one real player is left in it; that is
    tracked for three-way matches, where two byes leave a single player.
    """
    first_pass_byes = min(bye_count, group_count)
    remaining_byes = bye_count - first_pass_byes

    second_pass_byes = min(remaining_byes, group_count)

    return {
        'groups_with_byes': first_pass_byes,
        'groups_with_two_byes': second_pass_byes,
        'full_groups': group_count - first_pass_byes,
        'auto_advance_count': second_pass_byes if match_size == 3 else 0,
    }


def assign_participants_to_nway_matches(match_size: int, total_slots: int,
                                        participant_count: int) -> List[Dict]:
    """
    Assign seeds to round 1 groups with a snake draft.

    For 4 groups of 4:
        Row 1: G1<-1, G2<-2, G3<-3, G4<-4
        Row 2: G4<-5, G3<-6, G2<-7, G1<-8
        ...
    giving G1=[1, 8, 9, 16], G2=[2, 7, 10, 15], G3=[3, 6, 11, 14], G4=[4, 5, 12, 13].

    Seeds above participant_count are byes (None). Returns a list of dicts
    with 'position' (0-based), 'seeds' and 'is_bye' (one real player or fewer).
    """
    group_count = total_slots // match_size
    groups = [[] for _ in range(group_count)]

    for seed in range(1, total_slots + 1):
        row = (seed - 1) // group_count
        pos_in_row = (seed - 1) % group_count
        group_index = pos_in_row if row % 2 == 0 else group_count - 1 - pos_in_row
        groups[group_index].append(seed if seed <= participant_count else None)

    assignments = []
    for index, seeds in enumerate(groups):
        real_players = [s for s in seeds if s is not None]
        assignments.append({
            'position': index,
            'seeds': seeds,
            'is_bye': len(real_players) <= 1,
        })
    return assignments


def build_nway_bracket(participants: List[Participant], match_size: int,
                       start_gameweek: int = 1) -> List[Round]:
    """Build a bracket of `match_size`-entry matches; byes resolve at build time."""
    if match_size < 2:
        raise InvalidMatchSize(match_size)
    if match_size == 2:
        return build_bracket(participants, start_gameweek)

    validate_seeds(participants)

    structure = calculate_nway_bracket(len(participants), match_size)
    total_rounds = max(1, structure['rounds'])
    total_slots = match_size ** total_rounds
    seed_to_participant = {p.seed: p for p in participants}

    rounds = _build_round_skeleton(total_slots, match_size, total_rounds, start_gameweek)
    assignments = assign_participants_to_nway_matches(match_size, total_slots, len(participants))

    byes = []
    for assignment in assignments:
        match = rounds[0].matches[assignment['position']]
        match.slots = [
            MatchPlayer.from_participant(seed_to_participant[seed], slot) if seed is not None else None
            for slot, seed in enumerate(assignment['seeds'], start=1)
        ]
        if assignment['is_bye']:
            match.is_bye = True
            byes.append((match.position, match.players[0].entry_id))

    logger.info(f"Built {match_size}-way bracket: {len(participants)} participants, "
                f"{total_rounds} rounds, {structure['bye_count']} bye slots")

    return _resolve_byes(rounds, byes)
