"""
Bracket position arithmetic.

Rounds are flat lists of matches ordered by position. A match's parent and
children are found by index math on those lists, never through stored links.
"""
from typing import List, Optional, Tuple

from knockout.models import Match, Round


def find_round(rounds: List[Round], round_number: int) -> Optional[Round]:
    for round_ in rounds:
        if round_.round_number == round_number:
            return round_
    return None


def get_match_at(rounds: List[Round], round_number: int, position: int) -> Optional[Match]:
    round_ = find_round(rounds, round_number)
    if round_ is None or position < 0 or position >= len(round_.matches):
        return None
    return round_.matches[position]


def get_feed_ratio(rounds: List[Round], round_number: int) -> Optional[int]:
    """Number of matches in `round_number` that feed one match of the next round."""
    round_ = find_round(rounds, round_number)
    next_round = find_round(rounds, round_number + 1)
    if round_ is None or next_round is None or not next_round.matches:
        return None
    return len(round_.matches) // len(next_round.matches)


def find_sibling_match(rounds: List[Round], match: Match,
                       round_number: int) -> Optional[Tuple[Match, Round]]:
    """
    Find the other match that feeds the same next-round match.

    Matches at positions 2n and 2n+1 feed position n, so the sibling of an
    even index is index+1 and of an odd index is index-1. Only the match's own
    round is consulted. Returns (sibling, round), or None when the round or
    match is unknown or there is no sibling (the final).
    """
    round_ = find_round(rounds, round_number)
    if round_ is None:
        return None

    index = next((i for i, m in enumerate(round_.matches) if m.match_id == match.match_id), -1)
    if index == -1:
        return None

    sibling_index = index + 1 if index % 2 == 0 else index - 1
    if sibling_index < 0 or sibling_index >= len(round_.matches):
        return None

    return round_.matches[sibling_index], round_


def get_next_match(rounds: List[Round], round_number: int, position: int) -> Optional[Match]:
    """The match the winner of (round_number, position) advances into."""
    ratio = get_feed_ratio(rounds, round_number)
    if not ratio:
        return None
    return get_match_at(rounds, round_number + 1, position // ratio)


def get_feeder_matches(rounds: List[Round], round_number: int, position: int) -> List[Match]:
    """Previous-round matches whose winners fill (round_number, position)."""
    if round_number <= 1:
        return []
    ratio = get_feed_ratio(rounds, round_number - 1)
    previous_round = find_round(rounds, round_number - 1)
    if not ratio or previous_round is None:
        return []
    start = position * ratio
    return previous_round.matches[start:start + ratio]


def validate_feeders_complete(rounds: List[Round], round_number: int,
                              position: int) -> Tuple[bool, List[int]]:
    """
    Check whether every feeder of a match has a winner.

    Returns (ready, incomplete_feeder_ids). Round 1 matches have no feeders
    and are always ready.
    """
    incomplete = [m.match_id for m in get_feeder_matches(rounds, round_number, position)
                  if m.winner_id is None]
    return not incomplete, incomplete


def is_match_playable(rounds: List[Round], round_number: int, match: Match) -> bool:
    """
    A match can be scored once every feeder has a winner and at least two
    entries are in it. An N-way group may keep an empty slot and still play.
    """
    if match.is_bye or len(match.players) < 2:
        return False
    ready, _ = validate_feeders_complete(rounds, round_number, match.position)
    return ready
