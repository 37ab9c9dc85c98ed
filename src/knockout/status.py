"""
Derived tournament views: round status, remaining participants, entry status.

Everything here is recomputed from the bracket and the current gameweek on
each call; nothing is stored.
"""
from typing import Dict, List, Optional

from knockout.models import Match, Round, Tournament
from knockout.navigation import find_sibling_match, get_feeder_matches

UPCOMING = 'upcoming'
LIVE = 'live'
COMPLETE = 'complete'

USER_IN = 'in'
USER_ELIMINATED = 'eliminated'
USER_WINNER = 'winner'

_ROUND_STATUS_LABELS = {
    LIVE: 'Live',
    COMPLETE: 'Complete',
    UPCOMING: 'Upcoming',
}


def get_round_status(round_gameweek: int, current_gameweek: int, is_complete: bool) -> str:
    """
    Derive a round's status from its gameweek.

    The complete flag always wins. A round whose gameweek has passed counts as
    complete even if the flag was never set.
    """
    if is_complete:
        return COMPLETE
    if round_gameweek < current_gameweek:
        return COMPLETE
    if round_gameweek == current_gameweek:
        return LIVE
    return UPCOMING


def get_round_status_display(status: str) -> str:
    return _ROUND_STATUS_LABELS[status]


def get_round_statuses(tournament: Tournament, current_gameweek: Optional[int] = None) -> List[Dict]:
    if current_gameweek is None:
        current_gameweek = tournament.current_gameweek
    if current_gameweek is None:
        # No gameweek signal yet: nothing has started
        current_gameweek = tournament.start_gameweek - 1

    statuses = []
    for round_ in tournament.rounds:
        status = get_round_status(round_.gameweek, current_gameweek, round_.is_complete)
        statuses.append({
            'round_number': round_.round_number,
            'name': round_.name,
            'gameweek': round_.gameweek,
            'status': status,
            'label': get_round_status_display(status),
        })
    return statuses


def calculate_remaining_participants(rounds: List[Round]) -> int:
    """
    Count participants still in the tournament.

    Everyone who ever sat in a slot is an entrant; an entrant is out once they
    appear in a decided, non-bye match they did not win.
    """
    all_participants = set()
    eliminated = set()

    for round_ in rounds:
        for match in round_.matches:
            for player in match.players:
                all_participants.add(player.entry_id)

            if match.winner_id is None or match.is_bye:
                continue
            for player in match.players:
                if player.entry_id != match.winner_id:
                    eliminated.add(player.entry_id)

    return len(all_participants) - len(eliminated)


def get_user_status(eliminated_round: Optional[int], tournament_complete: bool) -> str:
    if eliminated_round is not None:
        return USER_ELIMINATED
    if tournament_complete:
        return USER_WINNER
    return USER_IN


def find_eliminated_round(rounds: List[Round], entry_id) -> Optional[int]:
    """Round number in which the entry lost, or None if they never lost."""
    for round_ in rounds:
        for match in round_.matches:
            if match.winner_id is None or match.is_bye:
                continue
            if match.get_player(entry_id) is not None and match.winner_id != entry_id:
                return round_.round_number
    return None


def _other_feeders(tournament: Tournament, match: Match, round_number: int) -> List[Match]:
    """Matches other than `match` whose winners join it in the next round."""
    if tournament.match_size > 2:
        next_position = match.position // tournament.match_size
        feeders = get_feeder_matches(tournament.rounds, round_number + 1, next_position)
        return [m for m in feeders if m.match_id != match.match_id]

    sibling = find_sibling_match(tournament.rounds, match, round_number)
    return [sibling[0]] if sibling is not None else []


def get_entry_overview(tournament: Tournament, entry_id) -> Optional[Dict]:
    """
    Everything an entry wants to know about their tournament: status, their
    latest match and who they could face next: the entrants of the other
    matches feeding the same next-round match.
    """
    participant = tournament.get_participant(entry_id)
    if participant is None:
        return None

    eliminated_round = find_eliminated_round(tournament.rounds, entry_id)
    status = get_user_status(eliminated_round, tournament.is_complete)

    latest_match = None
    latest_round = None
    for round_ in tournament.rounds:
        for match in round_.matches:
            if match.get_player(entry_id) is not None:
                latest_match, latest_round = match, round_

    possible_opponents = []
    if latest_match is not None and status == USER_IN:
        for other in _other_feeders(tournament, latest_match, latest_round.round_number):
            if other.winner_id is not None:
                possible_opponents.extend(p for p in other.players if p.entry_id == other.winner_id)
            else:
                possible_opponents.extend(other.players)

    return {
        'participant': participant.to_dict(),
        'status': status,
        'eliminated_round': eliminated_round,
        'current_round': latest_round.round_number if latest_round else None,
        'current_match': latest_match.to_dict() if latest_match else None,
        'possible_opponents': [p.to_dict() for p in possible_opponents],
    }
