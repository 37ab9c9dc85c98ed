from typing import Dict, List, Optional


class _Model:
    """Value semantics shared by every model: equality over to_dict()."""

    def to_dict(self) -> Dict:
        raise NotImplementedError

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None


class Participant(_Model):
    def __init__(self, entry_id, team_name, manager_name='', seed=None,
                 league_rank=None, league_points=None):
        self.entry_id = entry_id
        self.team_name = team_name
        self.manager_name = manager_name
        self.seed = seed
        self.league_rank = league_rank
        self.league_points = league_points

    def to_dict(self) -> Dict:
        return {
            'entry_id': self.entry_id,
            'team_name': self.team_name,
            'manager_name': self.manager_name,
            'seed': self.seed,
            'league_rank': self.league_rank,
            'league_points': self.league_points,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Participant':
        return cls(
            entry_id=data['entry_id'],
            team_name=data.get('team_name', ''),
            manager_name=data.get('manager_name', ''),
            seed=data.get('seed'),
            league_rank=data.get('league_rank'),
            league_points=data.get('league_points'),
        )

    def __repr__(self):
        return f"Participant(entry_id={self.entry_id}, team_name={self.team_name}, seed={self.seed})"


class MatchPlayer(_Model):
    """An occupied match slot. `slot` is 1-based."""

    def __init__(self, entry_id, seed, slot, score=None, team_name='', manager_name=''):
        self.entry_id = entry_id
        self.seed = seed
        self.slot = slot
        self.score = score
        self.team_name = team_name
        self.manager_name = manager_name

    @classmethod
    def from_participant(cls, participant: Participant, slot: int) -> 'MatchPlayer':
        return cls(
            entry_id=participant.entry_id,
            seed=participant.seed,
            slot=slot,
            team_name=participant.team_name,
            manager_name=participant.manager_name,
        )

    def to_dict(self) -> Dict:
        return {
            'entry_id': self.entry_id,
            'seed': self.seed,
            'slot': self.slot,
            'score': self.score,
            'team_name': self.team_name,
            'manager_name': self.manager_name,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'MatchPlayer':
        return cls(
            entry_id=data['entry_id'],
            seed=data.get('seed'),
            slot=data['slot'],
            score=data.get('score'),
            team_name=data.get('team_name', ''),
            manager_name=data.get('manager_name', ''),
        )

    def __repr__(self):
        return f"MatchPlayer(entry_id={self.entry_id}, seed={self.seed}, slot={self.slot}, score={self.score})"


class Match(_Model):
    def __init__(self, match_id, round_number, position, slots=None, is_bye=False,
                 winner_id=None, updated_at=None):
        self.match_id = match_id
        self.round_number = round_number
        self.position = position
        self.slots: List[Optional[MatchPlayer]] = slots if slots is not None else [None, None]
        self.is_bye = is_bye
        self.winner_id = winner_id
        self.updated_at = updated_at

    @property
    def players(self) -> List[MatchPlayer]:
        return [player for player in self.slots if player is not None]

    @property
    def entry_ids(self) -> List[int]:
        return [player.entry_id for player in self.players]

    @property
    def is_resolved(self) -> bool:
        return self.winner_id is not None

    @property
    def is_ready(self) -> bool:
        """True when every slot is filled. N-way groups may play with an empty slot."""
        return not self.is_bye and all(player is not None for player in self.slots)

    def get_player(self, entry_id) -> Optional[MatchPlayer]:
        for player in self.players:
            if player.entry_id == entry_id:
                return player
        return None

    def to_dict(self) -> Dict:
        return {
            'match_id': self.match_id,
            'round_number': self.round_number,
            'position': self.position,
            'slots': [player.to_dict() if player else None for player in self.slots],
            'is_bye': self.is_bye,
            'winner_id': self.winner_id,
            'updated_at': self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Match':
        return cls(
            match_id=data['match_id'],
            round_number=data['round_number'],
            position=data['position'],
            slots=[MatchPlayer.from_dict(p) if p else None for p in data.get('slots', [])],
            is_bye=data.get('is_bye', False),
            winner_id=data.get('winner_id'),
            updated_at=data.get('updated_at'),
        )

    def __repr__(self):
        return (f"Match(match_id={self.match_id}, round={self.round_number}, position={self.position}, "
                f"entries={self.entry_ids}, is_bye={self.is_bye}, winner_id={self.winner_id})")


class Round(_Model):
    def __init__(self, round_number, name, gameweek, matches=None, is_complete=False):
        self.round_number = round_number
        self.name = name
        self.gameweek = gameweek
        self.matches: List[Match] = matches if matches is not None else []
        self.is_complete = is_complete

    def to_dict(self) -> Dict:
        return {
            'round_number': self.round_number,
            'name': self.name,
            'gameweek': self.gameweek,
            'matches': [match.to_dict() for match in self.matches],
            'is_complete': self.is_complete,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Round':
        return cls(
            round_number=data['round_number'],
            name=data['name'],
            gameweek=data['gameweek'],
            matches=[Match.from_dict(m) for m in data.get('matches', [])],
            is_complete=data.get('is_complete', False),
        )

    def __repr__(self):
        return (f"Round(round_number={self.round_number}, name={self.name}, gameweek={self.gameweek}, "
                f"matches={len(self.matches)}, is_complete={self.is_complete})")


class Tournament(_Model):
    ACTIVE = 'active'
    COMPLETED = 'completed'

    def __init__(self, tournament_id, league_id, league_name, participants, rounds,
                 start_gameweek, current_round=1, current_gameweek=None, match_size=2,
                 status=ACTIVE, winner_id=None, created_at=None, updated_at=None):
        self.tournament_id = tournament_id
        self.league_id = league_id
        self.league_name = league_name
        self.participants: List[Participant] = participants
        self.rounds: List[Round] = rounds
        self.start_gameweek = start_gameweek
        self.current_round = current_round
        self.current_gameweek = current_gameweek
        self.match_size = match_size
        self.status = status
        self.winner_id = winner_id
        self.created_at = created_at
        self.updated_at = updated_at

    @property
    def total_rounds(self) -> int:
        return len(self.rounds)

    @property
    def participant_count(self) -> int:
        return len(self.participants)

    @property
    def is_complete(self) -> bool:
        return self.status == self.COMPLETED

    def get_round(self, round_number) -> Optional[Round]:
        for round_ in self.rounds:
            if round_.round_number == round_number:
                return round_
        return None

    def get_participant(self, entry_id) -> Optional[Participant]:
        for participant in self.participants:
            if participant.entry_id == entry_id:
                return participant
        return None

    def to_dict(self) -> Dict:
        return {
            'tournament_id': self.tournament_id,
            'league_id': self.league_id,
            'league_name': self.league_name,
            'participants': [p.to_dict() for p in self.participants],
            'rounds': [r.to_dict() for r in self.rounds],
            'start_gameweek': self.start_gameweek,
            'current_round': self.current_round,
            'current_gameweek': self.current_gameweek,
            'match_size': self.match_size,
            'total_rounds': self.total_rounds,
            'status': self.status,
            'winner_id': self.winner_id,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Tournament':
        return cls(
            tournament_id=data['tournament_id'],
            league_id=data.get('league_id'),
            league_name=data.get('league_name', ''),
            participants=[Participant.from_dict(p) for p in data.get('participants', [])],
            rounds=[Round.from_dict(r) for r in data.get('rounds', [])],
            start_gameweek=data['start_gameweek'],
            current_round=data.get('current_round', 1),
            current_gameweek=data.get('current_gameweek'),
            match_size=data.get('match_size', 2),
            status=data.get('status', cls.ACTIVE),
            winner_id=data.get('winner_id'),
            created_at=data.get('created_at'),
            updated_at=data.get('updated_at'),
        )

    def __repr__(self):
        return (f"Tournament(tournament_id={self.tournament_id}, league={self.league_name}, "
                f"participants={self.participant_count}, status={self.status})")


class PlayerScore(_Model):
    def __init__(self, entry_id, slot, seed, points, transfer_cost=0, bench_points=0):
        self.entry_id = entry_id
        self.slot = slot
        self.seed = seed
        self.points = points
        self.transfer_cost = transfer_cost
        self.bench_points = bench_points

    def to_dict(self) -> Dict:
        return {
            'entry_id': self.entry_id,
            'slot': self.slot,
            'seed': self.seed,
            'points': self.points,
            'transfer_cost': self.transfer_cost,
            'bench_points': self.bench_points,
        }

    def __repr__(self):
        return (f"PlayerScore(entry_id={self.entry_id}, seed={self.seed}, points={self.points}, "
                f"transfer_cost={self.transfer_cost}, bench_points={self.bench_points})")


class PlayerRanking(_Model):
    def __init__(self, entry_id, rank, points):
        self.entry_id = entry_id
        self.rank = rank
        self.points = points

    def to_dict(self) -> Dict:
        return {'entry_id': self.entry_id, 'rank': self.rank, 'points': self.points}

    def __repr__(self):
        return f"PlayerRanking(entry_id={self.entry_id}, rank={self.rank}, points={self.points})"


class MatchResult(_Model):
    def __init__(self, match_id, winner_id, rankings, decided_by_tiebreaker=False):
        self.match_id = match_id
        self.winner_id = winner_id
        self.rankings: List[PlayerRanking] = rankings
        self.decided_by_tiebreaker = decided_by_tiebreaker

    def to_dict(self) -> Dict:
        return {
            'match_id': self.match_id,
            'winner_id': self.winner_id,
            'rankings': [r.to_dict() for r in self.rankings],
            'decided_by_tiebreaker': self.decided_by_tiebreaker,
        }

    def __repr__(self):
        return (f"MatchResult(match_id={self.match_id}, winner_id={self.winner_id}, "
                f"decided_by_tiebreaker={self.decided_by_tiebreaker})")


class EntryScore(_Model):
    """One entry's score for one gameweek, as delivered by a score source."""

    def __init__(self, entry_id, points, transfer_cost=0, bench_points=0):
        self.entry_id = entry_id
        self.points = points
        self.transfer_cost = transfer_cost
        self.bench_points = bench_points

    def to_dict(self) -> Dict:
        return {
            'entry_id': self.entry_id,
            'points': self.points,
            'transfer_cost': self.transfer_cost,
            'bench_points': self.bench_points,
        }

    def __repr__(self):
        return f"EntryScore(entry_id={self.entry_id}, points={self.points})"
