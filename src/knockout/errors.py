"""
Errors raised by the bracket engine.
"""


class BracketError(ValueError):
    """Base class for invalid bracket input or state."""


class InvalidParticipantCount(BracketError):
    def __init__(self, count, minimum=1, maximum=None):
        self.count = count
        if maximum is not None and count > maximum:
            message = f"Tournament allows at most {maximum} participants, got {count}"
        else:
            message = f"Tournament needs at least {minimum} participant(s), got {count}"
        super().__init__(message)


class DuplicateSeed(BracketError):
    def __init__(self, seed):
        self.seed = seed
        super().__init__(f"Seed {seed} is assigned to more than one participant")


class NonContiguousSeeds(BracketError):
    def __init__(self, missing):
        self.missing = sorted(missing)
        super().__init__(f"Seeds must run 1..N without gaps, missing {self.missing}")


class InvalidMatchSize(BracketError):
    def __init__(self, match_size):
        self.match_size = match_size
        super().__init__(f"Match size must be at least 2, got {match_size}")


class MatchNotFound(BracketError):
    def __init__(self, round_number, position):
        self.round_number = round_number
        self.position = position
        super().__init__(f"No match at position {position} in round {round_number}")


class InvalidWinner(BracketError):
    def __init__(self, match_id, winner_id):
        self.match_id = match_id
        self.winner_id = winner_id
        super().__init__(f"Entry {winner_id} is not playing in match {match_id}")


class WinnerAlreadyRecorded(BracketError):
    def __init__(self, match_id, existing_winner_id, winner_id):
        self.match_id = match_id
        self.existing_winner_id = existing_winner_id
        self.winner_id = winner_id
        super().__init__(
            f"Match {match_id} already has winner {existing_winner_id}, cannot record {winner_id}"
        )
