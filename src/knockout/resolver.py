"""
Match resolution.

Entries are ranked with the FPL tiebreaker cascade, each criterion only
consulted when the previous one is tied:
1. Points (higher is better)
2. Transfer cost (lower is better)
3. Bench points (higher is better)
4. Seed (lower is better), so no tie survives
"""
import logging
from typing import Dict, List, Optional

from knockout.models import EntryScore, Match, MatchResult, PlayerRanking, PlayerScore

logger = logging.getLogger(__name__)


def tiebreak_key(score: PlayerScore):
    return (-score.points, score.transfer_cost, -score.bench_points, score.seed)


def resolve_match(match_id, scores: List[PlayerScore]) -> Optional[MatchResult]:
    """
    Resolve a 2-way or N-way match from the scores of every entry in it.

    Returns None when there are no scores yet. A single score auto-advances.
    decided_by_tiebreaker is True when any other entry has the winner's
    points, whatever happened further down the ranking.
    """
    if not scores:
        return None

    if len(scores) == 1:
        only = scores[0]
        return MatchResult(
            match_id=match_id,
            winner_id=only.entry_id,
            rankings=[PlayerRanking(entry_id=only.entry_id, rank=1, points=only.points)],
            decided_by_tiebreaker=False,
        )

    ranked = sorted(scores, key=tiebreak_key)

    winner_points = ranked[0].points
    decided_by_tiebreaker = any(s.points == winner_points for s in ranked[1:])

    rankings = [
        PlayerRanking(entry_id=s.entry_id, rank=index, points=s.points)
        for index, s in enumerate(ranked, start=1)
    ]

    return MatchResult(
        match_id=match_id,
        winner_id=ranked[0].entry_id,
        rankings=rankings,
        decided_by_tiebreaker=decided_by_tiebreaker,
    )


def collect_match_scores(match: Match, entry_scores: Dict[int, EntryScore]) -> Optional[List[PlayerScore]]:
    """
    Build the score list for every occupied slot of a match.

    Returns None if any entry in the match has no score: a match is only ever
    resolved with all of its scores at once.
    """
    missing = [p.entry_id for p in match.players if p.entry_id not in entry_scores]
    if missing:
        logger.warning(f"Match {match.match_id}: cannot resolve, missing scores for entry IDs: "
                       f"{', '.join(str(e) for e in missing)}")
        return None

    scores = []
    for player in match.players:
        entry_score = entry_scores[player.entry_id]
        scores.append(PlayerScore(
            entry_id=player.entry_id,
            slot=player.slot,
            seed=player.seed,
            points=entry_score.points,
            transfer_cost=entry_score.transfer_cost,
            bench_points=entry_score.bench_points,
        ))
    return scores
