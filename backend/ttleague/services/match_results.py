"""
Best-of-three result evaluation for submitted set scores.

Sets 1 and 2 are always played; set 3 is optional and must be given with
both sides or not at all. One side must take two sets, otherwise the
submission is rejected.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ttleague.models.match import Match
from ttleague.services.standings import get_set_scores

SETS_TO_WIN = 2

SetPair = Tuple[Optional[int], Optional[int]]


class MatchResultError(Exception):
    """Raised when a submitted result cannot be accepted."""
    pass


@dataclass
class ResultOutcome:
    sets: List[Tuple[int, int]]  # (player1, player2) per contested set
    player1_sets_won: int
    player2_sets_won: int

    @property
    def player1_won(self) -> bool:
        return self.player1_sets_won > self.player2_sets_won


def evaluate_result(sets: List[SetPair]) -> ResultOutcome:
    """Validate up to three (player1, player2) set scores and count sets won.

    Raises MatchResultError if a required set is missing, a score is
    negative, set 3 is half-filled, or neither side reached two sets.
    """
    if len(sets) < 2 or len(sets) > 3:
        raise MatchResultError("A result needs two or three sets")

    contested: List[Tuple[int, int]] = []
    for index, (p1, p2) in enumerate(sets, start=1):
        if p1 is None and p2 is None and index == 3:
            continue
        if p1 is None or p2 is None:
            raise MatchResultError(f"Set {index} needs a score for both players")
        if p1 < 0 or p2 < 0:
            raise MatchResultError(f"Set {index} scores must be non-negative")
        contested.append((p1, p2))

    p1_sets = sum(1 for a, b in contested if a > b)
    p2_sets = sum(1 for a, b in contested if b > a)

    if p1_sets < SETS_TO_WIN and p2_sets < SETS_TO_WIN:
        raise MatchResultError("Match must have a winner (best of 3 sets)")

    return ResultOutcome(
        sets=contested,
        player1_sets_won=p1_sets,
        player2_sets_won=p2_sets,
    )


def apply_outcome(match: Match, outcome: ResultOutcome) -> None:
    """Copy set scores and winner onto the match (no commit)."""
    padded: List[SetPair] = list(outcome.sets) + [(None, None)] * (3 - len(outcome.sets))
    (match.set1_p1, match.set1_p2), (match.set2_p1, match.set2_p2), (match.set3_p1, match.set3_p2) = padded
    match.winner_id = match.player1_id if outcome.player1_won else match.player2_id


def format_set_scores(match: Match) -> str:
    """'11-5, 9-11, 11-7' style summary; empty string when no set was played."""
    return ", ".join(f"{a}-{b}" for a, b in get_set_scores(match))
