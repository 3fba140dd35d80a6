"""
Weekly match suggestions and unplayed league pairings.

generate_recommendations() gives every selected player one match, preferring
opponents they have not met in the league yet. With an odd number of
players the last one gets a second (extra) match.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Sequence, Set, Tuple

from ttleague.models.match import Match
from ttleague.models.player import Player


@dataclass
class RecommendedMatch:
    player1_id: int
    player2_id: int
    is_extra_match: bool = False


def _pair_key(a: int, b: int) -> FrozenSet[int]:
    return frozenset((a, b))


def build_played_pairs(matches: Iterable[Match]) -> Set[FrozenSet[int]]:
    return {_pair_key(m.player1_id, m.player2_id) for m in matches}


def generate_unplayed_league_matchups(
    players: Sequence[Player], completed_matches: Iterable[Match]
) -> List[Tuple[Player, Player]]:
    """Every pair (in player order) that has no completed league match yet."""
    played = build_played_pairs(completed_matches)
    matchups: List[Tuple[Player, Player]] = []
    for i in range(len(players)):
        for j in range(i + 1, len(players)):
            if _pair_key(players[i].id, players[j].id) not in played:
                matchups.append((players[i], players[j]))
    return matchups


def generate_recommendations(
    selected_players: Sequence[Player], completed_league_matches: Iterable[Match]
) -> List[RecommendedMatch]:
    if len(selected_players) < 2:
        return []

    completed = list(completed_league_matches)
    played = build_played_pairs(completed)
    unplayed = generate_unplayed_league_matchups(selected_players, completed)

    recommendations: List[RecommendedMatch] = []
    used: Set[int] = set()

    # Greedy: first unplayed pair whose players are both still free
    for p1, p2 in unplayed:
        if p1.id not in used and p2.id not in used:
            recommendations.append(RecommendedMatch(p1.id, p2.id))
            used.add(p1.id)
            used.add(p2.id)

    # Whoever is left gets paired in order, even if they met before
    remaining = [p for p in selected_players if p.id not in used]
    while len(remaining) >= 2:
        p1 = remaining.pop(0)
        p2 = remaining.pop(0)
        recommendations.append(RecommendedMatch(p1.id, p2.id))

    if len(remaining) == 1:
        odd = remaining[0]
        opponent = next(
            (p for p in selected_players if p.id != odd.id and _pair_key(odd.id, p.id) not in played),
            None,
        )
        if opponent is None:
            opponent = next((p for p in selected_players if p.id != odd.id), None)
        if opponent is not None:
            recommendations.append(RecommendedMatch(odd.id, opponent.id, is_extra_match=True))

    return recommendations
