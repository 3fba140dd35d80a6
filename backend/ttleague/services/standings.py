"""
League standings from completed round-robin matches.

Order: tournament points → head-to-head (pairwise) → set difference → points scored.
Tournament points for a win depend on the loser's tier, so beating a stronger
player is worth more. Recomputed from the full match list on every call.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cmp_to_key
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ttleague.models.match import PHASE_LEAGUE, STATUS_COMPLETED, Match
from ttleague.models.player import Player

# Points awarded to the winner, keyed by the loser's tier
TIER_POINTS: Dict[int, int] = {1: 4, 2: 3, 3: 2, 4: 1}


@dataclass
class PlayerStanding:
    player: Player
    rank: int = 0
    matches_played: int = 0
    wins: int = 0
    losses: int = 0
    points: int = 0
    sets_won: int = 0
    sets_lost: int = 0
    set_diff: int = 0
    points_scored: int = 0
    points_conceded: int = 0
    point_diff: int = 0


@dataclass
class PlayerStats:
    """Career line for a single player across every completed match."""
    matches_played: int = 0
    wins: int = 0
    losses: int = 0
    points: int = 0
    sets_won: int = 0
    sets_lost: int = 0
    set_diff: int = 0


def get_set_scores(match: Match) -> List[Tuple[int, int]]:
    """(player1, player2) score per contested set, skipping half-filled sets."""
    sets: List[Tuple[int, int]] = []
    for p1, p2 in (
        (match.set1_p1, match.set1_p2),
        (match.set2_p1, match.set2_p2),
        (match.set3_p1, match.set3_p2),
    ):
        if p1 is not None and p2 is not None:
            sets.append((p1, p2))
    return sets


def tier_points(tier: Optional[int]) -> int:
    return TIER_POINTS.get(tier, 0)


def calculate_standings(players: Sequence[Player], matches: Iterable[Match]) -> List[PlayerStanding]:
    """Rank every player from completed league matches.

    Players without a match still appear (zeroed). Knockout and scheduled
    matches are ignored. Sorting is stable, so exact ties keep input order.
    """
    standings_map: Dict[int, PlayerStanding] = {}
    for player in players:
        standings_map[player.id] = PlayerStanding(player=player)

    # head_to_head[winner_id][loser_id] = number of wins
    head_to_head: Dict[int, Dict[int, int]] = {}

    league_matches = [m for m in matches if m.phase == PHASE_LEAGUE and m.status == STATUS_COMPLETED]

    for match in league_matches:
        p1 = standings_map.get(match.player1_id)
        p2 = standings_map.get(match.player2_id)
        if p1 is None or p2 is None:
            continue

        p1.matches_played += 1
        p2.matches_played += 1

        for p1_score, p2_score in get_set_scores(match):
            if p1_score > p2_score:
                p1.sets_won += 1
                p2.sets_lost += 1
            else:
                p2.sets_won += 1
                p1.sets_lost += 1

            p1.points_scored += p1_score
            p1.points_conceded += p2_score
            p2.points_scored += p2_score
            p2.points_conceded += p1_score

        if match.winner_id == match.player1_id:
            winner, loser = p1, p2
        else:
            winner, loser = p2, p1
        winner.wins += 1
        loser.losses += 1
        winner.points += tier_points(loser.player.tier)

        wins_over = head_to_head.setdefault(winner.player.id, {})
        wins_over[loser.player.id] = wins_over.get(loser.player.id, 0) + 1

    standings = list(standings_map.values())
    for s in standings:
        s.set_diff = s.sets_won - s.sets_lost
        s.point_diff = s.points_scored - s.points_conceded

    def compare(a: PlayerStanding, b: PlayerStanding) -> int:
        if a.points != b.points:
            return b.points - a.points

        h2h = _head_to_head_result(a.player.id, b.player.id, head_to_head)
        if h2h != 0:
            return h2h

        if a.set_diff != b.set_diff:
            return b.set_diff - a.set_diff

        return b.points_scored - a.points_scored

    standings.sort(key=cmp_to_key(compare))

    for i, s in enumerate(standings):
        s.rank = i + 1

    return standings


def _head_to_head_result(a_id: int, b_id: int, head_to_head: Dict[int, Dict[int, int]]) -> int:
    """Negative when A has more direct wins over B, positive when B does, 0 when level."""
    a_wins = head_to_head.get(a_id, {}).get(b_id, 0)
    b_wins = head_to_head.get(b_id, {}).get(a_id, 0)
    return b_wins - a_wins


def calculate_player_stats(player_id: int, matches: Iterable[Match]) -> PlayerStats:
    """Stats over all completed matches involving the player.

    Wins, losses and sets count in every phase; tournament points only
    accrue from league wins. Matches need their player1/player2 loaded.
    """
    stats = PlayerStats()

    for match in matches:
        if match.status != STATUS_COMPLETED:
            continue
        if player_id not in (match.player1_id, match.player2_id):
            continue

        is_player1 = match.player1_id == player_id
        opponent = match.player2 if is_player1 else match.player1

        stats.matches_played += 1
        if match.winner_id == player_id:
            stats.wins += 1
            if match.phase == PHASE_LEAGUE and opponent is not None:
                stats.points += tier_points(opponent.tier)
        else:
            stats.losses += 1

        for p1_score, p2_score in get_set_scores(match):
            own, other = (p1_score, p2_score) if is_player1 else (p2_score, p1_score)
            if own > other:
                stats.sets_won += 1
            else:
                stats.sets_lost += 1

    stats.set_diff = stats.sets_won - stats.sets_lost
    return stats
