"""
Knockout bracket progression: fixed topology, recomputed from the match table.

  R1 (slots 1-4):  3v10, 4v9, 5v8, 6v7
  R2 (slots 1-2):  W(R1#1) v W(R1#2), W(R1#3) v W(R1#4)   (bracket path, no reseeding)
  SF (slots 1-2):  1st v W(R2#1), 2nd v W(R2#2)
  Final:           W(SF#1) v W(SF#2)

get_knockout_round_updates() is pure: it returns the inserts/deletes needed to
bring each next round in line with the completed round before it. Callers
apply the diff (see knockout_service).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence

from ttleague.models.match import (
    PHASE_FINAL,
    PHASE_KNOCKOUT_R1,
    PHASE_KNOCKOUT_R2,
    PHASE_SEMIFINAL,
    STATUS_COMPLETED,
    STATUS_SCHEDULED,
    Match,
)
from ttleague.services.standings import PlayerStanding

logger = logging.getLogger(__name__)

# Matches per knockout phase
EXPECTED_MATCH_COUNT: Dict[str, int] = {
    PHASE_KNOCKOUT_R1: 4,
    PHASE_KNOCKOUT_R2: 2,
    PHASE_SEMIFINAL: 2,
    PHASE_FINAL: 1,
}

# phase -> phase its winners advance into
NEXT_PHASE: Dict[str, str] = {
    PHASE_KNOCKOUT_R1: PHASE_KNOCKOUT_R2,
    PHASE_KNOCKOUT_R2: PHASE_SEMIFINAL,
    PHASE_SEMIFINAL: PHASE_FINAL,
}

# Round 1 pairings as 0-based standings indexes, in slot order
ROUND1_SEEDING = [(2, 9), (3, 8), (4, 7), (5, 6)]
MIN_PLAYERS_FOR_KNOCKOUT = 10


@dataclass
class NewMatch:
    player1_id: int
    player2_id: int
    phase: str
    knockout_position: Optional[int] = None
    status: str = STATUS_SCHEDULED


@dataclass
class KnockoutRoundUpdates:
    inserts: List[NewMatch] = field(default_factory=list)
    deletes: List[int] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.inserts and not self.deletes


def build_round1_matches(standings: Sequence[PlayerStanding]) -> List[NewMatch]:
    """Round 1 from league ranks 3-10. Caller guarantees at least 10 standings."""
    return [
        NewMatch(
            player1_id=standings[high].player.id,
            player2_id=standings[low].player.id,
            phase=PHASE_KNOCKOUT_R1,
            knockout_position=slot,
        )
        for slot, (high, low) in enumerate(ROUND1_SEEDING, start=1)
    ]


def ordered_by_slot(matches: Iterable[Match]) -> List[Match]:
    """Slot order; matches without a knockout_position go last in input order."""
    return sorted(
        matches,
        key=lambda m: (m.knockout_position is None, m.knockout_position or 0),
    )


def _pair_key(player1_id: int, player2_id: int) -> FrozenSet[int]:
    return frozenset((player1_id, player2_id))


def _round_winners(phase_matches: List[Match], phase: str) -> Optional[List[int]]:
    """Winner ids in slot order, or None while the round is incomplete."""
    if len(phase_matches) != EXPECTED_MATCH_COUNT[phase]:
        return None
    winners: List[int] = []
    for match in ordered_by_slot(phase_matches):
        if match.status != STATUS_COMPLETED or match.winner_id is None:
            return None
        winners.append(match.winner_id)
    return winners


def _build_matchups(
    next_phase: str, winners: List[int], standings: Sequence[PlayerStanding]
) -> Optional[List[NewMatch]]:
    if next_phase == PHASE_KNOCKOUT_R2:
        return [
            NewMatch(winners[0], winners[1], next_phase, knockout_position=1),
            NewMatch(winners[2], winners[3], next_phase, knockout_position=2),
        ]
    if next_phase == PHASE_SEMIFINAL:
        if len(standings) < 2:
            logger.warning(f"Semifinal needs two bye players, standings has {len(standings)}; skipping")
            return None
        return [
            NewMatch(standings[0].player.id, winners[0], next_phase, knockout_position=1),
            NewMatch(standings[1].player.id, winners[1], next_phase, knockout_position=2),
        ]
    if next_phase == PHASE_FINAL:
        return [NewMatch(winners[0], winners[1], next_phase)]
    return None


def _expected_matchups(
    next_phase: str, winners: List[int], standings: Sequence[PlayerStanding]
) -> Optional[List[NewMatch]]:
    """Pairings the next round should hold, or None when it cannot be built.

    A player appears at most once per round. Standings can still move while
    the knockout runs (late league results), so a bye player may also be a
    round-2 winner; that round is skipped instead of pairing a player with
    themselves.
    """
    matchups = _build_matchups(next_phase, winners, standings)
    if matchups is None:
        return None

    player_ids = [pid for m in matchups for pid in (m.player1_id, m.player2_id)]
    if len(set(player_ids)) != len(player_ids):
        logger.warning(f"{next_phase} would repeat a player {player_ids}; skipping")
        return None
    return matchups


def get_knockout_round_updates(
    knockout_matches: Iterable[Match], standings: Sequence[PlayerStanding]
) -> KnockoutRoundUpdates:
    """Diff between the knockout rounds that exist and the rounds that should exist.

    Each transition (R1→R2, R2→SF, SF→Final) is evaluated on its own and fires
    only once the current round has exactly its expected number of matches,
    all completed with a winner. Expected pairings already present (either
    status, either player order) are left alone. Scheduled next-round matches
    that no longer match an expected pairing are deleted; completed ones never
    are. Never raises: an incomplete transition, or one that would pair a
    player twice in the same round, just contributes nothing.
    """
    by_phase: Dict[str, List[Match]] = {phase: [] for phase in EXPECTED_MATCH_COUNT}
    for match in knockout_matches:
        if match.phase in by_phase:
            by_phase[match.phase].append(match)

    updates = KnockoutRoundUpdates()

    for phase, next_phase in NEXT_PHASE.items():
        winners = _round_winners(by_phase[phase], phase)
        if winners is None:
            continue

        expected = _expected_matchups(next_phase, winners, standings)
        if expected is None:
            continue

        existing = by_phase[next_phase]
        existing_keys = {_pair_key(m.player1_id, m.player2_id) for m in existing}
        expected_keys = {_pair_key(m.player1_id, m.player2_id) for m in expected}

        for new_match in expected:
            if _pair_key(new_match.player1_id, new_match.player2_id) not in existing_keys:
                updates.inserts.append(new_match)

        for match in existing:
            if match.status != STATUS_SCHEDULED:
                continue
            if _pair_key(match.player1_id, match.player2_id) not in expected_keys:
                updates.deletes.append(match.id)

    return updates
