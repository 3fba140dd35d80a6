"""
Knockout persistence: round-1 generation and applying progression diffs.

Decisions come from the pure bracket_progression module; this module only
loads rows, calls it, and writes the result back.
"""
import logging
from typing import List

from sqlmodel import Session, func, select

from ttleague.models.match import KNOCKOUT_PHASES, PHASE_LEAGUE, STATUS_COMPLETED, Match
from ttleague.models.player import Player
from ttleague.services.bracket_progression import (
    MIN_PLAYERS_FOR_KNOCKOUT,
    KnockoutRoundUpdates,
    NewMatch,
    build_round1_matches,
    get_knockout_round_updates,
)
from ttleague.services.standings import PlayerStanding, calculate_standings
from ttleague.utils.sql import scalar_int

logger = logging.getLogger(__name__)


class KnockoutGenerationError(Exception):
    """Raised when round 1 cannot be generated from the current league."""
    pass


class KnockoutExistsError(KnockoutGenerationError):
    pass


def load_standings(session: Session) -> List[PlayerStanding]:
    """Current league standings, recomputed from completed league matches."""
    players = session.exec(select(Player).order_by(Player.id)).all()
    league_matches = session.exec(
        select(Match).where(Match.phase == PHASE_LEAGUE, Match.status == STATUS_COMPLETED)
    ).all()
    return calculate_standings(players, league_matches)


def load_knockout_matches(session: Session) -> List[Match]:
    return list(
        session.exec(
            select(Match).where(Match.phase.in_(KNOCKOUT_PHASES)).order_by(Match.id)
        ).all()
    )


def count_knockout_matches(session: Session) -> int:
    return scalar_int(
        session.exec(select(func.count()).select_from(Match).where(Match.phase.in_(KNOCKOUT_PHASES))).one()
    )


def _to_row(new_match: NewMatch) -> Match:
    return Match(
        player1_id=new_match.player1_id,
        player2_id=new_match.player2_id,
        phase=new_match.phase,
        status=new_match.status,
        knockout_position=new_match.knockout_position,
    )


def generate_round1(session: Session) -> List[Match]:
    """Create the four round-1 matches (3v10, 4v9, 5v8, 6v7).

    Raises KnockoutExistsError if any knockout match exists and
    KnockoutGenerationError with fewer than 10 ranked players.
    """
    if count_knockout_matches(session) > 0:
        raise KnockoutExistsError("Knockout matches already exist. Delete them first to regenerate.")

    standings = load_standings(session)
    if len(standings) < MIN_PLAYERS_FOR_KNOCKOUT:
        raise KnockoutGenerationError(
            f"Need at least {MIN_PLAYERS_FOR_KNOCKOUT} players with completed matches to generate knockout"
        )

    rows = [_to_row(m) for m in build_round1_matches(standings)]
    for row in rows:
        session.add(row)
    session.commit()
    for row in rows:
        session.refresh(row)

    logger.info(f"Generated knockout round 1: {len(rows)} matches")
    return rows


def apply_knockout_updates(session: Session, updates: KnockoutRoundUpdates) -> List[Match]:
    """Delete stale scheduled matches, insert new ones, single commit. Returns inserted rows."""
    if updates.is_empty:
        return []

    for match_id in updates.deletes:
        match = session.get(Match, match_id)
        # Completed matches are never removed, even if asked to
        if match is not None and match.status != STATUS_COMPLETED:
            session.delete(match)

    rows = [_to_row(m) for m in updates.inserts]
    for row in rows:
        session.add(row)
    session.commit()
    for row in rows:
        session.refresh(row)

    logger.info(
        f"Knockout bracket updated: {len(rows)} inserted, {len(updates.deletes)} deleted "
        f"(deleted ids: {updates.deletes})"
    )
    return rows


def sync_knockout_bracket(session: Session) -> KnockoutRoundUpdates:
    """Recompute the knockout diff from stored results and apply it."""
    updates = get_knockout_round_updates(load_knockout_matches(session), load_standings(session))
    apply_knockout_updates(session, updates)
    return updates
