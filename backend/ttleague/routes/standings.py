"""
League standings and league progress.
Standings are recomputed from completed league matches on every request.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlmodel import Session, func, select

from ttleague.database import get_session
from ttleague.models.match import PHASE_LEAGUE, STATUS_COMPLETED, STATUS_SCHEDULED, Match
from ttleague.models.player import Player
from ttleague.routes.matches import PlayerSummary
from ttleague.services.knockout_service import load_standings
from ttleague.services.recommendations import generate_unplayed_league_matchups
from ttleague.services.standings import PlayerStanding
from ttleague.utils.sql import scalar_int

router = APIRouter()


class StandingResponse(BaseModel):
    rank: int
    player: PlayerSummary
    matches_played: int
    wins: int
    losses: int
    points: int
    sets_won: int
    sets_lost: int
    set_diff: int
    points_scored: int
    points_conceded: int
    point_diff: int


class LeagueProgressResponse(BaseModel):
    player_count: int
    completed: int
    scheduled: int
    total: int
    remaining: int


class UnplayedMatchup(BaseModel):
    player1: PlayerSummary
    player2: PlayerSummary


def standing_to_response(s: PlayerStanding) -> StandingResponse:
    return StandingResponse(
        rank=s.rank,
        player=PlayerSummary.model_validate(s.player),
        matches_played=s.matches_played,
        wins=s.wins,
        losses=s.losses,
        points=s.points,
        sets_won=s.sets_won,
        sets_lost=s.sets_lost,
        set_diff=s.set_diff,
        points_scored=s.points_scored,
        points_conceded=s.points_conceded,
        point_diff=s.point_diff,
    )


@router.get("/standings", response_model=List[StandingResponse])
def get_standings(
    limit: Optional[int] = Query(None, ge=1, description="Top N only"),
    session: Session = Depends(get_session),
):
    """
    Ranked standings.

    Tie breakers, in order: points, head-to-head between the two tied
    players, set difference, points scored.
    """
    standings = load_standings(session)
    if limit is not None:
        standings = standings[:limit]
    return [standing_to_response(s) for s in standings]


def _count_league(session: Session, status: str) -> int:
    return scalar_int(
        session.exec(
            select(func.count()).select_from(Match).where(Match.phase == PHASE_LEAGUE, Match.status == status)
        ).one()
    )


@router.get("/league/progress", response_model=LeagueProgressResponse)
def get_league_progress(session: Session = Depends(get_session)):
    """Completed league matches against a full single round robin."""
    player_count = scalar_int(session.exec(select(func.count()).select_from(Player)).one())
    completed = _count_league(session, STATUS_COMPLETED)
    total = player_count * (player_count - 1) // 2

    return LeagueProgressResponse(
        player_count=player_count,
        completed=completed,
        scheduled=_count_league(session, STATUS_SCHEDULED),
        total=total,
        remaining=max(total - completed, 0),
    )


@router.get("/league/unplayed", response_model=List[UnplayedMatchup])
def get_unplayed_matchups(session: Session = Depends(get_session)):
    """Pairs of players who have not completed a league match against each other."""
    players = session.exec(select(Player).order_by(Player.name)).all()
    completed = session.exec(
        select(Match).where(Match.phase == PHASE_LEAGUE, Match.status == STATUS_COMPLETED)
    ).all()

    return [
        UnplayedMatchup(player1=PlayerSummary.model_validate(a), player2=PlayerSummary.model_validate(b))
        for a, b in generate_unplayed_league_matchups(players, completed)
    ]
