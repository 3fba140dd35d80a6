"""
Player Management API Routes
CRUD for players, bulk tier assignment, and the player profile.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ttleague.database import get_session
from ttleague.models.match import STATUS_COMPLETED, Match
from ttleague.models.player import Player
from ttleague.models.weekly_recommendation import WeeklyRecommendation
from ttleague.routes.matches import MatchResponse, match_to_response
from ttleague.services.standings import calculate_player_stats

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


def _clean_name(v):
    if v is not None and not v.strip():
        raise ValueError("name cannot be empty")
    return v.strip() if v else v


class PlayerCreateRequest(BaseModel):
    name: str
    department: Optional[str] = None
    tier: int = Field(default=4, ge=1, le=4)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _clean_name(v)


class PlayerUpdateRequest(BaseModel):
    name: Optional[str] = None
    department: Optional[str] = None
    tier: Optional[int] = Field(default=None, ge=1, le=4)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _clean_name(v)


class PlayerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    department: Optional[str] = None
    tier: int
    created_at: datetime
    updated_at: datetime


class TierAssignment(BaseModel):
    player_id: int
    tier: int = Field(ge=1, le=4)


class TierUpdateRequest(BaseModel):
    tiers: List[TierAssignment]


class PlayerStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    matches_played: int
    wins: int
    losses: int
    points: int
    sets_won: int
    sets_lost: int
    set_diff: int


class PlayerProfileResponse(BaseModel):
    player: PlayerResponse
    stats: PlayerStatsResponse
    matches: List[MatchResponse]


def _commit_player(session: Session, player: Player) -> Player:
    name = player.name
    try:
        session.add(player)
        session.commit()
        session.refresh(player)
        return player
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail=f"Player with name '{name}' already exists")


# ============================================================================
# Player Endpoints
# ============================================================================


@router.get("/players", response_model=List[PlayerResponse])
def get_players(session: Session = Depends(get_session)):
    """All players, by name."""
    return session.exec(select(Player).order_by(Player.name)).all()


@router.post("/players", response_model=PlayerResponse, status_code=201)
def create_player(request: PlayerCreateRequest, session: Session = Depends(get_session)):
    player = Player(name=request.name, department=request.department, tier=request.tier)
    return _commit_player(session, player)


@router.put("/players/tiers", response_model=List[PlayerResponse])
def update_tiers(request: TierUpdateRequest, session: Session = Depends(get_session)):
    """
    Assign tiers to many players at once.

    Tier sets the points an opponent earns for beating the player:
    tier 1 = 4 pts, tier 2 = 3, tier 3 = 2, tier 4 = 1.
    All-or-nothing: an unknown player id aborts the whole update.
    """
    players = []
    for assignment in request.tiers:
        player = session.get(Player, assignment.player_id)
        if not player:
            raise HTTPException(status_code=404, detail=f"Player {assignment.player_id} not found")
        player.tier = assignment.tier
        players.append(player)

    for player in players:
        session.add(player)
    session.commit()

    return session.exec(select(Player).order_by(Player.tier, Player.name)).all()


@router.get("/players/{player_id}", response_model=PlayerProfileResponse)
def get_player_profile(player_id: int, session: Session = Depends(get_session)):
    """Player details, career stats and completed matches (most recent first)."""
    player = session.get(Player, player_id)
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")

    matches = session.exec(
        select(Match)
        .where(
            Match.status == STATUS_COMPLETED,
            (Match.player1_id == player_id) | (Match.player2_id == player_id),
        )
        .order_by(Match.recorded_at.desc(), Match.id.desc())
    ).all()

    stats = calculate_player_stats(player_id, matches)

    return PlayerProfileResponse(
        player=PlayerResponse.model_validate(player),
        stats=PlayerStatsResponse.model_validate(stats),
        matches=[match_to_response(m) for m in matches],
    )


@router.patch("/players/{player_id}", response_model=PlayerResponse)
def update_player(player_id: int, request: PlayerUpdateRequest, session: Session = Depends(get_session)):
    player = session.get(Player, player_id)
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")

    if request.name is not None:
        player.name = request.name
    if request.department is not None:
        player.department = request.department
    if request.tier is not None:
        player.tier = request.tier

    return _commit_player(session, player)


@router.delete("/players/{player_id}", status_code=204)
def delete_player(player_id: int, session: Session = Depends(get_session)):
    """
    Delete a player. Players who appear in any match cannot be deleted (409).

    Weekly recommendations naming the player are removed with them.
    """
    player = session.get(Player, player_id)
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")

    in_match = session.exec(
        select(Match).where((Match.player1_id == player_id) | (Match.player2_id == player_id))
    ).first()
    if in_match:
        raise HTTPException(status_code=409, detail="Player has recorded matches; delete those first")

    recommendations = session.exec(
        select(WeeklyRecommendation).where(
            (WeeklyRecommendation.player1_id == player_id) | (WeeklyRecommendation.player2_id == player_id)
        )
    ).all()
    for recommendation in recommendations:
        session.delete(recommendation)

    session.delete(player)
    session.commit()
    return None
