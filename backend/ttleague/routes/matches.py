"""
Match API Routes
Schedule listing, match CRUD, and result entry. Recording a knockout result
re-runs bracket progression so the next round follows the new winner.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from sqlmodel import Session, select

from ttleague.database import get_session
from ttleague.models.match import (
    KNOCKOUT_PHASES,
    PHASE_LEAGUE,
    PHASES,
    STATUS_COMPLETED,
    STATUS_SCHEDULED,
    Match,
)
from ttleague.models.player import Player
from ttleague.services.knockout_service import sync_knockout_bracket
from ttleague.services.match_results import (
    MatchResultError,
    apply_outcome,
    evaluate_result,
    format_set_scores,
)

router = APIRouter()

STATUSES = (STATUS_SCHEDULED, STATUS_COMPLETED)


# ============================================================================
# Request/Response Models
# ============================================================================


class PlayerSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    department: Optional[str] = None
    tier: int


class MatchResponse(BaseModel):
    id: int
    player1_id: int
    player2_id: int
    player1: Optional[PlayerSummary] = None
    player2: Optional[PlayerSummary] = None
    phase: str
    status: str
    winner_id: Optional[int] = None
    set1_p1: Optional[int] = None
    set1_p2: Optional[int] = None
    set2_p1: Optional[int] = None
    set2_p2: Optional[int] = None
    set3_p1: Optional[int] = None
    set3_p2: Optional[int] = None
    score_display: str = ""
    knockout_position: Optional[int] = None
    recorded_by: Optional[str] = None
    recorded_at: Optional[datetime] = None
    created_at: datetime


class MatchCreateRequest(BaseModel):
    player1_id: int
    player2_id: int
    phase: str = PHASE_LEAGUE
    knockout_position: Optional[int] = Field(default=None, ge=1)

    @field_validator("phase")
    @classmethod
    def validate_phase(cls, v):
        if v not in PHASES:
            raise ValueError(f"phase must be one of {', '.join(PHASES)}")
        return v

    @model_validator(mode="after")
    def validate_distinct_players(self):
        if self.player1_id == self.player2_id:
            raise ValueError("player1_id and player2_id must be different players")
        return self


class SetScoresRequest(BaseModel):
    set1_p1: int = Field(ge=0)
    set1_p2: int = Field(ge=0)
    set2_p1: int = Field(ge=0)
    set2_p2: int = Field(ge=0)
    set3_p1: Optional[int] = Field(default=None, ge=0)
    set3_p2: Optional[int] = Field(default=None, ge=0)
    recorded_by: Optional[str] = None

    def set_pairs(self):
        return [
            (self.set1_p1, self.set1_p2),
            (self.set2_p1, self.set2_p2),
            (self.set3_p1, self.set3_p2),
        ]


class LeagueMatchRecordRequest(SetScoresRequest):
    player1_id: int
    player2_id: int

    @model_validator(mode="after")
    def validate_distinct_players(self):
        if self.player1_id == self.player2_id:
            raise ValueError("Please select two different players")
        return self


class MatchResultResponse(BaseModel):
    match: MatchResponse
    bracket_inserted: int = 0
    bracket_deleted: int = 0


class BulkDeleteResponse(BaseModel):
    scope: str
    deleted: int


def match_to_response(m: Match) -> MatchResponse:
    return MatchResponse(
        id=m.id,
        player1_id=m.player1_id,
        player2_id=m.player2_id,
        player1=PlayerSummary.model_validate(m.player1) if m.player1 else None,
        player2=PlayerSummary.model_validate(m.player2) if m.player2 else None,
        phase=m.phase,
        status=m.status,
        winner_id=m.winner_id,
        set1_p1=m.set1_p1,
        set1_p2=m.set1_p2,
        set2_p1=m.set2_p1,
        set2_p2=m.set2_p2,
        set3_p1=m.set3_p1,
        set3_p2=m.set3_p2,
        score_display=format_set_scores(m),
        knockout_position=m.knockout_position,
        recorded_by=m.recorded_by,
        recorded_at=m.recorded_at,
        created_at=m.created_at,
    )


def _require_players(session: Session, *player_ids: int) -> None:
    for player_id in player_ids:
        if not session.get(Player, player_id):
            raise HTTPException(status_code=404, detail=f"Player {player_id} not found")


# ============================================================================
# Match Endpoints
# ============================================================================


@router.get("/matches", response_model=List[MatchResponse])
def list_matches(
    status: Optional[str] = Query(None, description="scheduled | completed"),
    phase: Optional[str] = Query(None, description="league | knockout_r1 | knockout_r2 | semifinal | final"),
    session: Session = Depends(get_session),
):
    """Schedule and results, oldest first. Omitted filters mean 'all'."""
    if status is not None and status not in STATUSES:
        raise HTTPException(status_code=422, detail=f"Invalid status: {status}")
    if phase is not None and phase not in PHASES:
        raise HTTPException(status_code=422, detail=f"Invalid phase: {phase}")

    query = select(Match)
    if status is not None:
        query = query.where(Match.status == status)
    if phase is not None:
        query = query.where(Match.phase == phase)
    matches = session.exec(query.order_by(Match.created_at, Match.id)).all()

    return [match_to_response(m) for m in matches]


@router.post("/matches", response_model=MatchResponse, status_code=201)
def create_match(request: MatchCreateRequest, session: Session = Depends(get_session)):
    """Create a scheduled match between two existing players."""
    _require_players(session, request.player1_id, request.player2_id)

    match = Match(
        player1_id=request.player1_id,
        player2_id=request.player2_id,
        phase=request.phase,
        status=STATUS_SCHEDULED,
        knockout_position=request.knockout_position,
    )
    session.add(match)
    session.commit()
    session.refresh(match)
    return match_to_response(match)


@router.post("/matches/league", response_model=MatchResponse, status_code=201)
def record_league_match(request: LeagueMatchRecordRequest, session: Session = Depends(get_session)):
    """
    Record a league match and its result in one step.

    Each pair plays at most one league match; a second one is rejected (409).
    """
    _require_players(session, request.player1_id, request.player2_id)

    existing = session.exec(
        select(Match).where(
            Match.phase == PHASE_LEAGUE,
            ((Match.player1_id == request.player1_id) & (Match.player2_id == request.player2_id))
            | ((Match.player1_id == request.player2_id) & (Match.player2_id == request.player1_id)),
        )
    ).first()
    if existing:
        raise HTTPException(status_code=409, detail="This match has already been recorded")

    try:
        outcome = evaluate_result(request.set_pairs())
    except MatchResultError as e:
        raise HTTPException(status_code=422, detail=str(e))

    match = Match(
        player1_id=request.player1_id,
        player2_id=request.player2_id,
        phase=PHASE_LEAGUE,
        status=STATUS_COMPLETED,
        recorded_by=request.recorded_by,
        recorded_at=datetime.utcnow(),
    )
    apply_outcome(match, outcome)

    session.add(match)
    session.commit()
    session.refresh(match)
    return match_to_response(match)


@router.get("/matches/{match_id}", response_model=MatchResponse)
def get_match(match_id: int, session: Session = Depends(get_session)):
    match = session.get(Match, match_id)
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")
    return match_to_response(match)


@router.put("/matches/{match_id}/result", response_model=MatchResultResponse)
def record_match_result(match_id: int, request: SetScoresRequest, session: Session = Depends(get_session)):
    """
    Record (or correct) the result of a match.

    Winner comes from the set scores. For knockout matches the bracket is
    re-synced afterwards: the next round is created once this round is
    complete, and a scheduled next-round match that no longer follows from
    the results is replaced.
    """
    match = session.get(Match, match_id)
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")

    try:
        outcome = evaluate_result(request.set_pairs())
    except MatchResultError as e:
        raise HTTPException(status_code=422, detail=str(e))

    apply_outcome(match, outcome)
    match.status = STATUS_COMPLETED
    match.recorded_by = request.recorded_by
    match.recorded_at = datetime.utcnow()

    session.add(match)
    session.commit()
    session.refresh(match)

    inserted = deleted = 0
    if match.phase in KNOCKOUT_PHASES:
        updates = sync_knockout_bracket(session)
        inserted, deleted = len(updates.inserts), len(updates.deletes)
        session.refresh(match)

    return MatchResultResponse(
        match=match_to_response(match),
        bracket_inserted=inserted,
        bracket_deleted=deleted,
    )


@router.delete("/matches/{match_id}", status_code=204)
def delete_match(match_id: int, session: Session = Depends(get_session)):
    match = session.get(Match, match_id)
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")

    session.delete(match)
    session.commit()
    return None


@router.delete("/matches", response_model=BulkDeleteResponse)
def delete_matches(
    scope: str = Query(..., description="league | knockout | all"),
    session: Session = Depends(get_session),
):
    """Bulk delete: all league matches, all knockout matches, or everything (tournament reset)."""
    query = select(Match)
    if scope == "league":
        query = query.where(Match.phase == PHASE_LEAGUE)
    elif scope == "knockout":
        query = query.where(Match.phase.in_(KNOCKOUT_PHASES))
    elif scope != "all":
        raise HTTPException(status_code=422, detail=f"Invalid scope: {scope}")

    matches = session.exec(query).all()
    for match in matches:
        session.delete(match)
    session.commit()
    return BulkDeleteResponse(scope=scope, deleted=len(matches))
