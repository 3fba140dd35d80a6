"""
Knockout bracket API Routes

Top 2 of the league get byes into the semifinals; 3rd-10th play round 1
(3v10, 4v9, 5v8, 6v7). Later rounds are created by bracket progression.
"""
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session, select

from ttleague.database import get_session
from ttleague.models.match import (
    KNOCKOUT_PHASES,
    PHASE_FINAL,
    PHASE_LEAGUE,
    STATUS_COMPLETED,
    STATUS_SCHEDULED,
    Match,
)
from ttleague.routes.matches import MatchResponse, match_to_response
from ttleague.routes.standings import StandingResponse, standing_to_response
from ttleague.services.bracket_progression import (
    MIN_PLAYERS_FOR_KNOCKOUT,
    get_knockout_round_updates,
    ordered_by_slot,
)
from ttleague.services.knockout_service import (
    KnockoutExistsError,
    KnockoutGenerationError,
    apply_knockout_updates,
    generate_round1,
    load_knockout_matches,
    load_standings,
)

router = APIRouter()

BYE_COUNT = 2


class BracketResponse(BaseModel):
    league_in_progress: bool
    can_generate: bool
    qualified: List[StandingResponse]
    byes: List[StandingResponse]
    rounds: Dict[str, List[MatchResponse]]
    champion_id: Optional[int] = None


class BracketProgressResponse(BaseModel):
    inserted: List[MatchResponse]
    deleted_ids: List[int]


@router.get("/bracket", response_model=BracketResponse)
def get_bracket(session: Session = Depends(get_session)):
    """
    Current bracket state, rebuilt from the match table.

    Rounds are keyed by phase with matches in slot order. While league
    matches are still scheduled the qualified list is provisional.
    """
    standings = load_standings(session)
    knockout_matches = load_knockout_matches(session)

    league_in_progress = (
        session.exec(
            select(Match).where(Match.phase == PHASE_LEAGUE, Match.status == STATUS_SCHEDULED)
        ).first()
        is not None
    )

    rounds: Dict[str, List[MatchResponse]] = {}
    for phase in KNOCKOUT_PHASES:
        in_phase = [m for m in knockout_matches if m.phase == phase]
        rounds[phase] = [match_to_response(m) for m in ordered_by_slot(in_phase)]

    champion_id = None
    finals = [m for m in knockout_matches if m.phase == PHASE_FINAL and m.status == STATUS_COMPLETED]
    if len(finals) == 1:
        champion_id = finals[0].winner_id

    qualified = standings[:MIN_PLAYERS_FOR_KNOCKOUT]
    return BracketResponse(
        league_in_progress=league_in_progress,
        can_generate=len(standings) >= MIN_PLAYERS_FOR_KNOCKOUT and not knockout_matches,
        qualified=[standing_to_response(s) for s in qualified],
        byes=[standing_to_response(s) for s in qualified[:BYE_COUNT]],
        rounds=rounds,
        champion_id=champion_id,
    )


@router.post("/bracket/generate", response_model=List[MatchResponse], status_code=201)
def generate_knockout(session: Session = Depends(get_session)):
    """Create knockout round 1 from the current standings."""
    try:
        matches = generate_round1(session)
    except KnockoutExistsError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except KnockoutGenerationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return [match_to_response(m) for m in matches]


@router.post("/bracket/progress", response_model=BracketProgressResponse)
def progress_bracket(session: Session = Depends(get_session)):
    """
    Bring later knockout rounds in line with recorded results.

    Idempotent: a second call with no new results changes nothing.
    """
    updates = get_knockout_round_updates(load_knockout_matches(session), load_standings(session))
    inserted = apply_knockout_updates(session, updates)
    return BracketProgressResponse(
        inserted=[match_to_response(m) for m in inserted],
        deleted_ids=updates.deletes,
    )
