"""
Weekly match recommendations.
Generating a new week replaces every stored recommendation.
"""
import logging
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, field_validator
from sqlmodel import Session, select

from ttleague.database import get_session
from ttleague.models.match import PHASE_LEAGUE, STATUS_COMPLETED, Match
from ttleague.models.player import Player
from ttleague.models.weekly_recommendation import WeeklyRecommendation
from ttleague.services.recommendations import generate_recommendations

logger = logging.getLogger(__name__)

router = APIRouter()


class RecommendationGenerateRequest(BaseModel):
    week_date: date
    player_ids: List[int]
    created_by: Optional[str] = None

    @field_validator("player_ids")
    @classmethod
    def validate_player_ids(cls, v):
        if len(set(v)) < 2:
            raise ValueError("Please select at least 2 players")
        return list(dict.fromkeys(v))


class RecommendationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    week_date: date
    player1_id: int
    player2_id: int
    is_extra_match: bool
    created_by: Optional[str] = None
    created_at: datetime


@router.get("/recommendations", response_model=List[RecommendationResponse])
def get_recommendations(session: Session = Depends(get_session)):
    """Recommendations for the latest week; extra matches listed last."""
    latest = session.exec(
        select(WeeklyRecommendation).order_by(WeeklyRecommendation.week_date.desc())
    ).first()
    if latest is None:
        return []

    return session.exec(
        select(WeeklyRecommendation)
        .where(WeeklyRecommendation.week_date == latest.week_date)
        .order_by(WeeklyRecommendation.is_extra_match, WeeklyRecommendation.id)
    ).all()


@router.post("/recommendations", response_model=List[RecommendationResponse], status_code=201)
def create_recommendations(request: RecommendationGenerateRequest, session: Session = Depends(get_session)):
    """
    Pair the selected players for the given week.

    Players are matched with opponents they have not yet met in the league
    where possible; with an odd count one player gets an extra match.
    """
    players = session.exec(select(Player).where(Player.id.in_(request.player_ids))).all()
    by_id = {p.id: p for p in players}
    missing = [pid for pid in request.player_ids if pid not in by_id]
    if missing:
        raise HTTPException(status_code=404, detail=f"Players not found: {missing}")
    selected = [by_id[pid] for pid in request.player_ids]

    completed = session.exec(
        select(Match).where(Match.phase == PHASE_LEAGUE, Match.status == STATUS_COMPLETED)
    ).all()

    recommended = generate_recommendations(selected, completed)

    for old in session.exec(select(WeeklyRecommendation)).all():
        session.delete(old)

    rows = [
        WeeklyRecommendation(
            week_date=request.week_date,
            player1_id=r.player1_id,
            player2_id=r.player2_id,
            is_extra_match=r.is_extra_match,
            created_by=request.created_by,
        )
        for r in recommended
    ]
    for row in rows:
        session.add(row)
    session.commit()
    for row in rows:
        session.refresh(row)

    logger.info(f"Generated {len(rows)} recommendations for week {request.week_date}")
    return rows
