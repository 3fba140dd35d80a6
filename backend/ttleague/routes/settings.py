from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, field_validator
from sqlmodel import Session

from ttleague.database import get_session
from ttleague.models.tournament_settings import DEFAULT_TOURNAMENT_NAME, SETTINGS_ROW_ID, TournamentSettings

router = APIRouter()


class SettingsUpdate(BaseModel):
    name: Optional[str] = None
    league_deadline: Optional[date] = None
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def default_blank_name(cls, v):
        if v is not None and not v.strip():
            return DEFAULT_TOURNAMENT_NAME
        return v.strip() if v else v


class SettingsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    league_deadline: Optional[date] = None
    is_active: bool
    updated_at: datetime


def get_or_create_settings(session: Session) -> TournamentSettings:
    """The single settings row, created with defaults on first access."""
    settings = session.get(TournamentSettings, SETTINGS_ROW_ID)
    if settings is None:
        settings = TournamentSettings(id=SETTINGS_ROW_ID)
        session.add(settings)
        session.commit()
        session.refresh(settings)
    return settings


@router.get("/settings", response_model=SettingsResponse)
def get_settings(session: Session = Depends(get_session)):
    return get_or_create_settings(session)


@router.put("/settings", response_model=SettingsResponse)
def update_settings(payload: SettingsUpdate, session: Session = Depends(get_session)):
    """Update tournament name, league deadline and active flag. Omitted fields are unchanged."""
    settings = get_or_create_settings(session)

    updates = payload.model_dump(exclude_unset=True)
    # league_deadline may be cleared with null; the other fields may not
    for field_name, value in updates.items():
        if value is None and field_name != "league_deadline":
            continue
        setattr(settings, field_name, value)

    session.add(settings)
    session.commit()
    session.refresh(settings)
    return settings
