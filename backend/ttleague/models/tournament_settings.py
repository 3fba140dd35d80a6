from datetime import date, datetime
from typing import Optional

from sqlmodel import Field, SQLModel

SETTINGS_ROW_ID = 1
DEFAULT_TOURNAMENT_NAME = "Table Tennis League"


class TournamentSettings(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(default=DEFAULT_TOURNAMENT_NAME)
    league_deadline: Optional[date] = None
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})
