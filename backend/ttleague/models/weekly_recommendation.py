from datetime import date, datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class WeeklyRecommendation(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    week_date: date = Field(index=True)
    player1_id: int = Field(foreign_key="player.id")
    player2_id: int = Field(foreign_key="player.id")
    is_extra_match: bool = Field(default=False)  # odd player's second pairing of the week
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
