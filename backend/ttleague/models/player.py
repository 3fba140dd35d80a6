from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from ttleague.models.match import Match


class Player(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("name", name="uq_player_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    department: Optional[str] = None
    tier: int = Field(default=4)  # 1 (hardest) .. 4 (easiest)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    matches_as_player1: List["Match"] = Relationship(
        back_populates="player1", sa_relationship_kwargs={"foreign_keys": "Match.player1_id"}
    )
    matches_as_player2: List["Match"] = Relationship(
        back_populates="player2", sa_relationship_kwargs={"foreign_keys": "Match.player2_id"}
    )
