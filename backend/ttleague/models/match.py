from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from ttleague.models.player import Player

PHASE_LEAGUE = "league"
PHASE_KNOCKOUT_R1 = "knockout_r1"
PHASE_KNOCKOUT_R2 = "knockout_r2"
PHASE_SEMIFINAL = "semifinal"
PHASE_FINAL = "final"

PHASES = (PHASE_LEAGUE, PHASE_KNOCKOUT_R1, PHASE_KNOCKOUT_R2, PHASE_SEMIFINAL, PHASE_FINAL)
KNOCKOUT_PHASES = PHASES[1:]

STATUS_SCHEDULED = "scheduled"
STATUS_COMPLETED = "completed"


class Match(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    player1_id: int = Field(foreign_key="player.id", index=True)
    player2_id: int = Field(foreign_key="player.id", index=True)
    phase: str = Field(default=PHASE_LEAGUE, index=True)  # see PHASES
    status: str = Field(default=STATUS_SCHEDULED)  # "scheduled" | "completed"
    winner_id: Optional[int] = Field(default=None, foreign_key="player.id")

    # Best of three; a set counts only when both sides are present
    set1_p1: Optional[int] = None
    set1_p2: Optional[int] = None
    set2_p1: Optional[int] = None
    set2_p2: Optional[int] = None
    set3_p1: Optional[int] = None
    set3_p2: Optional[int] = None

    # Fixed bracket slot within a knockout round (1-based); None for league and final
    knockout_position: Optional[int] = Field(default=None)

    recorded_by: Optional[str] = None
    recorded_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    player1: Optional["Player"] = Relationship(
        back_populates="matches_as_player1", sa_relationship_kwargs={"foreign_keys": "Match.player1_id"}
    )
    player2: Optional["Player"] = Relationship(
        back_populates="matches_as_player2", sa_relationship_kwargs={"foreign_keys": "Match.player2_id"}
    )
