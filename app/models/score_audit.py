from datetime import datetime, timezone
from typing import Optional
from sqlmodel import SQLModel, Field


class TeamScoreAudit(SQLModel, table=True):
    """Append-only record of admin score changes."""
    __tablename__ = "team_score_audit"

    id: Optional[int] = Field(default=None, primary_key=True)
    actor_id: int = Field(foreign_key="users.id")
    # Not a foreign key: entries outlive the team they describe
    team_id: int = Field(index=True)
    old_score: float
    new_score: float
    reason: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
