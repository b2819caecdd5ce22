from datetime import datetime, timezone
from typing import Optional
from sqlmodel import SQLModel, Field

from .enums import TeamStatus


class Team(SQLModel, table=True):
    """
    A team has exactly one leader, referenced by leader_id.

    The leader is never stored as a TeamMembership row, only as a leader seat
    (see TeamSeat), so members and leader are never double counted.
    """
    __tablename__ = "teams"

    id: Optional[int] = Field(default=None, primary_key=True)
    slug: str = Field(unique=True, index=True, max_length=120)
    name: str = Field(max_length=100)
    bio: Optional[str] = Field(default=None)
    mark_url: Optional[str] = Field(default=None)
    ad_url: Optional[str] = Field(default=None)
    leader_id: int = Field(foreign_key="users.id", index=True)
    status: TeamStatus = Field(default=TeamStatus.waiting, index=True)
    score: float = Field(default=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
