from datetime import datetime, timezone
from typing import Optional
from sqlmodel import SQLModel, Field

from .enums import MemberRole


class TeamMembership(SQLModel, table=True):
    """A non-leader user's place in a team."""
    __tablename__ = "team_members"

    id: Optional[int] = Field(default=None, primary_key=True)
    team_id: int = Field(foreign_key="teams.id", index=True)
    user_id: int = Field(foreign_key="users.id", unique=True, index=True)
    role: MemberRole = Field(default=MemberRole.ORB_HERO)
    joined_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class TeamSeat(SQLModel, table=True):
    """
    One row per user associated with a team, as leader or member.

    The primary key on user_id makes a second association for the same user
    fail at insert time, whichever path (team creation, invitation, join
    request) tries to create it.
    """
    __tablename__ = "team_seats"

    user_id: int = Field(foreign_key="users.id", primary_key=True)
    team_id: int = Field(foreign_key="teams.id", index=True)
    is_leader: bool = Field(default=False)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
