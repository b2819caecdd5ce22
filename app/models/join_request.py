from datetime import datetime, timezone
from typing import Optional
from sqlmodel import SQLModel, Field, Index, text

from .enums import JoinRequestStatus


class TeamJoinRequest(SQLModel, table=True):
    __tablename__ = "team_join_requests"
    __table_args__ = (
        # At most one pending request per (team, user)
        Index(
            "uq_pending_join_request",
            "team_id",
            "user_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    team_id: int = Field(foreign_key="teams.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    message: Optional[str] = Field(default=None, max_length=500)
    status: JoinRequestStatus = Field(default=JoinRequestStatus.pending)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    responded_at: Optional[datetime] = Field(default=None)
