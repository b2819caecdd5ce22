from datetime import datetime, timezone
from typing import Optional
from sqlmodel import SQLModel, Field, Index, text

from .enums import InvitationStatus


class TeamInvitation(SQLModel, table=True):
    __tablename__ = "team_invitations"
    __table_args__ = (
        # At most one pending invitation per (team, invitee)
        Index(
            "uq_pending_invitation",
            "team_id",
            "invitee_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    team_id: int = Field(foreign_key="teams.id", index=True)
    inviter_id: int = Field(foreign_key="users.id")
    invitee_id: int = Field(foreign_key="users.id", index=True)
    status: InvitationStatus = Field(default=InvitationStatus.pending)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    responded_at: Optional[datetime] = Field(default=None)
