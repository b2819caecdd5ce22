from datetime import datetime, timezone
from typing import Optional
from sqlmodel import SQLModel, Field


class UserSession(SQLModel, table=True):
    """Login session; the token is the caller credential."""
    __tablename__ = "user_sessions"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    session_token: str = Field(unique=True, index=True)
    expires_at: datetime
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
