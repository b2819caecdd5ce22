from datetime import datetime, timezone
from typing import Optional
from sqlmodel import SQLModel, Field

from .enums import UserRole, UserStatus


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True, max_length=50)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str
    role: UserRole = Field(default=UserRole.member)
    status: UserStatus = Field(default=UserStatus.allow)
    score: float = Field(default=0)
    vote_count: int = Field(default=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_admin(self) -> bool:
        return self.role in (UserRole.admin, UserRole.superadmin)
