from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models.enums import (
    InvitationAction,
    JoinRequestAction,
    JoinRequestStatus,
    InvitationStatus,
    MemberRole,
    TeamStatus,
    UserRole,
    UserStatus,
)


def _strip_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


# Auth

class SignupRequest(BaseModel):
    """Schema for creating an account."""
    username: str = Field(min_length=3, max_length=50)
    email: str = Field(pattern=r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
    password: str = Field(min_length=6)


class SigninRequest(BaseModel):
    """Schema for signing in with a username or an email."""
    identifier: str
    password: str


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: UserRole
    status: UserStatus
    score: float
    vote_count: int


class SessionRead(BaseModel):
    token: str
    expires_at: datetime
    user: UserRead


# Teams

class TeamCreate(BaseModel):
    """Schema for creating a team."""
    name: str = Field(max_length=100)
    bio: Optional[str] = None
    mark_url: Optional[str] = None
    ad_url: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Team name is required")
        return value

    @field_validator("bio", "mark_url", "ad_url")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        return _strip_optional(value)


class TeamUpdate(BaseModel):
    """
    Partial team update. Only fields present in the request body are applied;
    use model_fields_set to tell "absent" from "set to null".
    """
    name: Optional[str] = Field(default=None, max_length=100)
    bio: Optional[str] = None
    mark_url: Optional[str] = None
    ad_url: Optional[str] = None
    status: Optional[TeamStatus] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("Team name cannot be empty")
        return value

    @field_validator("bio", "mark_url", "ad_url")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        return _strip_optional(value)


class ScoreUpdate(BaseModel):
    score: float = Field(ge=0)
    reason: Optional[str] = Field(default=None, max_length=500)


class TeamRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    slug: str
    name: str
    bio: Optional[str]
    mark_url: Optional[str]
    ad_url: Optional[str]
    leader_id: int
    status: TeamStatus
    score: float
    created_at: datetime
    updated_at: datetime


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class TeamPage(BaseModel):
    teams: List[TeamRead]
    pagination: Pagination


class ScoreAuditRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    actor_id: int
    team_id: int
    old_score: float
    new_score: float
    reason: Optional[str]
    created_at: datetime


class TeamScoreRead(BaseModel):
    current_score: float
    team: TeamRead
    last_updated: datetime
    history: List[ScoreAuditRead]


# Members

class OccupantRead(BaseModel):
    """A leader or member entry of a team's occupant list."""
    user_id: int
    username: str
    is_leader: bool
    role: Optional[MemberRole]
    membership_id: Optional[int]
    joined_at: datetime
    score: float


class MemberRoleUpdate(BaseModel):
    role: MemberRole


class MembershipRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    team_id: int
    user_id: int
    role: MemberRole
    joined_at: datetime


# Invitations

class InvitationCreate(BaseModel):
    team_id: int
    invitee_id: int


class InvitationRespond(BaseModel):
    action: InvitationAction


class InvitationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    team_id: int
    inviter_id: int
    invitee_id: int
    status: InvitationStatus
    created_at: datetime
    responded_at: Optional[datetime]


# Join requests

class JoinRequestCreate(BaseModel):
    team_id: int
    message: Optional[str] = Field(default=None, max_length=500)

    @field_validator("message")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        return _strip_optional(value)


class JoinRequestRespond(BaseModel):
    action: JoinRequestAction


class JoinRequestRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    team_id: int
    user_id: int
    message: Optional[str]
    status: JoinRequestStatus
    created_at: datetime
    responded_at: Optional[datetime]
