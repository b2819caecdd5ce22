from .enums import (
    UserRole,
    UserStatus,
    TeamStatus,
    InvitationStatus,
    JoinRequestStatus,
    MemberRole,
    InvitationAction,
    JoinRequestAction,
)
from .user import User
from .session import UserSession
from .team import Team
from .membership import TeamMembership, TeamSeat
from .invitation import TeamInvitation
from .join_request import TeamJoinRequest
from .score_audit import TeamScoreAudit

__all__ = [
    "UserRole",
    "UserStatus",
    "TeamStatus",
    "InvitationStatus",
    "JoinRequestStatus",
    "MemberRole",
    "InvitationAction",
    "JoinRequestAction",
    "User",
    "UserSession",
    "Team",
    "TeamMembership",
    "TeamSeat",
    "TeamInvitation",
    "TeamJoinRequest",
    "TeamScoreAudit",
]
