from enum import Enum


class UserRole(str, Enum):
    member = "member"
    admin = "admin"
    superadmin = "superadmin"


class UserStatus(str, Enum):
    allow = "allow"
    waiting = "waiting"
    block = "block"


class TeamStatus(str, Enum):
    waiting = "waiting"
    approved = "approved"
    blocked = "blocked"


class InvitationStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"


class JoinRequestStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class MemberRole(str, Enum):
    """In-team role tags. The leader has no tag; leadership lives on the team."""
    ORB_HERO = "Orb Hero"
    KING_CREEP = "King Creep"
    BIRD_BUYER = "Bird Buyer"
    BOUNTY = "Bounty"


class InvitationAction(str, Enum):
    accept = "accept"
    reject = "reject"


class JoinRequestAction(str, Enum):
    approve = "approve"
    reject = "reject"
