"""
Error taxonomy for team membership operations.

Every failure is scoped to the requested operation and carries a category
(what kind of failure), a code (which rule was broken) and a readable detail.
The API layer renders them through a single exception handler in main.py.
"""
from typing import Optional


class TeamError(Exception):
    status_code = 400
    category = "Error"
    default_detail = "Request failed"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    @property
    def code(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        return {"category": self.category, "code": self.code, "detail": self.detail}


# Authentication / authorization

class Unauthenticated(TeamError):
    status_code = 401
    category = "Unauthenticated"
    default_detail = "Not authenticated"


class Forbidden(TeamError):
    status_code = 403
    category = "Forbidden"
    default_detail = "You are not allowed to perform this action"


class NotLeader(Forbidden):
    default_detail = "Only the team leader can perform this action"


class NotInvitee(Forbidden):
    default_detail = "You are not authorized to respond to this invitation"


class TeamBlocked(Forbidden):
    default_detail = "This team is blocked"


# Missing entities

class NotFound(TeamError):
    status_code = 404
    category = "NotFound"
    default_detail = "Not found"


class TeamNotFound(NotFound):
    default_detail = "Team not found"


class UserNotFound(NotFound):
    default_detail = "User not found"


class InviteeNotFound(UserNotFound):
    default_detail = "Invitee not found"


class InvitationNotFound(NotFound):
    default_detail = "Invitation not found"


class JoinRequestNotFound(NotFound):
    default_detail = "Join request not found"


class MembershipNotFound(NotFound):
    default_detail = "Membership not found"


# State machine

class InvalidState(TeamError):
    status_code = 400
    category = "InvalidState"
    default_detail = "Invalid state for this action"


class AlreadyResolved(InvalidState):
    default_detail = "This has already been responded to"


class TeamNotApproved(InvalidState):
    default_detail = "This team is not accepting members yet"


# One team per user

class InvariantViolation(TeamError):
    status_code = 400
    category = "InvariantViolation"
    default_detail = "Operation would break a team membership rule"


class AlreadyInTeam(InvariantViolation):
    default_detail = "User is already in a team"


class AlreadyLeader(AlreadyInTeam):
    default_detail = "You already lead a team"


class AlreadyMember(AlreadyInTeam):
    default_detail = "You are already a member of a team"


class InviteeAlreadyTeamed(AlreadyInTeam):
    default_detail = "User is already a member of a team"


class AlreadyTeamed(AlreadyInTeam):
    default_detail = "You are already a member of a team"


class LeaderCannotLeave(InvariantViolation):
    default_detail = "Team leader cannot leave the team. Delete the team instead."


# Uniqueness

class Conflict(TeamError):
    status_code = 409
    category = "Conflict"
    default_detail = "Conflicting request"


class DuplicatePending(Conflict):
    default_detail = "A pending request already exists"


class SlugConflict(Conflict):
    default_detail = "A team with this name already exists, please retry"


class UsernameTaken(Conflict):
    default_detail = "Username already exists"


class EmailTaken(Conflict):
    default_detail = "Email already exists"


# Input

class ValidationError(TeamError):
    status_code = 422
    category = "ValidationError"
    default_detail = "Invalid input"
