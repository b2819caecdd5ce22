import logging
from typing import Any, Dict, List

from sqlmodel import Session, delete

from ..database import atomic
from ..errors import Forbidden, LeaderCannotLeave, MembershipNotFound, NotLeader
from ..models.enums import MemberRole
from ..models.membership import TeamMembership
from ..models.team import Team
from ..models.user import User
from . import guard
from .teams import get_team_or_404

logger = logging.getLogger(__name__)


def add_member(
    db: Session,
    team: Team,
    user_id: int,
    role: MemberRole = MemberRole.ORB_HERO
) -> TeamMembership:
    """
    Put a user into a team.

    Must run inside the caller's transaction: the seat claim is what refuses a
    user who joined another team in the meantime, and the rollback of that
    transaction is what undoes the status change that led here.
    """
    guard.claim_seat(db, user_id, team.id)

    membership = TeamMembership(team_id=team.id, user_id=user_id, role=role)
    db.add(membership)
    db.flush()
    return membership


def list_team_members(db: Session, team_id: int) -> List[Dict[str, Any]]:
    team = get_team_or_404(db, team_id)
    return guard.team_occupants(db, team)


def remove_member(db: Session, caller: User, team_id: int, target_user_id: int) -> None:
    """Self-leave, or a leader removing one of their members."""
    with atomic(db):
        team = get_team_or_404(db, team_id)
        is_self = caller.id == target_user_id
        is_leader = team.leader_id == caller.id

        if target_user_id == team.leader_id:
            if is_self:
                raise LeaderCannotLeave()
            raise Forbidden("The team leader cannot be removed")

        if not is_self and not is_leader:
            raise Forbidden("Only team leader can remove members")

        result = db.exec(
            delete(TeamMembership).where(
                TeamMembership.team_id == team.id,
                TeamMembership.user_id == target_user_id
            )
        )
        if result.rowcount != 1:
            raise MembershipNotFound()
        guard.release_seat(db, target_user_id, team.id)

    action = "left" if is_self else f"was removed by {caller.id} from"
    logger.info(f"User {target_user_id} {action} team {team_id}")


def change_member_role(
    db: Session,
    caller: User,
    team_id: int,
    membership_id: int,
    role: MemberRole
) -> TeamMembership:
    with atomic(db):
        team = get_team_or_404(db, team_id)
        if team.leader_id != caller.id:
            raise NotLeader("Only team leaders can update member roles")

        membership = db.get(TeamMembership, membership_id)
        if not membership or membership.team_id != team.id:
            raise MembershipNotFound()

        membership.role = role
        db.add(membership)

    db.refresh(membership)
    return membership
