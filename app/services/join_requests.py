"""
Join requests: a user asks to be let into an approved team.

    pending --approve--> approved   (membership created in the same commit)
    pending --reject-->  rejected
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, update

from ..database import atomic
from ..errors import (
    AlreadyResolved,
    AlreadyTeamed,
    DuplicatePending,
    JoinRequestNotFound,
    NotLeader,
    TeamBlocked,
    TeamNotApproved,
    ValidationError,
)
from ..models.enums import JoinRequestAction, JoinRequestStatus, TeamStatus
from ..models.join_request import TeamJoinRequest
from ..models.user import User
from ..schemas import JoinRequestRead
from . import guard
from .members import add_member
from .teams import get_team_or_404

logger = logging.getLogger(__name__)

RESPONSES = {
    JoinRequestAction.approve: JoinRequestStatus.approved,
    JoinRequestAction.reject: JoinRequestStatus.rejected,
}


def _resolved_status(action: JoinRequestAction) -> JoinRequestStatus:
    try:
        return RESPONSES[JoinRequestAction(action)]
    except (KeyError, ValueError):
        raise ValidationError('Invalid action. Use "approve" or "reject"') from None


def create_join_request(
    db: Session,
    caller: User,
    team_id: int,
    message: Optional[str] = None
) -> JoinRequestRead:
    with atomic(db):
        team = get_team_or_404(db, team_id)
        if team.status != TeamStatus.approved:
            raise TeamNotApproved()
        guard.assert_can_join(db, caller.id, AlreadyTeamed)

        existing = db.exec(
            select(TeamJoinRequest).where(
                TeamJoinRequest.team_id == team.id,
                TeamJoinRequest.user_id == caller.id,
                TeamJoinRequest.status == JoinRequestStatus.pending
            )
        ).first()
        if existing:
            raise DuplicatePending("You have already requested to join this team")

        join_request = TeamJoinRequest(team_id=team.id, user_id=caller.id, message=message)
        db.add(join_request)
        try:
            db.flush()
        except IntegrityError as exc:
            raise DuplicatePending("You have already requested to join this team") from exc
        created = JoinRequestRead.model_validate(join_request)

    logger.info(f"User {created.user_id} requested to join team {team_id} (request {created.id})")
    return created


def respond_to_join_request(
    db: Session,
    caller: User,
    request_id: int,
    action: JoinRequestAction
) -> JoinRequestRead:
    """
    Approve or reject a request to join the caller's team.

    Approval moves the request and creates the membership in one commit; a
    requester who joined another team in the meantime makes the whole response
    fail with AlreadyInTeam, leaving the request pending.
    """
    new_status = _resolved_status(action)

    with atomic(db):
        join_request = db.get(TeamJoinRequest, request_id)
        if not join_request:
            raise JoinRequestNotFound()

        team = get_team_or_404(db, join_request.team_id)
        if team.leader_id != caller.id:
            raise NotLeader("Only team leader can respond to join requests")
        if join_request.status != JoinRequestStatus.pending:
            raise AlreadyResolved("Join request has already been responded to")

        requester_id = join_request.user_id
        resolved_by = caller.id
        if new_status == JoinRequestStatus.approved:
            if team.status == TeamStatus.blocked:
                raise TeamBlocked("This team is blocked and cannot take new members")
            guard.assert_can_join(db, requester_id)

        result = db.exec(
            update(TeamJoinRequest)
            .where(
                TeamJoinRequest.id == request_id,
                TeamJoinRequest.status == JoinRequestStatus.pending
            )
            .values(status=new_status, responded_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise AlreadyResolved("Join request has already been responded to")

        if new_status == JoinRequestStatus.approved:
            add_member(db, team, requester_id)

        db.refresh(join_request)
        resolved = JoinRequestRead.model_validate(join_request)

    logger.info(f"Join request {request_id} of user {requester_id} {new_status.value} by leader {resolved_by}")
    return resolved


def list_my_join_requests(db: Session, caller: User) -> List[TeamJoinRequest]:
    return list(db.exec(
        select(TeamJoinRequest)
        .where(TeamJoinRequest.user_id == caller.id)
        .order_by(TeamJoinRequest.created_at.desc(), TeamJoinRequest.id.desc())
    ).all())


def list_team_join_requests(db: Session, caller: User, team_id: int) -> List[TeamJoinRequest]:
    """Pending requests of a team; leader only."""
    team = get_team_or_404(db, team_id)
    if team.leader_id != caller.id:
        raise NotLeader("Only team leader can view join requests")

    return list(db.exec(
        select(TeamJoinRequest)
        .where(
            TeamJoinRequest.team_id == team.id,
            TeamJoinRequest.status == JoinRequestStatus.pending
        )
        .order_by(TeamJoinRequest.created_at.desc(), TeamJoinRequest.id.desc())
    ).all())
