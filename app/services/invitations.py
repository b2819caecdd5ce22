"""
Invitations: a leader offers a specific user a place in their team.

    pending --accept--> accepted   (membership created in the same commit)
    pending --reject--> rejected

Terminal states are never left. The pending -> terminal step is a conditional
UPDATE, so of two concurrent responses only one can move the row.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, update

from ..database import atomic
from ..errors import (
    AlreadyResolved,
    DuplicatePending,
    InvitationNotFound,
    InviteeAlreadyTeamed,
    InviteeNotFound,
    NotInvitee,
    NotLeader,
    TeamBlocked,
    ValidationError,
)
from ..models.enums import InvitationAction, InvitationStatus, TeamStatus
from ..models.invitation import TeamInvitation
from ..models.user import User
from ..schemas import InvitationRead
from . import guard
from .members import add_member
from .teams import get_team_or_404

logger = logging.getLogger(__name__)

RESPONSES = {
    InvitationAction.accept: InvitationStatus.accepted,
    InvitationAction.reject: InvitationStatus.rejected,
}


def _resolved_status(action: InvitationAction) -> InvitationStatus:
    try:
        return RESPONSES[InvitationAction(action)]
    except (KeyError, ValueError):
        raise ValidationError('Invalid action. Use "accept" or "reject"') from None


def send_invitation(db: Session, caller: User, team_id: int, invitee_id: int) -> InvitationRead:
    with atomic(db):
        team = get_team_or_404(db, team_id)
        if team.leader_id != caller.id:
            raise NotLeader("Only team leader can send invitations")
        if team.status == TeamStatus.blocked:
            raise TeamBlocked("This team is blocked and cannot send invitations")

        if not db.get(User, invitee_id):
            raise InviteeNotFound()
        guard.assert_can_join(db, invitee_id, InviteeAlreadyTeamed)

        existing = db.exec(
            select(TeamInvitation).where(
                TeamInvitation.team_id == team.id,
                TeamInvitation.invitee_id == invitee_id,
                TeamInvitation.status == InvitationStatus.pending
            )
        ).first()
        if existing:
            raise DuplicatePending("Invitation already sent to this user")

        invitation = TeamInvitation(
            team_id=team.id,
            inviter_id=caller.id,
            invitee_id=invitee_id
        )
        db.add(invitation)
        try:
            db.flush()
        except IntegrityError as exc:
            raise DuplicatePending("Invitation already sent to this user") from exc
        sent = InvitationRead.model_validate(invitation)

    logger.info(f"Team {team_id} invited user {invitee_id} (invitation {sent.id})")
    return sent


def respond_to_invitation(
    db: Session,
    caller: User,
    invitation_id: int,
    action: InvitationAction
) -> InvitationRead:
    """
    Accept or reject an invitation addressed to the caller.

    Acceptance moves the invitation and creates the membership in one commit.
    If the caller joined another team since the invitation was sent, the whole
    response fails with AlreadyInTeam and the invitation stays pending.
    """
    new_status = _resolved_status(action)

    with atomic(db):
        invitation = db.get(TeamInvitation, invitation_id)
        if not invitation:
            raise InvitationNotFound()
        if invitation.invitee_id != caller.id:
            raise NotInvitee()
        if invitation.status != InvitationStatus.pending:
            raise AlreadyResolved("Invitation has already been responded to")

        team = get_team_or_404(db, invitation.team_id)
        if new_status == InvitationStatus.accepted:
            if team.status == TeamStatus.blocked:
                raise TeamBlocked("This team is blocked and cannot take new members")
            guard.assert_can_join(db, caller.id)

        result = db.exec(
            update(TeamInvitation)
            .where(
                TeamInvitation.id == invitation_id,
                TeamInvitation.status == InvitationStatus.pending
            )
            .values(status=new_status, responded_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise AlreadyResolved("Invitation has already been responded to")

        if new_status == InvitationStatus.accepted:
            add_member(db, team, caller.id)

        # Snapshot before commit; a concurrent team deletion may remove these rows afterwards
        db.refresh(invitation)
        resolved = InvitationRead.model_validate(invitation)

    logger.info(f"User {resolved.invitee_id} {new_status.value} invitation {invitation_id} to team {resolved.team_id}")
    return resolved


def list_my_invitations(
    db: Session,
    caller: User,
    status: Optional[InvitationStatus] = InvitationStatus.pending
) -> List[TeamInvitation]:
    statement = select(TeamInvitation).where(TeamInvitation.invitee_id == caller.id)
    if status:
        statement = statement.where(TeamInvitation.status == status)
    statement = statement.order_by(TeamInvitation.created_at.desc(), TeamInvitation.id.desc())
    return list(db.exec(statement).all())


def list_team_invitations(db: Session, caller: User, team_id: int) -> List[TeamInvitation]:
    team = get_team_or_404(db, team_id)
    if team.leader_id != caller.id and not caller.is_admin:
        raise NotLeader("Only team leader can view team invitations")

    return list(db.exec(
        select(TeamInvitation)
        .where(TeamInvitation.team_id == team.id)
        .order_by(TeamInvitation.created_at.desc(), TeamInvitation.id.desc())
    ).all())
