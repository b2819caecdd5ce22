from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlmodel import Session

from ..database import get_session
from ..dependencies import require_user
from ..models.enums import InvitationStatus
from ..models.user import User
from ..schemas import InvitationCreate, InvitationRead, InvitationRespond
from ..services import invitations

router = APIRouter(prefix="/api/teams/invitations", tags=["invitations"])


@router.get("", response_model=List[InvitationRead])
async def my_invitations(
    status: Optional[InvitationStatus] = InvitationStatus.pending,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    """Invitations addressed to the caller, pending ones by default."""
    return invitations.list_my_invitations(db, current_user, status)


@router.post("", response_model=InvitationRead, status_code=201)
async def send_invitation(
    data: InvitationCreate,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    return invitations.send_invitation(db, current_user, data.team_id, data.invitee_id)


@router.patch("/{invitation_id}", response_model=InvitationRead)
async def respond_to_invitation(
    invitation_id: int,
    data: InvitationRespond,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    return invitations.respond_to_invitation(db, current_user, invitation_id, data.action)
