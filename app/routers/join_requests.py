from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlmodel import Session

from ..database import get_session
from ..dependencies import require_user
from ..models.user import User
from ..schemas import JoinRequestCreate, JoinRequestRead, JoinRequestRespond
from ..services import join_requests

router = APIRouter(prefix="/api/teams/join-requests", tags=["join-requests"])


@router.get("", response_model=List[JoinRequestRead])
async def list_join_requests(
    team_id: Optional[int] = None,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    """A team's pending requests (leader only) or, without team_id, the caller's own."""
    if team_id is not None:
        return join_requests.list_team_join_requests(db, current_user, team_id)
    return join_requests.list_my_join_requests(db, current_user)


@router.post("", response_model=JoinRequestRead, status_code=201)
async def create_join_request(
    data: JoinRequestCreate,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    return join_requests.create_join_request(db, current_user, data.team_id, data.message)


@router.patch("/{request_id}", response_model=JoinRequestRead)
async def respond_to_join_request(
    request_id: int,
    data: JoinRequestRespond,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    return join_requests.respond_to_join_request(db, current_user, request_id, data.action)
