from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from ..config import MAX_PAGE_SIZE, TEAMS_PAGE_SIZE
from ..database import get_session
from ..dependencies import require_user
from ..models.enums import TeamStatus
from ..models.user import User
from ..schemas import (
    InvitationRead,
    MemberRoleUpdate,
    MembershipRead,
    OccupantRead,
    ScoreUpdate,
    TeamCreate,
    TeamPage,
    TeamRead,
    TeamScoreRead,
    TeamUpdate,
)
from ..services import invitations, members, teams

router = APIRouter(prefix="/api/teams", tags=["teams"])


@router.get("", response_model=TeamPage)
async def teams_list(
    page: int = Query(1, ge=1),
    limit: int = Query(TEAMS_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    search: str = "",
    status: Optional[TeamStatus] = None,
    db: Session = Depends(get_session)
):
    """All teams, newest first, with pagination."""
    team_rows, total = teams.list_teams(db, page=page, limit=limit, search=search.strip(), status=status)
    return {
        "teams": team_rows,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": teams.total_pages(total, limit)
        }
    }


@router.post("", response_model=TeamRead, status_code=201)
async def create_team(
    data: TeamCreate,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    return teams.create_team(db, current_user, data)


@router.get("/my-team", response_model=Optional[TeamRead])
async def my_team(
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    """The team the caller leads or belongs to, or null."""
    return teams.get_user_team(db, current_user.id)


@router.get("/{slug}", response_model=TeamRead)
async def team_detail(slug: str, db: Session = Depends(get_session)):
    return teams.get_team_by_slug(db, slug)


@router.patch("/{team_id}", response_model=TeamRead)
async def update_team(
    team_id: int,
    patch: TeamUpdate,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    return teams.update_team(db, current_user, team_id, patch)


@router.delete("/{team_id}")
async def delete_team(
    team_id: int,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    teams.delete_team(db, current_user, team_id)
    return {"success": True, "message": "Team deleted successfully"}


@router.get("/{team_id}/score", response_model=TeamScoreRead)
async def team_score(
    team_id: int,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    return teams.get_team_score(db, current_user, team_id)


@router.patch("/{team_id}/score", response_model=TeamRead)
async def update_team_score(
    team_id: int,
    data: ScoreUpdate,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    return teams.update_team_score(db, current_user, team_id, data)


@router.get("/{team_id}/members", response_model=List[OccupantRead])
async def team_members(team_id: int, db: Session = Depends(get_session)):
    """Leader first, then members."""
    return members.list_team_members(db, team_id)


@router.delete("/{team_id}/members/{user_id}")
async def remove_member(
    team_id: int,
    user_id: int,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    """Leave the team (own user id) or, as leader, remove a member."""
    members.remove_member(db, current_user, team_id, user_id)
    return {"success": True, "message": "Member removed successfully"}


@router.patch("/{team_id}/members/{membership_id}", response_model=MembershipRead)
async def change_member_role(
    team_id: int,
    membership_id: int,
    data: MemberRoleUpdate,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    return members.change_member_role(db, current_user, team_id, membership_id, data.role)


@router.get("/{team_id}/invitations", response_model=List[InvitationRead])
async def team_invitations(
    team_id: int,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    return invitations.list_team_invitations(db, current_user, team_id)
