import logging
import math
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, func, delete, col, or_

from ..database import atomic
from ..errors import (
    AlreadyLeader,
    AlreadyMember,
    Forbidden,
    SlugConflict,
    TeamBlocked,
    TeamNotFound,
    ValidationError,
)
from ..models.enums import TeamStatus
from ..models.invitation import TeamInvitation
from ..models.join_request import TeamJoinRequest
from ..models.score_audit import TeamScoreAudit
from ..models.team import Team
from ..models.user import User
from ..schemas import ScoreUpdate, TeamCreate, TeamUpdate
from . import guard

logger = logging.getLogger(__name__)

# Fixed paths under /api/teams that a slug must never shadow
RESERVED_SLUGS = {"my-team", "invitations", "join-requests"}


def slugify(name: str) -> str:
    """
    Turn a team name into a URL slug.

    "  The Ancient   Ones! " -> "the-ancient-ones"
    """
    slug = name.lower().strip()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def _available_slug(db: Session, base: str, team_id: Optional[int] = None) -> str:
    """First of base, base-2, base-3, ... not used by another team."""
    statement = select(Team.slug).where(
        or_(Team.slug == base, col(Team.slug).like(f"{base}-%"))
    )
    if team_id is not None:
        statement = statement.where(Team.id != team_id)
    taken = set(db.exec(statement).all()) | RESERVED_SLUGS

    candidate = base
    suffix = 2
    while candidate in taken:
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate


def _slug_for(db: Session, name: str, team_id: Optional[int] = None) -> str:
    base = slugify(name)
    if not base:
        raise ValidationError("Team name must contain at least one letter or number")
    return _available_slug(db, base, team_id)


def _flush_team(db: Session) -> None:
    # The slug is the only unique column on teams; a clash here means another
    # request took the same slug after we picked it.
    try:
        db.flush()
    except IntegrityError as exc:
        raise SlugConflict() from exc


def get_team_or_404(db: Session, team_id: int) -> Team:
    team = db.get(Team, team_id)
    if not team:
        raise TeamNotFound()
    return team


def get_team_by_slug(db: Session, slug: str) -> Team:
    team = db.exec(select(Team).where(Team.slug == slug)).first()
    if not team:
        raise TeamNotFound()
    return team


def get_user_team(db: Session, user_id: int) -> Optional[Team]:
    """The team a user leads or belongs to, if any."""
    seat = guard.get_seat(db, user_id)
    if not seat:
        return None
    return db.get(Team, seat.team_id)


def list_teams(
    db: Session,
    page: int = 1,
    limit: int = 12,
    search: str = "",
    status: Optional[TeamStatus] = None
) -> Tuple[List[Team], int]:
    """Newest teams first, filtered by name and status. Returns (teams, total)."""
    query = select(Team)
    count_query = select(func.count(Team.id))

    if search:
        query = query.where(col(Team.name).contains(search, autoescape=True))
        count_query = count_query.where(col(Team.name).contains(search, autoescape=True))
    if status:
        query = query.where(Team.status == status)
        count_query = count_query.where(Team.status == status)

    total = db.exec(count_query).one()
    teams = db.exec(
        query
        .order_by(Team.created_at.desc(), Team.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()
    return list(teams), total


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def create_team(db: Session, caller: User, data: TeamCreate) -> Team:
    """Create a team led by the caller. New teams wait for admin approval."""
    with atomic(db):
        seat = guard.get_seat(db, caller.id)
        if seat:
            raise AlreadyLeader() if seat.is_leader else AlreadyMember()

        team = Team(
            name=data.name,
            slug=_slug_for(db, data.name),
            bio=data.bio,
            mark_url=data.mark_url,
            ad_url=data.ad_url,
            leader_id=caller.id,
            status=TeamStatus.waiting,
            score=0
        )
        db.add(team)
        _flush_team(db)

        guard.claim_seat(db, caller.id, team.id, is_leader=True)

    db.refresh(team)
    logger.info(f"User {caller.id} created team {team.id} ({team.slug})")
    return team


def update_team(db: Session, caller: User, team_id: int, patch: TeamUpdate) -> Team:
    """
    Leaders may edit name, bio and images of a team that is not blocked.
    Admins may edit everything, including status, at any time.
    """
    with atomic(db):
        team = get_team_or_404(db, team_id)

        if not caller.is_admin:
            if team.leader_id != caller.id:
                raise Forbidden("Only team leader or admin can update the team")
            if team.status == TeamStatus.blocked:
                raise TeamBlocked("This team is blocked and cannot be updated")
            if "status" in patch.model_fields_set:
                raise Forbidden("Only admins can change team status")

        changes = patch.model_dump(exclude_unset=True)

        if "name" in changes:
            if changes["name"] is None:
                raise ValidationError("Team name cannot be empty")
            team.name = changes["name"]
            team.slug = _slug_for(db, team.name, team.id)

        for field in ("bio", "mark_url", "ad_url"):
            if field in changes:
                setattr(team, field, changes[field])

        if "status" in changes:
            if changes["status"] is None:
                raise ValidationError("Team status cannot be empty")
            if changes["status"] != team.status:
                logger.info(
                    f"User {caller.id} moved team {team.id} from {team.status.value} to {changes['status'].value}"
                )
            team.status = changes["status"]

        team.updated_at = datetime.now(timezone.utc)
        db.add(team)
        _flush_team(db)

    db.refresh(team)
    return team


def delete_team(db: Session, caller: User, team_id: int) -> None:
    """Delete a team together with its memberships, invitations and join requests."""
    with atomic(db):
        team = get_team_or_404(db, team_id)
        if team.leader_id != caller.id and not caller.is_admin:
            raise Forbidden("Only team leader or admin can delete the team")

        db.exec(delete(TeamInvitation).where(TeamInvitation.team_id == team.id))
        db.exec(delete(TeamJoinRequest).where(TeamJoinRequest.team_id == team.id))
        removed = guard.release_team(db, team.id)
        db.delete(team)

    logger.info(f"User {caller.id} deleted team {team_id} ({removed} members removed)")


def update_team_score(db: Session, caller: User, team_id: int, data: ScoreUpdate) -> Team:
    """Set a team's score and record the change in the audit log."""
    if not caller.is_admin:
        raise Forbidden("Admin access required")

    with atomic(db):
        team = get_team_or_404(db, team_id)
        old_score = team.score

        team.score = data.score
        team.updated_at = datetime.now(timezone.utc)
        db.add(team)
        db.add(TeamScoreAudit(
            actor_id=caller.id,
            team_id=team.id,
            old_score=old_score,
            new_score=data.score,
            reason=data.reason
        ))

    reason = f" - Reason: {data.reason}" if data.reason else ""
    logger.info(
        f"Admin {caller.username} ({caller.id}) updated team {team_id} score from {old_score} to {data.score}{reason}"
    )
    db.refresh(team)
    return team


def get_team_score(db: Session, caller: User, team_id: int) -> Dict[str, Any]:
    """Current score of a team with its audit history, newest first."""
    if not caller.is_admin:
        raise Forbidden("Admin access required")

    team = get_team_or_404(db, team_id)
    history = db.exec(
        select(TeamScoreAudit)
        .where(TeamScoreAudit.team_id == team.id)
        .order_by(TeamScoreAudit.created_at.desc(), TeamScoreAudit.id.desc())
    ).all()

    return {
        "current_score": team.score,
        "team": team,
        "last_updated": team.updated_at,
        "history": history
    }


