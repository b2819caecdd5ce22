"""
One-team-per-user guard.

Every user is associated with at most one team, either as its leader or as a
member. The association is materialised as a TeamSeat row keyed by user_id, so
the database itself refuses a second association: two requests that both pass
assert_can_join() cannot both commit a seat. Callers must run the check and the
claim inside the same transaction (see app.database.atomic) so a refused claim
rolls back everything written alongside it.
"""
import logging
from typing import Any, Dict, List, Optional, Type

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, delete

from ..errors import AlreadyInTeam
from ..models.membership import TeamMembership, TeamSeat
from ..models.team import Team
from ..models.user import User

logger = logging.getLogger(__name__)


def get_seat(db: Session, user_id: int) -> Optional[TeamSeat]:
    """Current team association of a user, read from the database."""
    return db.exec(select(TeamSeat).where(TeamSeat.user_id == user_id)).first()


def assert_can_join(
    db: Session,
    user_id: int,
    error: Type[AlreadyInTeam] = AlreadyInTeam
) -> None:
    """Raise `error` if the user already leads or belongs to a team."""
    if get_seat(db, user_id) is not None:
        raise error()


def claim_seat(db: Session, user_id: int, team_id: int, is_leader: bool = False) -> TeamSeat:
    """
    Insert the user's seat and flush it immediately.

    A concurrent claim for the same user surfaces here as an IntegrityError on
    the primary key and is reported as AlreadyInTeam.
    """
    seat = TeamSeat(user_id=user_id, team_id=team_id, is_leader=is_leader)
    db.add(seat)
    try:
        db.flush()
    except IntegrityError as exc:
        logger.warning(f"Seat for user {user_id} already taken, refusing team {team_id}")
        raise AlreadyInTeam() from exc
    return seat


def release_seat(db: Session, user_id: int, team_id: int) -> None:
    db.exec(
        delete(TeamSeat).where(
            TeamSeat.user_id == user_id,
            TeamSeat.team_id == team_id
        )
    )


def release_team(db: Session, team_id: int) -> int:
    """Drop every membership and seat of a team. Returns the number of members removed."""
    result = db.exec(delete(TeamMembership).where(TeamMembership.team_id == team_id))
    db.exec(delete(TeamSeat).where(TeamSeat.team_id == team_id))
    return result.rowcount


def team_occupants(db: Session, team: Team) -> List[Dict[str, Any]]:
    """
    Everyone in a team: the leader first, then members, newest first.

    This is the only place where the leader and the membership rows are merged.
    """
    occupants = []

    leader = db.get(User, team.leader_id)
    if leader:
        occupants.append({
            "user_id": leader.id,
            "username": leader.username,
            "is_leader": True,
            "role": None,
            "membership_id": None,
            "joined_at": team.created_at,
            "score": leader.score
        })

    statement = (
        select(TeamMembership, User)
        .join(User, User.id == TeamMembership.user_id)
        .where(TeamMembership.team_id == team.id)
        .order_by(TeamMembership.joined_at.desc(), TeamMembership.id.desc())
    )
    for membership, user in db.exec(statement).all():
        occupants.append({
            "user_id": user.id,
            "username": user.username,
            "is_leader": False,
            "role": membership.role,
            "membership_id": membership.id,
            "joined_at": membership.joined_at,
            "score": user.score
        })

    return occupants
