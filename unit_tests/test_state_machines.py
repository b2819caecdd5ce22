import pytest
from sqlalchemy.exc import IntegrityError

from app.errors import AlreadyResolved, ValidationError
from app.models import (
    InvitationAction,
    InvitationStatus,
    JoinRequestAction,
    JoinRequestStatus,
    TeamInvitation,
    TeamJoinRequest,
    TeamStatus,
    User,
)
from app.schemas import TeamCreate
from app.services import invitations, join_requests, teams


@pytest.fixture(name="team")
def team_fixture(session, make_user):
    team = teams.create_team(session, make_user("sven"), TeamCreate(name="Radiant"))
    team.status = TeamStatus.approved
    session.add(team)
    session.commit()
    session.refresh(team)
    return team


def leader_of(session, team):
    return session.get(User, team.leader_id)


@pytest.mark.parametrize("action,status", [
    (InvitationAction.accept, InvitationStatus.accepted),
    (InvitationAction.reject, InvitationStatus.rejected),
])
def test_invitation_terminal_states(session, make_user, team, action, status):
    lina = make_user("lina")
    invitation = invitations.send_invitation(session, leader_of(session, team), team.id, lina.id)

    resolved = invitations.respond_to_invitation(session, lina, invitation.id, action)
    assert resolved.status == status

    for again in InvitationAction:
        with pytest.raises(AlreadyResolved):
            invitations.respond_to_invitation(session, lina, invitation.id, again)
    assert session.get(TeamInvitation, invitation.id).status == status


@pytest.mark.parametrize("action,status", [
    (JoinRequestAction.approve, JoinRequestStatus.approved),
    (JoinRequestAction.reject, JoinRequestStatus.rejected),
])
def test_join_request_terminal_states(session, make_user, team, action, status):
    lina = make_user("lina")
    join_request = join_requests.create_join_request(session, lina, team.id, "hi")
    leader = leader_of(session, team)

    resolved = join_requests.respond_to_join_request(session, leader, join_request.id, action)
    assert resolved.status == status

    for again in JoinRequestAction:
        with pytest.raises(AlreadyResolved):
            join_requests.respond_to_join_request(session, leader, join_request.id, again)
    assert session.get(TeamJoinRequest, join_request.id).status == status


def test_unknown_actions_are_rejected(session, make_user, team):
    lina = make_user("lina")
    invitation = invitations.send_invitation(session, leader_of(session, team), team.id, lina.id)

    with pytest.raises(ValidationError):
        invitations.respond_to_invitation(session, lina, invitation.id, "approve")
    with pytest.raises(ValidationError):
        join_requests.respond_to_join_request(session, lina, 1, "accept")

    assert session.get(TeamInvitation, invitation.id).status == InvitationStatus.pending


def test_database_refuses_second_pending_invitation(session, make_user, team):
    lina = make_user("lina")
    session.add(TeamInvitation(team_id=team.id, inviter_id=team.leader_id, invitee_id=lina.id))
    session.commit()

    session.add(TeamInvitation(team_id=team.id, inviter_id=team.leader_id, invitee_id=lina.id))
    with pytest.raises(IntegrityError):
        session.commit()
    session.rollback()


def test_resolved_entries_do_not_block_new_ones(session, make_user, team):
    lina = make_user("lina")
    session.add(TeamJoinRequest(team_id=team.id, user_id=lina.id, status=JoinRequestStatus.rejected))
    session.add(TeamJoinRequest(team_id=team.id, user_id=lina.id, status=JoinRequestStatus.rejected))
    session.add(TeamJoinRequest(team_id=team.id, user_id=lina.id))
    session.commit()

    with pytest.raises(IntegrityError):
        session.add(TeamJoinRequest(team_id=team.id, user_id=lina.id))
        session.commit()
    session.rollback()


def test_responses_outlive_team_deletion(session, make_user, team):
    lina = make_user("lina")
    tiny = make_user("tiny")
    leader = leader_of(session, team)
    team_id = team.id
    invitation = invitations.send_invitation(session, leader, team_id, lina.id)
    accepted = invitations.respond_to_invitation(session, lina, invitation.id, InvitationAction.accept)
    join_request = join_requests.create_join_request(session, tiny, team_id)
    rejected = join_requests.respond_to_join_request(session, leader, join_request.id, JoinRequestAction.reject)

    teams.delete_team(session, leader, team_id)

    # Returned values were read inside the transaction, not lazily afterwards
    assert session.get(TeamInvitation, invitation.id) is None
    assert (accepted.team_id, accepted.status) == (team_id, InvitationStatus.accepted)
    assert accepted.responded_at is not None
    assert (rejected.team_id, rejected.status) == (team_id, JoinRequestStatus.rejected)
