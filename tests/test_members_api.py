from sqlmodel import select

from app.models import TeamMembership, TeamSeat


def members_of(client, team_id):
    return client.get(f"/api/teams/{team_id}/members").json()


def test_leader_listed_first_and_once(client, make_user, make_team, join_team):
    leader = make_user("sven")
    team = make_team(leader)

    occupants = members_of(client, team["id"])
    assert len(occupants) == 1
    assert occupants[0]["user_id"] == leader.id
    assert occupants[0]["is_leader"] is True
    assert occupants[0]["role"] is None
    assert occupants[0]["membership_id"] is None

    join_team(leader, team["id"], make_user("lina"))
    join_team(leader, team["id"], make_user("tiny"))

    occupants = members_of(client, team["id"])
    assert [o["username"] for o in occupants] == ["sven", "tiny", "lina"]
    assert [o["is_leader"] for o in occupants] == [True, False, False]


def test_members_of_missing_team(client):
    response = client.get("/api/teams/9999/members")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "TeamNotFound"


def test_member_leaves(client, session, make_user, auth, make_team, join_team):
    leader = make_user("sven")
    lina = make_user("lina")
    team = make_team(leader)
    join_team(leader, team["id"], lina)

    response = client.delete(f"/api/teams/{team['id']}/members/{lina.id}", headers=auth(lina))

    assert response.status_code == 200
    assert [o["username"] for o in members_of(client, team["id"])] == ["sven"]
    assert session.get(TeamSeat, lina.id) is None

    # A member who left can lead a team of their own
    assert client.post("/api/teams", json={"name": "Solo Queue"}, headers=auth(lina)).status_code == 201


def test_leader_removes_member(client, make_user, auth, make_team, join_team):
    leader = make_user("sven")
    lina = make_user("lina")
    team = make_team(leader)
    join_team(leader, team["id"], lina)

    response = client.delete(f"/api/teams/{team['id']}/members/{lina.id}", headers=auth(leader))

    assert response.status_code == 200
    assert client.get("/api/teams/my-team", headers=auth(lina)).json() is None


def test_leader_cannot_leave(client, make_user, auth, make_team):
    leader = make_user("sven")
    team = make_team(leader)

    response = client.delete(f"/api/teams/{team['id']}/members/{leader.id}", headers=auth(leader))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "LeaderCannotLeave"
    assert client.get("/api/teams/my-team", headers=auth(leader)).json()["id"] == team["id"]


def test_members_cannot_remove_others(client, session, make_user, auth, make_team, join_team):
    leader = make_user("sven")
    lina = make_user("lina")
    tiny = make_user("tiny")
    team = make_team(leader)
    join_team(leader, team["id"], lina)
    join_team(leader, team["id"], tiny)

    response = client.delete(f"/api/teams/{team['id']}/members/{tiny.id}", headers=auth(lina))
    assert response.status_code == 403

    response = client.delete(f"/api/teams/{team['id']}/members/{leader.id}", headers=auth(lina))
    assert response.status_code == 403

    assert len(session.exec(select(TeamMembership)).all()) == 2


def test_remove_non_member(client, make_user, auth, make_team):
    leader = make_user("sven")
    team = make_team(leader)
    outsider = make_user("meepo")

    response = client.delete(f"/api/teams/{team['id']}/members/{outsider.id}", headers=auth(leader))
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "MembershipNotFound"

    response = client.delete(f"/api/teams/{team['id']}/members/{outsider.id}", headers=auth(outsider))
    assert response.status_code == 404


def test_leave_twice(client, make_user, auth, make_team, join_team):
    leader = make_user("sven")
    lina = make_user("lina")
    team = make_team(leader)
    join_team(leader, team["id"], lina)

    assert client.delete(f"/api/teams/{team['id']}/members/{lina.id}", headers=auth(lina)).status_code == 200
    assert client.delete(f"/api/teams/{team['id']}/members/{lina.id}", headers=auth(lina)).status_code == 404


def test_leader_changes_member_role(client, make_user, auth, make_team, join_team):
    leader = make_user("sven")
    lina = make_user("lina")
    team = make_team(leader)
    join_team(leader, team["id"], lina)
    membership_id = members_of(client, team["id"])[1]["membership_id"]

    response = client.patch(
        f"/api/teams/{team['id']}/members/{membership_id}",
        json={"role": "King Creep"},
        headers=auth(leader)
    )

    assert response.status_code == 200
    assert response.json()["role"] == "King Creep"
    assert members_of(client, team["id"])[1]["role"] == "King Creep"


def test_role_change_rules(client, make_user, auth, make_team, join_team):
    sven = make_user("sven")
    tiny = make_user("tiny")
    lina = make_user("lina")
    io = make_user("io")
    radiant = make_team(sven)
    dire = make_team(tiny, name="Dire Creeps")
    join_team(sven, radiant["id"], lina)
    join_team(tiny, dire["id"], io)
    radiant_membership = members_of(client, radiant["id"])[1]["membership_id"]
    dire_membership = members_of(client, dire["id"])[1]["membership_id"]
    url = f"/api/teams/{radiant['id']}/members"

    response = client.patch(f"{url}/{radiant_membership}", json={"role": "Bounty"}, headers=auth(lina))
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "NotLeader"

    response = client.patch(f"{url}/{dire_membership}", json={"role": "Bounty"}, headers=auth(sven))
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "MembershipNotFound"

    response = client.patch(f"{url}/{radiant_membership}", json={"role": "Carry"}, headers=auth(sven))
    assert response.status_code == 422
