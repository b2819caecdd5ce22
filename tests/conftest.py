import secrets
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from main import app
from app.database import get_session
from app.models import Team, TeamStatus, User, UserRole, UserSession, UserStatus

# Create in-memory database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@pytest.fixture(name="session")
def session_fixture():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="make_user")
def make_user_fixture(session: Session):
    """Insert a user directly; returns a factory."""
    def _make_user(username: str, role: UserRole = UserRole.member, status: UserStatus = UserStatus.allow) -> User:
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash="hashed_secret",
            role=role,
            status=status
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture(name="auth")
def auth_fixture(session: Session):
    """Create a valid session token for a user and return request headers."""
    def _auth(user: User) -> dict:
        token = secrets.token_urlsafe(32)
        session.add(UserSession(
            user_id=user.id,
            session_token=token,
            expires_at=datetime.now(timezone.utc) + timedelta(days=7)
        ))
        session.commit()
        return {"Authorization": f"Bearer {token}"}

    return _auth


@pytest.fixture(name="admin")
def admin_fixture(make_user):
    return make_user("admin", role=UserRole.admin)


@pytest.fixture(name="make_team")
def make_team_fixture(client: TestClient, session: Session, auth):
    """Create a team through the API, optionally forcing its status."""
    def _make_team(leader: User, name: str = "Radiant Ancients", status: TeamStatus = TeamStatus.approved) -> dict:
        response = client.post("/api/teams", json={"name": name}, headers=auth(leader))
        assert response.status_code == 201, response.text
        team = session.get(Team, response.json()["id"])
        team.status = status
        session.add(team)
        session.commit()
        return {**response.json(), "status": status.value}

    return _make_team


@pytest.fixture(name="join_team")
def join_team_fixture(client: TestClient, auth):
    """Put a user into a team via invitation + acceptance."""
    def _join_team(leader: User, team_id: int, user: User) -> dict:
        invite = client.post(
            "/api/teams/invitations",
            json={"team_id": team_id, "invitee_id": user.id},
            headers=auth(leader)
        )
        assert invite.status_code == 201, invite.text
        accepted = client.patch(
            f"/api/teams/invitations/{invite.json()['id']}",
            json={"action": "accept"},
            headers=auth(user)
        )
        assert accepted.status_code == 200, accepted.text
        return accepted.json()

    return _join_team
