import pytest
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from app.models import User, UserRole

# Create an in-memory SQLite engine for tests
engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@pytest.fixture(name="session")
def session_fixture():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="file_engine")
def file_engine_fixture(tmp_path):
    """A file-backed SQLite engine; separate connections see each other's commits."""
    file_engine = create_engine(
        f"sqlite:///{tmp_path / 'teams.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    SQLModel.metadata.create_all(file_engine)
    yield file_engine
    file_engine.dispose()


@pytest.fixture(name="make_user")
def make_user_fixture(session: Session):
    def _make_user(username: str, role: UserRole = UserRole.member) -> User:
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash="hashed_secret",
            role=role
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user
