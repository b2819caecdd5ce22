from contextlib import contextmanager

from sqlmodel import SQLModel, Session, create_engine
from .config import DATABASE_URL

# Create engine; SQLite needs cross-thread access for the threadpool
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(
    DATABASE_URL,
    echo=False,
    connect_args=connect_args
)


def create_db_and_tables():
    """Create all database tables."""
    # Import models so every table is registered on the metadata
    from . import models  # noqa: F401
    SQLModel.metadata.create_all(engine)


def get_session():
    """Dependency for getting database sessions."""
    with Session(engine) as session:
        yield session


@contextmanager
def atomic(db: Session):
    """
    Run a block as a single transaction.

    Commits when the block finishes, otherwise rolls back and re-raises so the
    caller sees the original error and nothing is left half-written.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
