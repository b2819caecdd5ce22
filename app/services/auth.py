import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, or_

from ..config import SESSION_EXPIRE_DAYS
from ..errors import EmailTaken, UsernameTaken
from ..models.enums import UserRole, UserStatus
from ..models.session import UserSession
from ..models.user import User


def _password_bytes(password: str) -> bytes:
    # Bcrypt has a 72-byte limit on the password bytes
    password_bytes = password.encode('utf-8')
    if len(password_bytes) > 72:
        password_bytes = password_bytes[:72]
    return password_bytes


def hash_password(password: str) -> str:
    """Hash a password using bcrypt. Truncates to 72 bytes for bcrypt compatibility."""
    hashed = bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt())
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode('utf-8'))


def create_session(db: Session, user_id: int) -> UserSession:
    """Create a new session for a user."""
    user_session = UserSession(
        user_id=user_id,
        session_token=secrets.token_urlsafe(32),
        expires_at=datetime.now(timezone.utc) + timedelta(days=SESSION_EXPIRE_DAYS)
    )
    db.add(user_session)
    db.commit()
    db.refresh(user_session)
    return user_session


def delete_session(db: Session, session_token: str) -> bool:
    """Delete a session (logout)."""
    statement = select(UserSession).where(UserSession.session_token == session_token)
    user_session = db.exec(statement).first()

    if user_session:
        db.delete(user_session)
        db.commit()
        return True

    return False


def get_user_by_session_token(db: Session, session_token: str) -> Optional[User]:
    """Get user by session token if session is valid."""
    statement = select(UserSession).where(UserSession.session_token == session_token)
    user_session = db.exec(statement).first()

    if not user_session:
        return None

    # Check if session has expired
    if user_session.expires_at < datetime.now(timezone.utc):
        db.delete(user_session)
        db.commit()
        return None

    return db.get(User, user_session.user_id)


def authenticate_user(db: Session, identifier: str, password: str) -> Optional[User]:
    """Authenticate a user by username or email and password."""
    statement = select(User).where(or_(User.username == identifier, User.email == identifier))
    user = db.exec(statement).first()

    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user


def _assert_available(db: Session, username: str, email: str) -> None:
    if db.exec(select(User).where(User.username == username)).first():
        raise UsernameTaken()
    if db.exec(select(User).where(User.email == email)).first():
        raise EmailTaken()


def create_user(
    db: Session,
    username: str,
    email: str,
    password: str,
    role: UserRole = UserRole.member,
    status: UserStatus = UserStatus.allow
) -> User:
    """Create a new user."""
    _assert_available(db, username, email)

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        role=role,
        status=status
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # A concurrent signup took the username or email after our check
        db.rollback()
        if db.exec(select(User).where(User.username == username)).first():
            raise UsernameTaken() from exc
        raise EmailTaken() from exc
    db.refresh(user)
    return user
