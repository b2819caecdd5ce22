from typing import Optional
from fastapi import Request, Depends
from sqlmodel import Session

from .config import SESSION_COOKIE_NAME
from .database import get_session
from .errors import Forbidden, Unauthenticated
from .models.enums import UserStatus
from .models.user import User
from .services.auth import get_user_by_session_token


def get_credential(request: Request) -> Optional[str]:
    """Session token from the Authorization header, falling back to the cookie."""
    auth_header = request.headers.get("authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return request.cookies.get(SESSION_COOKIE_NAME)


async def get_current_user(
    request: Request,
    db: Session = Depends(get_session)
) -> Optional[User]:
    """Get the current logged-in user from the session token."""
    session_token = get_credential(request)
    if not session_token:
        return None
    return get_user_by_session_token(db, session_token)


async def require_user(
    current_user: Optional[User] = Depends(get_current_user)
) -> User:
    """Require a logged-in user. Fails closed before any handler runs."""
    if not current_user:
        raise Unauthenticated()
    if current_user.status == UserStatus.block:
        raise Forbidden("Your account is blocked")
    return current_user


async def require_admin(
    current_user: User = Depends(require_user)
) -> User:
    """Require an admin or superadmin user."""
    if not current_user.is_admin:
        raise Forbidden("Admin access required")
    return current_user
