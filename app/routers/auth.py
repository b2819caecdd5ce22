from fastapi import APIRouter, Depends, Request, Response
from sqlmodel import Session

from ..config import SESSION_COOKIE_NAME, SESSION_EXPIRE_DAYS
from ..database import get_session
from ..dependencies import get_credential, require_user
from ..errors import Forbidden, Unauthenticated
from ..models.enums import UserStatus
from ..models.user import User
from ..schemas import SessionRead, SigninRequest, SignupRequest, UserRead
from ..services.auth import authenticate_user, create_session, create_user, delete_session

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _session_response(response: Response, db: Session, user: User) -> dict:
    user_session = create_session(db, user.id)
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=user_session.session_token,
        httponly=True,
        max_age=SESSION_EXPIRE_DAYS * 24 * 60 * 60,
        samesite="lax"
    )
    db.refresh(user)
    return {
        "token": user_session.session_token,
        "expires_at": user_session.expires_at,
        "user": user
    }


@router.post("/signup", response_model=SessionRead, status_code=201)
async def signup(
    data: SignupRequest,
    response: Response,
    db: Session = Depends(get_session)
):
    """Create an account and sign it in."""
    user = create_user(db, data.username, data.email, data.password)
    return _session_response(response, db, user)


@router.post("/signin", response_model=SessionRead)
async def signin(
    data: SigninRequest,
    response: Response,
    db: Session = Depends(get_session)
):
    """Sign in with a username or email."""
    user = authenticate_user(db, data.identifier, data.password)
    if not user:
        raise Unauthenticated("Invalid username or password")
    if user.status == UserStatus.block:
        raise Forbidden("Your account is blocked")
    return _session_response(response, db, user)


@router.post("/signout")
async def signout(
    request: Request,
    response: Response,
    db: Session = Depends(get_session)
):
    session_token = get_credential(request)
    if session_token:
        delete_session(db, session_token)
    response.delete_cookie(SESSION_COOKIE_NAME)
    return {"success": True, "message": "Signed out"}


@router.get("/session", response_model=UserRead)
async def current_session(current_user: User = Depends(require_user)):
    return current_user
