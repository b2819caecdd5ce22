import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlmodel import Session, select

from app.config import LOG_LEVEL, SUPERADMIN_EMAIL, SUPERADMIN_PASSWORD, SUPERADMIN_USERNAME
from app.database import create_db_and_tables, engine
from app.errors import TeamError, ValidationError
from app.models import User, UserRole
from app.services.auth import create_user

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: Create database tables and make sure a superadmin exists
    create_db_and_tables()
    with Session(engine) as db:
        superadmin = db.exec(select(User).where(User.role == UserRole.superadmin)).first()
        if not superadmin:
            create_user(
                db,
                username=SUPERADMIN_USERNAME,
                email=SUPERADMIN_EMAIL,
                password=SUPERADMIN_PASSWORD,
                role=UserRole.superadmin
            )
            logger.info(f"Seeded superadmin account '{SUPERADMIN_USERNAME}'")
    yield
    # Shutdown: cleanup if needed


# Initialize FastAPI app
app = FastAPI(
    title="Team Membership Service",
    description="Teams, invitations, join requests and memberships for the community",
    version="1.0.0",
    lifespan=lifespan
)


@app.exception_handler(TeamError)
async def team_error_handler(request: Request, exc: TeamError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.to_dict()}
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies and parameters share the ValidationError envelope."""
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"][1:])
        messages.append(f"{field}: {error['msg']}" if field else error["msg"])
    return await team_error_handler(request, ValidationError("; ".join(messages) or None))


# Include routers; invitations and join requests before teams so their fixed
# paths win over /api/teams/{slug}
from app.routers import auth, invitations, join_requests, teams

app.include_router(auth.router)
app.include_router(invitations.router)
app.include_router(join_requests.router)
app.include_router(teams.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
