from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stackteam.api.dependencies import get_db
from stackteam.api.endpoints import (
    admin,
    answers,
    auth,
    bookmarks,
    comments,
    notifications,
    questions,
    tags,
    teams,
    users,
    votes,
)
from stackteam.api.errors import register_exception_handlers
from stackteam.core.config import settings
from stackteam.core.logging import init_sentry, setup_logging
from stackteam.db.base import Base
from stackteam.db.session import engine
from stackteam.logging import get_logger
from stackteam.middleware.logging import AccessLoggingMiddleware

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.AUTO_CREATE_TABLES:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    logger.great("Application started", mode=settings.MODE, version=settings.APP_VERSION)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    description="""
## Authentication

The API uses OAuth2 with the password flow.

### Authenticating from the Swagger UI:

1. **Register** with `POST /api/auth/register` and copy the returned `access_token`,
   then click **Authorize** and paste it
2. **Or** click **Authorize** and enter your **email** in `username` and your password
3. **Or** call `POST /api/auth/login` with `{"email": "...", "password": "..."}`

Browser clients may rely on the HTTP-only `access_token` cookie instead.

## Teams

All questions, answers, comments, votes, tags and bookmarks belong to a team.
Every call is checked against the caller's membership; member management and
moderation require the team **admin** role.
    """,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# Initialize logging and error tracking
setup_logging()
init_sentry()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(
    AccessLoggingMiddleware,
    enabled=settings.ACCESS_LOG_ENABLED,
    slow_threshold=settings.SLOW_REQUEST_THRESHOLD,
)

register_exception_handlers(app)

app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(teams.router, prefix="/api/teams", tags=["teams"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])
app.include_router(questions.router, prefix="/api/questions", tags=["questions"])
app.include_router(answers.router, prefix="/api/answers", tags=["answers"])
app.include_router(comments.router, prefix="/api/comments", tags=["comments"])
app.include_router(votes.router, prefix="/api/votes", tags=["votes"])
app.include_router(tags.router, prefix="/api/tags", tags=["tags"])
app.include_router(bookmarks.router, prefix="/api/bookmarks", tags=["bookmarks"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["notifications"])
app.include_router(users.router, prefix="/api/users", tags=["users"])


@app.get("/health")
async def health(db: AsyncSession = Depends(get_db)):
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.warning("Health check: database unavailable")
        return JSONResponse(status_code=503, content={"status": "degraded", "database": "unavailable"})
    return {"status": "ok", "database": "ok"}


@app.get("/")
def root():
    return {"message": f"Welcome to the {settings.APP_NAME} API. See /docs for the OpenAPI reference."}
