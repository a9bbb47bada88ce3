from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from teamtasks.api.endpoints import auth, notifications, tasks, teams, users
from teamtasks.core.config import settings
from teamtasks.core.exceptions import AppError
from teamtasks.core.logging import capture_error, init_sentry, setup_logging
from teamtasks.db.base import Base
from teamtasks.db.session import engine
from teamtasks.helpers.getters import isDebugMode
from teamtasks.logging import get_logger
from teamtasks.middleware.logging import AccessLoggingMiddleware

# Initialize logging and error tracking
setup_logging()
init_sentry()

logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.great("Application started", mode=settings.MODE)
    yield
    await engine.dispose()


app = FastAPI(
    title="Team Task Manager API",
    description="""
## Authentication

Sessions are cookie based. `POST /api/auth/register` or `POST /api/auth/login`
sets an HttpOnly `session` cookie; send it back on every request.
`POST /api/auth/logout` revokes it.

## Resources

- **Teams**: teams with admin/member memberships
- **Tasks**: team tasks with assignees, statuses and priorities
- **Notifications**: assignment, reassignment and completion events
    """,
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,        # the session cookie must cross origins
    allow_methods=["*"],
    allow_headers=["*"],
)

# Access logging is for deployed instances only
app.add_middleware(
    AccessLoggingMiddleware,
    enabled=settings.ACCESS_LOG_ENABLED and not isDebugMode(),
    slow_threshold=settings.SLOW_REQUEST_THRESHOLD_SEC,
)


# ==================== Error handlers ====================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = []
    from_query = False
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in ("query", "path"):
            from_query = True
        field = ".".join(loc[1:]) if len(loc) > 1 else ".".join(loc)
        details.append({"field": field, "message": error.get("msg", "Invalid value")})

    message = "Invalid query parameters" if from_query else "Validation error"
    return JSONResponse(status_code=400, content={"error": message, "details": details})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    user = getattr(request.state, "user", None)
    logger.error("Unhandled error", method=request.method, path=request.url.path)
    capture_error(
        exc,
        context={"request": {"method": request.method, "path": request.url.path}},
        user={"id": user.id, "email": user.email, "name": user.name} if user else None,
    )
    message = "Internal server error" if settings.MODE == "production" else str(exc)
    return JSONResponse(status_code=500, content={"error": message})


app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(teams.router, prefix="/api/teams", tags=["teams"])
app.include_router(tasks.router, prefix="/api/tasks", tags=["tasks"])
app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["notifications"])


@app.get("/")
@app.get("/health")
async def health():
    return {
        "message": f"{settings.APP_NAME} API is running",
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
