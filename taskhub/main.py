"""
TaskHub FastAPI Application - Main entry point.

TaskHub is a collaborative project and task tracker:

- Projects: team membership with Owner/Admin/Editor/Viewer roles, derived progress
- Tasks: status, priority, assignees, subtasks and comments
- Dashboard: aggregates and a monthly calendar

All endpoints live under /api/v1/{module}/ paths.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from taskhub import __version__
from taskhub.core.config import settings
from taskhub.core.errors import TaskHubError
from taskhub.core.logging import setup_logging
from taskhub.db.base import init_db
from taskhub.schemas.common import HealthResponse

from taskhub.api.v1 import auth
from taskhub.api.v1.projects import projects_router
from taskhub.api.v1.tasks import tasks_router
from taskhub.api.v1.dashboard import dashboard_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    setup_logging(settings.LOG_LEVEL)
    # Note: In production, use Alembic migrations instead
    await init_db()
    logger.info("%s started env=%s", settings.APP_NAME, settings.APP_ENV)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=__version__,
    description="""
TaskHub - collaborative project and task tracking.

## Modules

- **Projects**: Projects, teams and roles
- **Tasks**: Tasks, subtasks and comments
- **Dashboard**: Summary aggregates and calendar
    """,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# HEALTH CHECK
# ============================================================================

@app.get("/api/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(code=200, message="API is healthy.")


# ============================================================================
# V1 API ENDPOINTS
# ============================================================================

# Auth - /api/v1/auth/*
app.include_router(
    auth.router,
    prefix=f"{settings.API_V1_PREFIX}/auth",
    tags=["auth"]
)

# Projects module - /api/v1/projects/*
app.include_router(
    projects_router,
    prefix=settings.API_V1_PREFIX,
)

# Tasks module - /api/v1/tasks/*
# Includes: subtasks, comments
app.include_router(
    tasks_router,
    prefix=settings.API_V1_PREFIX,
)

# Dashboard module - /api/v1/dashboard/*
app.include_router(
    dashboard_router,
    prefix=settings.API_V1_PREFIX,
)


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(TaskHubError)
async def taskhub_error_handler(request: Request, exc: TaskHubError):
    """Map domain errors onto their HTTP status."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    if settings.DEBUG:
        return JSONResponse(
            status_code=500,
            content={"detail": str(exc)}
        )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "taskhub.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
