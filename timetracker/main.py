"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from timetracker.config import settings
from timetracker.database import database
from timetracker.exceptions import TimeTrackerError
from timetracker.routers import auth, projects, time_entries, users

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events."""
    # Startup
    await database.connect()
    yield
    # Shutdown
    await database.disconnect()


app = FastAPI(
    title="Time Tracker API",
    description="Time tracking API: projects, running timers and manual entries",
    version="0.1.0",
    lifespan=lifespan,
    debug=settings.debug,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TimeTrackerError)
async def time_tracker_error_handler(request: Request, exc: TimeTrackerError):
    """Render domain errors with their status code and a correlation id."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "%s: %s | error_id=%s | path=%s",
        exc.error_code,
        exc.message,
        exc.error_id,
        request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().to_dict(),
    )


# Include routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(projects.router)
app.include_router(time_entries.router)


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {"status": "ok", "message": "Time Tracker API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
