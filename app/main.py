"""Shift Checklist Web Application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.database import create_db_and_tables
from app.core.errors import ChecklistError
from app.core.scheduler import shutdown_scheduler, start_scheduler
from app.routes import auth, checklists, restaurants
from app.routes import settings as settings_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    filename=settings.log_file or None,
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    # Startup
    logger.info("Starting Shift Checklist application")
    create_db_and_tables()
    if settings.auto_lock_enabled:
        start_scheduler()
    yield
    # Shutdown
    if settings.auto_lock_enabled:
        shutdown_scheduler()
    logger.info("Shift Checklist application shut down")


app = FastAPI(
    title=settings.app_name,
    description="Restaurant shift checklists: sign off duties per shift, submit and lock completed days",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for external access
origins = (
    ["*"]
    if settings.allowed_origins == "*"
    else [o.strip() for o in settings.allowed_origins.split(",")]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ChecklistError)
async def checklist_error_handler(request: Request, exc: ChecklistError):
    """Render domain errors as JSON with their own status code."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": exc.detail},
    )


# Include routers
app.include_router(auth.router)
app.include_router(restaurants.router)
app.include_router(checklists.router)
app.include_router(settings_routes.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}
