"""
FastAPI application entry point for CrewLink.

This is the main app that:
- Initializes FastAPI with CORS
- Maps domain errors to HTTP responses
- Registers all API routers
- Provides health check endpoint
- Creates missing tables on startup
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from crewlink.config import settings
from crewlink import database
from crewlink.services.errors import (
    ConflictError,
    CrewLinkError,
    InvalidTransitionError,
    NotFoundError,
    UpstreamReadError,
    ValidationError,
)
# Import API routers
from crewlink.api import listings, applications, notifications

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    On startup: Create any missing tables
    On shutdown: Close database connections gracefully
    """
    # Startup
    logger.info("Starting CrewLink API...")
    logger.info(f"Database: {settings.database_url.split('@')[1] if '@' in settings.database_url else 'configured'}")
    logger.info(f"Debug mode: {settings.debug}")
    await database.init_db()

    yield

    # Shutdown
    logger.info("Shutting down CrewLink API...")
    await database.engine.dispose()


# Initialize FastAPI app
app = FastAPI(
    title="CrewLink API",
    description="Seasonal resort job board and hiring pipeline",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan,
)

# Configure CORS
allowed_origins = [
    "http://localhost:3000",  # Local development
]

# Add production origins from environment variable
if settings.allowed_origins:
    allowed_origins.extend(
        origin.strip() for origin in settings.allowed_origins.split(',') if origin.strip()
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Domain error → HTTP status
ERROR_STATUS_CODES = {
    NotFoundError: 404,
    InvalidTransitionError: 409,
    ConflictError: 409,
    ValidationError: 422,
    UpstreamReadError: 503,
}


@app.exception_handler(CrewLinkError)
async def domain_error_handler(request: Request, exc: CrewLinkError):
    status_code = next(
        (code for error_type, code in ERROR_STATUS_CODES.items() if isinstance(exc, error_type)),
        500,
    )
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({status_code}): {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


# Health check endpoint
@app.get("/health")
async def health_check():
    """Simple health check endpoint."""
    return {
        "status": "healthy",
        "service": "CrewLink API",
        "version": "1.0.0",
    }


# Root endpoint
@app.get("/")
async def root():
    """API root with basic info."""
    return {
        "message": "CrewLink API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


# Register API routers
app.include_router(listings.router, prefix="/api/listings", tags=["listings"])
app.include_router(applications.router, prefix="/api/applications", tags=["applications"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["notifications"])
