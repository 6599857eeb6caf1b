"""FastAPI application entry point."""
import logging
from pathlib import Path

from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from app.config import settings
from app.database import init_db
from app.routers import addresses, history, preferences, routes

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="DriveLess",
    description="Multi-stop route optimization and map display",
    version="0.1.0"
)

# Add session middleware for user identity
app.add_middleware(SessionMiddleware, secret_key=settings.SECRET_KEY)

# Register routers
app.include_router(routes.router)
app.include_router(history.router)
app.include_router(addresses.router)
app.include_router(preferences.router)


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    # Ensure database directory exists
    if settings.DATABASE_URL.startswith("sqlite:///"):
        db_path = Path(settings.DATABASE_URL.replace("sqlite:///", ""))
        db_path.parent.mkdir(parents=True, exist_ok=True)

    # Create database tables
    init_db()
    logger.info("Database initialized")
    logger.info("Running in %s mode", settings.ENVIRONMENT)
    if not settings.GOOGLE_API_KEY:
        logger.warning("GOOGLE_API_KEY is not set; route optimization will fail")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.ENVIRONMENT}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8080, reload=settings.is_development)
