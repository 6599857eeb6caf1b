"""Database engine, session factory and table creation."""
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import settings

logger = logging.getLogger(__name__)


def make_engine(database_url: str):
    """
    Create an engine for a database URL.

    SQLite connections are shared with FastAPI's worker threads, and an
    in-memory SQLite database is kept on a single connection so every
    session sees the same tables.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    options = {"connect_args": {"check_same_thread": False}}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        options["poolclass"] = StaticPool
    return create_engine(database_url, **options)


engine = make_engine(settings.DATABASE_URL)

# Session factory bound to the configured database
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()


def get_db():
    """
    Dependency for getting database sessions.

    Yields:
        Database session that will be closed after use.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create all tables on the given engine (the configured one by default)."""
    # Import models so SQLAlchemy knows about them
    from app.models import SavedAddress, SavedRoute, UsageRecord, UserPreferences  # noqa: F401

    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    logger.debug("Tables ready on %s", bind.url)
