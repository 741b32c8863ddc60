import logging
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from stream_monitor.core.config import get_settings
from stream_monitor.models.models import Base

logger = logging.getLogger(__name__)


def get_database_url(database_url: Optional[str] = None) -> str:
    """Get the database URL from settings, normalizing postgres:// URLs."""
    db_url = database_url or get_settings().DATABASE_URL

    # Handle special case for postgres:// URLs
    if db_url.startswith("postgres://"):
        db_url = db_url.replace("postgres://", "postgresql://", 1)

    return db_url


def create_db_engine(database_url: Optional[str] = None) -> Engine:
    """Create an engine tuned for the configured backend."""
    db_url = get_database_url(database_url)

    if db_url.startswith("sqlite"):
        # Pipelines deliver from worker threads
        return create_engine(db_url, connect_args={"check_same_thread": False})

    return create_engine(
        db_url,
        pool_size=20,
        max_overflow=10,
        pool_timeout=30,
        pool_pre_ping=True,
        pool_recycle=3600,
        connect_args={
            "connect_timeout": 30,
            "application_name": "stream_monitor",
        },
    )


engine = create_db_engine()

# Create session factory
SessionLocal = sessionmaker(autoflush=False, bind=engine)


def init_db(bind: Optional[Engine] = None) -> None:
    """Initialize database tables if they don't exist"""
    bind = bind or engine
    try:
        logger.info("Creating tables if they don't exist...")
        Base.metadata.create_all(bind=bind)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Error initializing database: {str(e)}")
        raise
