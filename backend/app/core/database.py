from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlmodel import Session
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
import logging
from fastapi import HTTPException

from .config import settings

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None


@retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((Exception,)),
    reraise=True
)
def create_database_engine(database_url: Optional[str] = None) -> Engine:
    """Create database engine with retry logic."""
    url = database_url or settings.DATABASE_URL
    logger.info(f"Attempting to connect to database: {url.split('@')[1] if '@' in url else 'hidden'}")

    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            echo=settings.DEBUG,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_engine(
            url,
            echo=settings.DEBUG,
            pool_pre_ping=True,
            pool_recycle=300,  # Recycle connections every 5 minutes
            pool_size=10,
            max_overflow=20,
        )

    # Test the connection
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
        logger.info("Database connection successful!")

    return engine


def get_engine() -> Engine:
    """Return the process-wide engine, connecting on first use."""
    global _engine
    if _engine is None:
        try:
            _engine = create_database_engine()
        except Exception as e:
            logger.error(f"Failed to create database engine after retries: {e}")
            raise HTTPException(
                status_code=503,
                detail="Database is temporarily unavailable. Please try again later."
            )
    return _engine


def get_db():
    """Get database session."""
    with Session(get_engine()) as session:
        try:
            yield session
        finally:
            session.close()
