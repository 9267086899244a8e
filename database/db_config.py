from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from models.database import Base
from repositories.race_repository import ensure_upsert_supported
from fastapi import Request
from functools import lru_cache
from typing import Generator
import logging

logger = logging.getLogger(__name__)


@lru_cache()
def get_engine(database_url: str, echo: bool = False) -> Engine:
    """Create the process-wide engine for ``database_url`` (cached per URL)."""
    options = {"echo": echo, "pool_pre_ping": True}  # Verify connections before using them
    if not database_url.startswith("sqlite"):
        options.update(pool_size=5, max_overflow=10)
    return create_engine(database_url, **options)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine):
    """
    Create the races table and its unique index on the race id.

    Safe to run on every startup: existing tables and indexes are left alone.
    An engine without atomic upsert support and connection failures both
    propagate to the caller, which treats them as fatal.
    """
    ensure_upsert_supported(engine.dialect.name)
    Base.metadata.create_all(bind=engine)
    logger.info("Ensured races table and unique race id index")


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency function to get database session.
    Used in FastAPI endpoints with Depends(get_db); the session is closed on every exit path.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
