from fastapi import Depends, Request
from database.db_config import get_db
from repositories.race_repository import RaceRepositoryDB
from service.race_service import RaceServiceImpl
from service.readiness import ReadinessFlag
from sqlalchemy.orm import Session


def get_race_service(db: Session = Depends(get_db)) -> RaceServiceImpl:
    """
    Get race service with database-backed repository.

    Args:
        db: SQLAlchemy database session (injected via FastAPI Depends)

    Returns:
        RaceServiceImpl instance
    """
    repository = RaceRepositoryDB(db)
    return RaceServiceImpl(repository)


def get_readiness(request: Request) -> ReadinessFlag:
    """Readiness flag shared by every request served by this application."""
    return request.app.state.readiness
