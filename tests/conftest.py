from __future__ import annotations

import threading
from typing import Dict, Iterator, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from config.settings import Settings
from database.db_config import create_session_factory, init_db
from main import create_app
from models.exceptions import RaceNotFound
from models.race import Race
from repositories.race_repository import RaceRepository, RaceRepositoryDB
from service.race_service import RaceServiceImpl


class RaceRepositoryMemory(RaceRepository):
    """Process-local repository keeping races in a dict."""

    def __init__(self):
        self._races: Dict[str, List[str]] = {}
        self._lock = threading.Lock()

    def find(self, race_id: str) -> Optional[Race]:
        with self._lock:
            checkpoints = self._races.get(race_id)
        if checkpoints is None:
            return None
        return Race(id=race_id, checkpoints=list(checkpoints))

    def upsert(self, race_id: str, race: Race) -> None:
        with self._lock:
            self._races[race_id] = list(race.checkpoints)

    def create(self, race_id: str) -> bool:
        with self._lock:
            if race_id in self._races:
                return False
            self._races[race_id] = []
            return True

    def delete(self, race_id: str) -> None:
        with self._lock:
            if self._races.pop(race_id, None) is None:
                raise RaceNotFound(race_id)


@pytest.fixture
def engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine: Engine) -> Iterator[Session]:
    session = create_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def repository(db: Session) -> RaceRepositoryDB:
    return RaceRepositoryDB(db)


@pytest.fixture
def memory_repository() -> RaceRepositoryMemory:
    return RaceRepositoryMemory()


@pytest.fixture
def service(memory_repository: RaceRepositoryMemory) -> RaceServiceImpl:
    return RaceServiceImpl(memory_repository)


@pytest.fixture
def app(engine: Engine):
    return create_app(settings=Settings(database_url="sqlite://"), engine=engine)


@pytest.fixture
def client(app) -> Iterator[TestClient]:
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


class UnreachableRepository(RaceRepository):
    """Repository whose every call fails like a dropped database connection."""

    def _fail(self):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    def find(self, race_id: str) -> Optional[Race]:
        self._fail()

    def upsert(self, race_id: str, race: Race) -> None:
        self._fail()

    def create(self, race_id: str) -> bool:
        self._fail()

    def delete(self, race_id: str) -> None:
        self._fail()


@pytest.fixture
def unreachable_repository() -> UnreachableRepository:
    return UnreachableRepository()
