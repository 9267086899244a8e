from abc import ABC, abstractmethod
from models.database import RaceRecord
from models.exceptions import RaceNotFound
from models.race import Race
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from datetime import datetime, timezone
from typing import Optional

# Dialects whose INSERT supports ON CONFLICT on the unique race id index
_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def ensure_upsert_supported(dialect: str) -> None:
    """Raise NotImplementedError unless races can be upserted atomically on ``dialect``."""
    if dialect not in _INSERT_BY_DIALECT:
        raise NotImplementedError(f"Atomic upsert is not supported on {dialect}")


class RaceRepository(ABC):
    @abstractmethod
    def find(self, race_id: str) -> Optional[Race]:
        """Get a race by ID, or None when nothing is stored for it."""
        pass

    @abstractmethod
    def upsert(self, race_id: str, race: Race) -> None:
        """Insert the race, or replace the stored one with the same ID."""
        pass

    @abstractmethod
    def create(self, race_id: str) -> bool:
        """Store an empty race unless one exists. Returns True if a race was inserted."""
        pass

    @abstractmethod
    def delete(self, race_id: str) -> None:
        """Remove a race. Raises RaceNotFound if nothing was stored for it."""
        pass


class RaceRepositoryDB(RaceRepository):
    """SQLAlchemy-based race repository for PostgreSQL and SQLite."""

    def __init__(self, db: Session):
        self.db = db

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        ensure_upsert_supported(dialect)
        return _INSERT_BY_DIALECT[dialect](RaceRecord)

    def _execute(self, statement):
        try:
            result = self.db.execute(statement)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return result

    def find(self, race_id: str) -> Optional[Race]:
        record = self.db.query(RaceRecord).filter(RaceRecord.race_id == race_id).first()
        if record is None:
            return None
        return Race(id=record.race_id, checkpoints=list(record.checkpoints or []))

    def upsert(self, race_id: str, race: Race) -> None:
        now = datetime.now(timezone.utc)
        statement = self._insert().values(
            race_id=race_id,
            checkpoints=list(race.checkpoints),
            created_at=now,
            updated_at=now,
        )
        statement = statement.on_conflict_do_update(
            index_elements=["race_id"],
            set_={
                "checkpoints": statement.excluded.checkpoints,
                "updated_at": statement.excluded.updated_at,
            },
        )
        self._execute(statement)

    def create(self, race_id: str) -> bool:
        now = datetime.now(timezone.utc)
        statement = self._insert().values(
            race_id=race_id,
            checkpoints=[],
            created_at=now,
            updated_at=now,
        ).on_conflict_do_nothing(index_elements=["race_id"])
        result = self._execute(statement)
        return result.rowcount == 1

    def delete(self, race_id: str) -> None:
        try:
            deleted = self.db.query(RaceRecord).filter(RaceRecord.race_id == race_id).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        if deleted == 0:
            raise RaceNotFound(race_id)

