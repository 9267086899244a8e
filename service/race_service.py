from abc import ABC, abstractmethod
from contextlib import contextmanager
from models.exceptions import RaceNotFound, StoreUnavailable
from models.race import Race
from repositories.race_repository import RaceRepository
from sqlalchemy.exc import SQLAlchemyError
from typing import Tuple
import logging

logger = logging.getLogger(__name__)


class RaceService(ABC):
    def __init__(self, repository: RaceRepository):
        self.repository = repository

    @abstractmethod
    def get_or_placeholder(self, race_id: str) -> Race:
        pass

    @abstractmethod
    def create_race(self, race_id: str) -> Tuple[Race, bool]:
        pass

    @abstractmethod
    def record_checkpoint(self, race_id: str, checkpoint: str) -> Race:
        pass

    @abstractmethod
    def delete_race(self, race_id: str) -> None:
        pass


@contextmanager
def _store_errors(action: str, race_id: str):
    """Classify storage failures raised by the repository as StoreUnavailable."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Failed %s race %s: %s", action, race_id, e)
        raise StoreUnavailable(race_id, action) from e


class RaceServiceImpl(RaceService):
    def get_or_placeholder(self, race_id: str) -> Race:
        """
        Get a race for reading.

        An id with nothing stored yields an empty placeholder race. The
        placeholder is never written, so reads leave storage untouched.
        """
        with _store_errors("find", race_id):
            race = self.repository.find(race_id)
        if race is None:
            return Race.placeholder(race_id)
        return race

    def create_race(self, race_id: str) -> Tuple[Race, bool]:
        """
        Find or create a race.

        Returns:
            Tuple of (stored race, whether it was created by this call)
        """
        with _store_errors("create", race_id):
            created = self.repository.create(race_id)
            race = self.repository.find(race_id)
        if race is None:
            # Deleted between the insert and the read back
            raise RaceNotFound(race_id)
        if created:
            logger.info("Created race %s", race_id)
        return race, created

    def record_checkpoint(self, race_id: str, checkpoint: str) -> Race:
        """
        Record a captured checkpoint on an existing race.

        Reporting a checkpoint the race already holds is a no-op, not an error.
        Concurrent reports for the same race are resolved by the store's
        upsert: the last write wins at the document level.

        Args:
            race_id: The race to update; it must already be stored
            checkpoint: The captured checkpoint identifier

        Returns:
            The race with its full, updated checkpoint set

        Raises:
            RaceNotFound: if no race is stored under race_id
            StoreUnavailable: on any storage failure
        """
        with _store_errors("find", race_id):
            race = self.repository.find(race_id)
        if race is None:
            raise RaceNotFound(race_id)

        updated = race.with_checkpoint(checkpoint)
        if updated is race:
            logger.debug("Checkpoint %s already captured on race %s", checkpoint, race_id)

        with _store_errors("update", race_id):
            self.repository.upsert(race_id, updated)
        return updated

    def delete_race(self, race_id: str) -> None:
        with _store_errors("delete", race_id):
            self.repository.delete(race_id)
        logger.info("Deleted race %s", race_id)
