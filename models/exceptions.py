class RaceStoreError(Exception):
    """Base class for race storage and lookup failures."""


class RaceNotFound(RaceStoreError):
    def __init__(self, race_id: str):
        super().__init__(f"Race {race_id} not found")
        self.race_id = race_id


class StoreUnavailable(RaceStoreError):
    """The persistent store failed while serving a race operation."""

    def __init__(self, race_id: str, action: str):
        super().__init__(f"Store failure while trying to {action} race {race_id}")
        self.race_id = race_id
        self.action = action
