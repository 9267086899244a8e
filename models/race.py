"""
Pydantic models for races and captured checkpoint reports.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List


class Race(BaseModel):
    """A race and the checkpoints captured on it, in first-seen order."""

    id: str = Field(..., description="Externally assigned race identifier")
    checkpoints: List[str] = Field(
        default_factory=list,
        alias="capturedcheckpoints",
        description="Captured checkpoint identifiers, without duplicates",
    )

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def placeholder(cls, race_id: str) -> "Race":
        """Empty race standing in for an id that has nothing stored."""
        return cls(id=race_id, checkpoints=[])

    def has_checkpoint(self, checkpoint: str) -> bool:
        return checkpoint in self.checkpoints

    def with_checkpoint(self, checkpoint: str) -> "Race":
        """
        Return this race with ``checkpoint`` added to its set.

        The checkpoint is appended only when missing, so reporting the same
        checkpoint again leaves the race unchanged.
        """
        if self.has_checkpoint(checkpoint):
            return self
        return self.model_copy(update={"checkpoints": [*self.checkpoints, checkpoint]})


class CapturedCheckpoint(BaseModel):
    """Body of a checkpoint report."""

    capturedcheckpoint: str = Field(..., min_length=1, description="Identifier of the captured checkpoint")
