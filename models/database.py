from sqlalchemy import Column, String, DateTime, Integer, JSON
from sqlalchemy.orm import declarative_base
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


Base = declarative_base()

class RaceRecord(Base):
    """One stored document per race, keyed uniquely on ``race_id``."""

    __tablename__ = "races"

    id = Column(Integer, primary_key=True, autoincrement=True)
    race_id = Column(String, nullable=False, unique=True, index=True)
    checkpoints = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    def __repr__(self):
        return f"<RaceRecord(race_id={self.race_id}, checkpoints={self.checkpoints})>"
