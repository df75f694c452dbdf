"""
Device model holding the latest known state of each unit
"""

from sqlalchemy import Column, String
from devicewatch.database.connection import Base


class Device(Base):
    """Latest-state record, created on first ingestion for an id"""

    __tablename__ = "devices"

    id = Column(String(255), primary_key=True)
    last_seen = Column(String(32), index=True)  # ISO-8601 UTC
    current_state = Column(String(50))  # SAFE, ACTIVE, WARNING, DANGER, ...

    def to_dict(self):
        return {
            "id": self.id,
            "last_seen": self.last_seen,
            "current_state": self.current_state,
        }

    def __repr__(self):
        return f"<Device(id={self.id}, state={self.current_state}, last_seen={self.last_seen})>"
