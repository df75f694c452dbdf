"""
Reading store: append-only reading log plus the per-device latest state
"""

from typing import List, Optional

from sqlalchemy import delete, desc, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
import structlog

from devicewatch.core.errors import StorageUnavailable
from devicewatch.database.connection import Database
from devicewatch.models.device import Device
from devicewatch.models.reading import Reading
from devicewatch.schemas.reading import ReadingRecord

logger = structlog.get_logger(__name__)

_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class ReadingStore:
    """Storage operations used by ingestion, analytics and insights.

    Every method raises StorageUnavailable when the database fails, so
    callers only deal with one transient error type.
    """

    def __init__(self, database: Database):
        self.database = database
        try:
            self._insert = _UPSERT_DIALECTS[database.dialect]
        except KeyError:
            raise ValueError(f"Unsupported database dialect for upserts: {database.dialect}")

    def upsert_device(self, device_id: str, timestamp: str, state: str):
        """Insert the device or overwrite its last_seen and current_state"""
        stmt = self._insert(Device).values(id=device_id, last_seen=timestamp, current_state=state)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Device.id],
            set_={"last_seen": stmt.excluded.last_seen, "current_state": stmt.excluded.current_state},
        )
        try:
            with self.database.session() as db:
                db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Device upsert failed", device_id=device_id, error=str(e))
            raise StorageUnavailable("Device upsert failed") from e

    def append_reading(self, record: ReadingRecord) -> int:
        """Insert a new reading row; no deduplication happens here"""
        reading = Reading(
            device_id=record.device_id,
            temperature=record.temperature,
            voltage=record.voltage,
            motion_detected=record.motion_detected,
            vibration_detected=record.vibration_detected,
            gas_detected=record.gas_detected,
            state=record.state,
            timestamp=record.timestamp,
        )
        try:
            with self.database.session() as db:
                db.add(reading)
                db.flush()
                return reading.id
        except SQLAlchemyError as e:
            logger.error("Reading insert failed", device_id=record.device_id, error=str(e))
            raise StorageUnavailable("Reading insert failed") from e

    def query_history(self, device_id: str, limit: int = 20) -> List[Reading]:
        """Most recent readings for a device, newest first"""
        query = (
            select(Reading)
            .where(Reading.device_id == device_id)
            .order_by(desc(Reading.timestamp), desc(Reading.id))
            .limit(limit)
        )
        return self._all(query, device_id)

    def query_window(self, device_id: str, since: str) -> List[Reading]:
        """All readings for a device strictly after ``since``"""
        query = select(Reading).where(Reading.device_id == device_id, Reading.timestamp > since)
        return self._all(query, device_id)

    def find_reading(self, device_id: str, timestamp: str) -> Optional[Reading]:
        query = select(Reading).where(Reading.device_id == device_id, Reading.timestamp == timestamp).limit(1)
        rows = self._all(query, device_id)
        return rows[0] if rows else None

    def latest_reading(self, device_id: str) -> Optional[Reading]:
        rows = self.query_history(device_id, limit=1)
        return rows[0] if rows else None

    def get_device(self, device_id: str) -> Optional[Device]:
        try:
            with self.database.session() as db:
                return db.get(Device, device_id)
        except SQLAlchemyError as e:
            logger.error("Device lookup failed", device_id=device_id, error=str(e))
            raise StorageUnavailable("Device lookup failed") from e

    def list_devices(self) -> List[Device]:
        try:
            with self.database.session() as db:
                return list(db.scalars(select(Device).order_by(Device.id)))
        except SQLAlchemyError as e:
            logger.error("Device listing failed", error=str(e))
            raise StorageUnavailable("Device listing failed") from e

    def purge_readings(self, before: str, device_id: Optional[str] = None) -> int:
        """Administrative purge of readings captured before ``before``"""
        stmt = delete(Reading).where(Reading.timestamp < before)
        if device_id is not None:
            stmt = stmt.where(Reading.device_id == device_id)
        try:
            with self.database.session() as db:
                deleted = db.execute(stmt).rowcount
        except SQLAlchemyError as e:
            logger.error("Reading purge failed", error=str(e))
            raise StorageUnavailable("Reading purge failed") from e

        logger.info("Readings purged", before=before, device_id=device_id, deleted=deleted)
        return deleted

    def _all(self, query, device_id: str) -> List[Reading]:
        try:
            with self.database.session() as db:
                return list(db.scalars(query))
        except SQLAlchemyError as e:
            logger.error("Reading query failed", device_id=device_id, error=str(e))
            raise StorageUnavailable("Reading query failed") from e
