"""
Write path shared by the HTTP ingestion route and the feed synchronizer
"""

import structlog

from devicewatch.database.reading_store import ReadingStore
from devicewatch.schemas.reading import ReadingRecord

logger = structlog.get_logger(__name__)


def ingest_reading(store: ReadingStore, record: ReadingRecord) -> int:
    """Upsert the device's latest state, then append the reading.

    The two writes are not wrapped in one transaction; a failure between
    them leaves the reading missing, never the device.
    """
    store.upsert_device(record.device_id, record.timestamp, record.state)
    reading_id = store.append_reading(record)
    logger.info("Reading stored", device_id=record.device_id, state=record.state, timestamp=record.timestamp)
    return reading_id
