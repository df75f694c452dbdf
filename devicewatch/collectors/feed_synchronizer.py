"""
Feed synchronizer for DeviceWatch
Polls the latest ThingSpeak feed entry and merges it into the reading store
"""

import asyncio
from typing import Any, Dict, Optional

import aiohttp
import structlog

from devicewatch.core.errors import StorageUnavailable
from devicewatch.database.reading_store import ReadingStore
from devicewatch.schemas.reading import ReadingRecord
from devicewatch.services.ingestion import ingest_reading
from devicewatch.utils.time import parse_iso, to_iso_utc

logger = structlog.get_logger(__name__)

GAS_THRESHOLD = 200


def state_from_alert(alert: int) -> str:
    """Alert code 0 is SAFE, 1 is WARNING, anything higher is DANGER"""
    if alert > 1:
        return "DANGER"
    if alert == 1:
        return "WARNING"
    return "SAFE"


def parse_feed_entry(entry: Dict[str, Any], device_id: str) -> Optional[ReadingRecord]:
    """Map a feed entry onto a reading, or None when it is malformed.

    field1 gas level, field2 temperature, field3 vibration, field4 voltage,
    field5 motion, field6 alert code. Missing fields read as "0".
    """
    try:
        gas_level = float(entry.get("field1") or "0")
        temperature = float(entry.get("field2") or "0")
        vibration = int(float(entry.get("field3") or "0"))
        voltage = float(entry.get("field4") or "0")
        motion = int(float(entry.get("field5") or "0"))
        alert = int(float(entry.get("field6") or "0"))
        timestamp = to_iso_utc(parse_iso(entry["created_at"]))
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.warning("Malformed feed entry", error=str(e), entry=entry)
        return None

    return ReadingRecord(
        device_id=device_id,
        temperature=temperature,
        voltage=voltage,
        motion_detected=motion != 0,
        vibration_detected=vibration != 0,
        gas_detected=gas_level > GAS_THRESHOLD,
        state=state_from_alert(alert),
        timestamp=timestamp,
    )


class FeedSynchronizer:
    """Pulls the latest external feed sample on a fixed interval"""

    def __init__(
        self,
        store: ReadingStore,
        feed_url: str,
        device_id: str = "IND-MACHINE-01",
        interval: float = 10,
        timeout: float = 15,
    ):
        self.store = store
        self.feed_url = feed_url
        self.device_id = device_id
        self.interval = interval
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.session: Optional[aiohttp.ClientSession] = None
        self.running = False
        self._task: Optional[asyncio.Task] = None

    async def start(self):
        """Start the background sync loop"""
        if self._task is not None:
            return
        self.running = True
        self.session = aiohttp.ClientSession(timeout=self.timeout)
        self._task = asyncio.create_task(self._sync_loop())
        logger.info("Feed synchronizer started", device_id=self.device_id, interval=self.interval)

    async def stop(self):
        """Stop the loop and release the HTTP session"""
        self.running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if self.session is not None:
            await self.session.close()
            self.session = None
        logger.info("Feed synchronizer stopped")

    async def _sync_loop(self):
        """Sync once immediately, then every interval"""
        while self.running:
            await self.sync_once()
            await asyncio.sleep(self.interval)

    async def sync_once(self) -> bool:
        """One poll; returns True when a new reading was stored.

        Errors are logged and swallowed so the next tick runs regardless.
        """
        try:
            entry = await self._fetch_latest()
            if entry is None:
                logger.debug("Feed returned no entries")
                return False

            record = parse_feed_entry(entry, self.device_id)
            if record is None:
                return False

            existing = await asyncio.to_thread(self.store.find_reading, record.device_id, record.timestamp)
            if existing is not None:
                logger.debug("Feed entry already stored", device_id=record.device_id, timestamp=record.timestamp)
                return False

            await asyncio.to_thread(ingest_reading, self.store, record)
            logger.info("Synced feed entry", device_id=record.device_id, timestamp=record.timestamp)
            return True
        except StorageUnavailable as e:
            logger.error("Feed sync storage error", error=str(e))
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error("Feed sync fetch error", error=str(e))
        except Exception as e:
            logger.error("Feed sync error", error=str(e), exc_info=True)
        return False

    async def _fetch_latest(self) -> Optional[Dict[str, Any]]:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(timeout=self.timeout)

        async with self.session.get(self.feed_url) as response:
            response.raise_for_status()
            data = await response.json(content_type=None)

        feeds = data.get("feeds") if isinstance(data, dict) else None
        if not feeds:
            return None
        return feeds[-1]
