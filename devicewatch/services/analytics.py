"""
Device analytics: efficiency and health over a trailing window of readings
"""

from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

import structlog

from devicewatch.database.reading_store import ReadingStore
from devicewatch.utils.time import to_iso_utc, utc_now

logger = structlog.get_logger(__name__)

WARNING_PENALTY = 2
DANGER_PENALTY = 5


@dataclass(frozen=True)
class AnalyticsSnapshot:
    efficiency: int
    health_score: int
    total_readings: int
    warnings: int
    dangers: int

    def to_dict(self):
        return asdict(self)


def health_score(warnings: int, dangers: int) -> int:
    """Start at 100 and deduct per warning and danger, never below 0"""
    return max(0, 100 - WARNING_PENALTY * warnings - DANGER_PENALTY * dangers)


def efficiency(active: int, total: int) -> int:
    """Share of active readings as a whole percentage"""
    # Python's round() is half-to-even; the +0.5 floor keeps .5 rounding up
    return int(100 * active / max(total, 1) + 0.5)


def summarize_readings(readings: Iterable) -> AnalyticsSnapshot:
    """Aggregate a window of readings into a snapshot.

    A reading counts as active when vibration was detected.
    """
    total = active = warnings = dangers = 0
    for reading in readings:
        total += 1
        if reading.vibration_detected:
            active += 1
        if reading.state == "WARNING":
            warnings += 1
        elif reading.state == "DANGER":
            dangers += 1

    return AnalyticsSnapshot(
        efficiency=efficiency(active, total),
        health_score=health_score(warnings, dangers),
        total_readings=total,
        warnings=warnings,
        dangers=dangers,
    )


def compute_analytics(
    store: ReadingStore,
    device_id: str,
    window_hours: int = 24,
    now: Optional[datetime] = None,
) -> AnalyticsSnapshot:
    """Snapshot of the device over the trailing ``window_hours``"""
    since = to_iso_utc((now or utc_now()) - timedelta(hours=window_hours))
    snapshot = summarize_readings(store.query_window(device_id, since))
    logger.debug("Analytics computed", device_id=device_id, since=since, **snapshot.to_dict())
    return snapshot
