"""
Device ingestion and query endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List
import structlog

from devicewatch.api.dependencies import get_settings, get_store
from devicewatch.core.config import Settings
from devicewatch.database.reading_store import ReadingStore
from devicewatch.schemas.analytics import AnalyticsResponse
from devicewatch.schemas.device import DeviceResponse, DeviceStatusResponse
from devicewatch.schemas.reading import IngestResponse, ReadingIn, ReadingResponse
from devicewatch.services.analytics import compute_analytics
from devicewatch.services.ingestion import ingest_reading
from devicewatch.utils.time import utc_now

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/device/data", response_model=IngestResponse)
def ingest_device_data(payload: ReadingIn, store: ReadingStore = Depends(get_store)):
    """Store one reading and refresh the device's latest state"""
    record = payload.resolve(utc_now())
    if payload.device_id is None:
        logger.warning("Reading without device_id, using default", device_id=record.device_id)

    ingest_reading(store, record)
    return IngestResponse(message="Data received successfully", device_id=record.device_id)


@router.get("/devices", response_model=List[DeviceResponse])
def list_devices(store: ReadingStore = Depends(get_store)):
    """Latest state of every known device"""
    return [DeviceResponse.model_validate(device) for device in store.list_devices()]


@router.get("/device/{device_id}/status", response_model=DeviceStatusResponse)
def get_device_status(device_id: str, store: ReadingStore = Depends(get_store)):
    """Device record plus its most recent reading"""
    device = store.get_device(device_id)
    if not device:
        raise HTTPException(status_code=404, detail="Device not found")

    latest = store.latest_reading(device_id)
    return DeviceStatusResponse(
        device=DeviceResponse.model_validate(device),
        latest_reading=ReadingResponse(**latest.to_dict()) if latest else None,
    )


@router.get("/device/{device_id}/history", response_model=List[ReadingResponse])
def get_device_history(
    device_id: str,
    limit: int = Query(20, ge=1, le=1000),
    store: ReadingStore = Depends(get_store),
):
    """Recent readings, newest first"""
    return [ReadingResponse(**reading.to_dict()) for reading in store.query_history(device_id, limit)]


@router.get("/device/{device_id}/analytics", response_model=AnalyticsResponse)
def get_device_analytics(
    device_id: str,
    store: ReadingStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """Efficiency and health score over the trailing window"""
    snapshot = compute_analytics(store, device_id, window_hours=settings.analytics_window_hours)
    return AnalyticsResponse(**snapshot.to_dict())
