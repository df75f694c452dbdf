"""
AI insight endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.concurrency import run_in_threadpool
import structlog

from devicewatch.api.dependencies import get_insight_client, get_store
from devicewatch.database.reading_store import ReadingStore
from devicewatch.schemas.insights import (
    ChatRequest,
    ChatResponse,
    DeviceRiskResponse,
    Explanation,
    MaintenanceInsight,
    SystemSummary,
    VoiceAlert,
)
from devicewatch.services.insights import InsightClient

logger = structlog.get_logger(__name__)
router = APIRouter()

RISK_HISTORY = 15
EXPLANATION_HISTORY = 10
MAINTENANCE_HISTORY = 50
CHAT_HISTORY = 10


def _require_history(store: ReadingStore, device_id: str, limit: int):
    history = store.query_history(device_id, limit)
    if not history:
        logger.info("Insight requested for device without readings", device_id=device_id)
        raise HTTPException(status_code=404, detail="No data available for this device")
    return history


@router.get("/device/{device_id}/risk", response_model=DeviceRiskResponse)
async def get_risk(
    device_id: str,
    lang: str = Query("en"),
    store: ReadingStore = Depends(get_store),
    client: InsightClient = Depends(get_insight_client),
):
    """Risk level predicted from the latest readings"""
    history = await run_in_threadpool(_require_history, store, device_id, RISK_HISTORY)
    risk = await client.risk_assessment(history, lang)
    return DeviceRiskResponse(device_id=device_id, **risk.model_dump())


@router.get("/device/{device_id}/explanation", response_model=Explanation)
async def get_explanation(
    device_id: str,
    lang: str = Query("en"),
    store: ReadingStore = Depends(get_store),
    client: InsightClient = Depends(get_insight_client),
):
    history = await run_in_threadpool(_require_history, store, device_id, EXPLANATION_HISTORY)
    return await client.explanation(device_id, history, lang)


@router.get("/device/{device_id}/voice", response_model=VoiceAlert)
async def get_voice_alert(
    device_id: str,
    lang: str = Query("en"),
    store: ReadingStore = Depends(get_store),
    client: InsightClient = Depends(get_insight_client),
):
    """Spoken version of the explanation"""
    history = await run_in_threadpool(_require_history, store, device_id, EXPLANATION_HISTORY)
    return await client.voice_alert(device_id, history, lang)


@router.get("/device/{device_id}/maintenance", response_model=MaintenanceInsight)
async def get_maintenance(
    device_id: str,
    lang: str = Query("en"),
    store: ReadingStore = Depends(get_store),
    client: InsightClient = Depends(get_insight_client),
):
    history = await run_in_threadpool(_require_history, store, device_id, MAINTENANCE_HISTORY)
    return await client.maintenance_insight(device_id, history, lang)


@router.get("/summary", response_model=SystemSummary)
async def get_system_summary(
    lang: str = Query("en"),
    store: ReadingStore = Depends(get_store),
    client: InsightClient = Depends(get_insight_client),
):
    """System-wide overview across all devices"""
    devices = await run_in_threadpool(store.list_devices)
    return await client.system_summary(devices, lang)


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    store: ReadingStore = Depends(get_store),
    client: InsightClient = Depends(get_insight_client),
):
    """Answer a free-text question about one device"""
    if not request.deviceId or not request.query:
        logger.warning("Chat request missing fields", has_device_id=bool(request.deviceId), has_query=bool(request.query))
        raise HTTPException(status_code=400, detail="Missing deviceId or query")

    history = await run_in_threadpool(store.query_history, request.deviceId, CHAT_HISTORY)
    answer = await client.chat_response(request.deviceId, history, request.query)
    return ChatResponse(answer=answer)
