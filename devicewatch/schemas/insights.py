"""
Insight Pydantic schemas

Generated JSON is validated against these models; unknown keys are ignored.
"""

from typing import Literal

from pydantic import BaseModel, Field


class RiskAssessment(BaseModel):
    risk_level: Literal["LOW", "MEDIUM", "HIGH", "UNKNOWN"]
    confidence: float = Field(..., ge=0.0, le=1.0)
    reason: str


class DeviceRiskResponse(RiskAssessment):
    device_id: str


class Explanation(BaseModel):
    explanation: str


class MaintenanceInsight(BaseModel):
    maintenance_required: bool
    suggested_action: str


class SystemSummary(BaseModel):
    overall_status: str
    devices_at_risk: int = Field(..., ge=0)
    summary: str


class VoiceAlert(BaseModel):
    text: str
    audio_url: str


class ChatRequest(BaseModel):
    deviceId: str = ""
    query: str = ""


class ChatResponse(BaseModel):
    answer: str
