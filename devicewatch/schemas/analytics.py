"""
Analytics Pydantic schemas
"""

from pydantic import BaseModel, Field


class AnalyticsResponse(BaseModel):
    """Efficiency and health over the trailing window"""
    efficiency: int = Field(..., ge=0, le=100)
    health_score: int = Field(..., ge=0, le=100)
    total_readings: int = Field(..., ge=0)
    warnings: int = Field(..., ge=0)
    dangers: int = Field(..., ge=0)
