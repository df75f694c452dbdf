"""
Device Pydantic schemas
"""

from pydantic import BaseModel, Field
from typing import Optional

from devicewatch.schemas.reading import ReadingResponse


class DeviceResponse(BaseModel):
    """Schema for device response"""
    id: str = Field(..., description="Unique device identifier")
    last_seen: Optional[str] = Field(None, description="Timestamp of the latest reading")
    current_state: Optional[str] = Field(None, description="State reported by the latest reading")

    class Config:
        from_attributes = True


class DeviceStatusResponse(BaseModel):
    """Schema for the device status endpoint"""
    device: DeviceResponse
    latest_reading: Optional[ReadingResponse] = None
