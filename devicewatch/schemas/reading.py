"""
Reading Pydantic schemas
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from devicewatch.utils.time import parse_iso, to_iso_utc

UNKNOWN_DEVICE_ID = "UNKNOWN-DEVICE"


@dataclass(frozen=True)
class ReadingRecord:
    """Fully-populated reading, ready for the store"""
    device_id: str
    temperature: float
    voltage: float
    motion_detected: bool
    vibration_detected: bool
    gas_detected: bool
    state: str
    timestamp: str  # canonical ISO-8601 UTC

    def to_dict(self):
        return {
            "device_id": self.device_id,
            "temperature": self.temperature,
            "voltage": self.voltage,
            "motionDetected": self.motion_detected,
            "vibrationDetected": self.vibration_detected,
            "gasDetected": self.gas_detected,
            "state": self.state,
            "timestamp": self.timestamp,
        }


class ReadingIn(BaseModel):
    """Schema for an inbound device reading"""
    device_id: Optional[str] = Field(None, min_length=1, description="Device identifier; defaults to UNKNOWN-DEVICE")
    temperature: float = Field(..., description="Temperature in Celsius")
    voltage: float = Field(..., description="Supply voltage")
    motionDetected: bool
    vibrationDetected: bool
    gasDetected: bool
    state: str = Field(..., description="Lifecycle state, e.g. SAFE, ACTIVE, WARNING, DANGER")
    timestamp: Optional[str] = Field(None, description="ISO-8601 capture time; defaults to server time")

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, v):
        # Full date-time only; bare dates are rejected
        if v is None:
            return v
        if "T" not in v.upper():
            raise ValueError("timestamp must be an ISO-8601 date-time")
        try:
            parse_iso(v)
        except ValueError as e:
            raise ValueError(f"Invalid timestamp format: {e}")
        return v

    def resolve(self, now: datetime) -> ReadingRecord:
        """Fill in defaulted fields"""
        return ReadingRecord(
            device_id=self.device_id if self.device_id is not None else UNKNOWN_DEVICE_ID,
            temperature=self.temperature,
            voltage=self.voltage,
            motion_detected=self.motionDetected,
            vibration_detected=self.vibrationDetected,
            gas_detected=self.gasDetected,
            state=self.state,
            timestamp=to_iso_utc(parse_iso(self.timestamp) if self.timestamp is not None else now),
        )


class ReadingResponse(BaseModel):
    """Schema for a stored reading"""
    id: int
    device_id: str
    temperature: float
    voltage: float
    motionDetected: bool
    vibrationDetected: bool
    gasDetected: bool
    state: str
    timestamp: str


class IngestResponse(BaseModel):
    message: str
    device_id: str
