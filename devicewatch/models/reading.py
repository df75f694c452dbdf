"""
Reading model for raw sensor samples
"""

from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, Index
from devicewatch.database.connection import Base


class Reading(Base):
    """One immutable sensor sample for a device"""

    __tablename__ = "readings"
    __table_args__ = (
        Index("ix_readings_device_timestamp", "device_id", "timestamp"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    device_id = Column(String(255), ForeignKey("devices.id"), nullable=False)
    temperature = Column(Float, nullable=False)  # Celsius
    voltage = Column(Float, nullable=False)  # Volts
    motion_detected = Column(Boolean, nullable=False, default=False)
    vibration_detected = Column(Boolean, nullable=False, default=False)
    gas_detected = Column(Boolean, nullable=False, default=False)
    state = Column(String(50), nullable=False)
    timestamp = Column(String(32), nullable=False)  # ISO-8601 UTC

    def to_dict(self):
        return {
            "id": self.id,
            "device_id": self.device_id,
            "temperature": self.temperature,
            "voltage": self.voltage,
            "motionDetected": self.motion_detected,
            "vibrationDetected": self.vibration_detected,
            "gasDetected": self.gas_detected,
            "state": self.state,
            "timestamp": self.timestamp,
        }

    def __repr__(self):
        return f"<Reading(device_id={self.device_id}, state={self.state}, timestamp={self.timestamp})>"
