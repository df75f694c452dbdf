#!/usr/bin/env python3
"""
Initialize the database with sample data
"""

import sys
import os
from datetime import timedelta
import random

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from devicewatch.core.config import settings
from devicewatch.database.connection import Database
from devicewatch.database.reading_store import ReadingStore
from devicewatch.schemas.reading import ReadingRecord
from devicewatch.services.ingestion import ingest_reading
from devicewatch.utils.time import to_iso_utc, utc_now

DEVICE_COUNT = 15
READINGS_PER_DEVICE = 50
READING_INTERVAL = timedelta(minutes=15)

# Machines that report a persistent fault: gas leak, overheating, voltage spike
FAULTY_DEVICES = {
    "IND-MACHINE-06": "overheating",
    "IND-MACHINE-07": "voltage_spike",
    "IND-MACHINE-09": "gas_leak",
    "IND-MACHINE-12": "overheating",
}


def generate_reading(device_id: str, age: int, now) -> ReadingRecord:
    """One plausible reading taken ``age`` intervals ago"""
    voltage = 220 + random.uniform(-5, 5)
    temperature = 45 + random.uniform(-5, 5)
    gas_level = random.uniform(0, 50)
    vibration = random.random() > 0.8
    motion = random.random() > 0.5
    state = "SAFE"

    fault = FAULTY_DEVICES.get(device_id)
    if fault == "gas_leak":
        gas_level = 200 + random.uniform(1, 100)
        state = "DANGER"
    elif fault == "overheating":
        temperature = 85 + random.uniform(0, 15)
        state = "WARNING"
    elif fault == "voltage_spike":
        voltage = 250 + random.uniform(0, 20)
        state = "WARNING"

    return ReadingRecord(
        device_id=device_id,
        temperature=round(temperature, 2),
        voltage=round(voltage, 2),
        motion_detected=motion,
        vibration_detected=vibration,
        gas_detected=gas_level > 200,
        state=state,
        timestamp=to_iso_utc(now - age * READING_INTERVAL),
    )


def create_sample_data(device_count: int = DEVICE_COUNT, readings_per_device: int = READINGS_PER_DEVICE):
    """Create sample devices and readings for testing"""

    database = Database(settings.database_url, echo=settings.sql_echo)
    database.create_all()
    store = ReadingStore(database)
    now = utc_now()

    try:
        for i in range(1, device_count + 1):
            device_id = f"IND-MACHINE-{i:02d}"
            existing = store.latest_reading(device_id)
            if existing:
                print(f"⏭️  {device_id} already has readings, skipping")
                continue

            # Oldest first so the device ends up with its most recent state
            for age in reversed(range(readings_per_device)):
                ingest_reading(store, generate_reading(device_id, age, now))
            print(f"✅ Seeded {device_id}")

        print("\n🎉 Database initialization complete!")
        print("You can now start the API with: uvicorn devicewatch.main:app")

    except Exception as e:
        print(f"❌ Error initializing database: {e}")
        raise
    finally:
        database.close()


if __name__ == "__main__":
    create_sample_data()
