import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from pydantic import ValidationError

from devicewatch.schemas.reading import ReadingIn, UNKNOWN_DEVICE_ID
from devicewatch.services.ingestion import ingest_reading
from devicewatch.utils.time import parse_iso, to_iso_utc
from factories import NOW, make_record, memory_store

PAYLOAD = {
    "temperature": 44.1,
    "voltage": 220.4,
    "motionDetected": True,
    "vibrationDetected": False,
    "gasDetected": False,
    "state": "ACTIVE",
}


class TestReadingIn(unittest.TestCase):

    def test_defaults_resolved(self):
        record = ReadingIn(**PAYLOAD).resolve(NOW)

        self.assertEqual(record.device_id, UNKNOWN_DEVICE_ID)
        self.assertEqual(record.timestamp, "2024-06-01T12:00:00.000Z")
        self.assertTrue(record.motion_detected)
        self.assertEqual(record.state, "ACTIVE")

    def test_explicit_values_kept(self):
        record = ReadingIn(device_id="IND-MACHINE-03", timestamp="2024-05-31T23:30:00+02:00", **PAYLOAD).resolve(NOW)

        self.assertEqual(record.device_id, "IND-MACHINE-03")
        self.assertEqual(record.timestamp, "2024-05-31T21:30:00.000Z")

    def test_timestamp_must_be_iso_datetime(self):
        for bad in (1717243200, "2024-06-01", "yesterday", "2024-06-01T25:00:00Z"):
            with self.assertRaises(ValidationError):
                ReadingIn(timestamp=bad, **PAYLOAD)

        record = ReadingIn(timestamp="2024-06-01T12:00:00.250Z", **PAYLOAD).resolve(NOW)
        self.assertEqual(record.timestamp, "2024-06-01T12:00:00.250Z")

    def test_open_state_values(self):
        record = ReadingIn(**dict(PAYLOAD, state="CALIBRATING")).resolve(NOW)
        self.assertEqual(record.state, "CALIBRATING")


class TestIngestReading(unittest.TestCase):

    def test_device_created_with_first_reading(self):
        database, store = memory_store()
        try:
            self.assertIsNone(store.get_device("DEV-1"))
            ingest_reading(store, make_record(state="WARNING"))

            self.assertEqual(store.get_device("DEV-1").current_state, "WARNING")
            self.assertEqual(len(store.query_history("DEV-1")), 1)
        finally:
            database.close()

    def test_upsert_happens_before_append(self):
        store = MagicMock()
        record = make_record()

        ingest_reading(store, record)

        self.assertEqual(
            [call[0] for call in store.method_calls],
            ["upsert_device", "append_reading"],
        )
        store.upsert_device.assert_called_once_with(record.device_id, record.timestamp, record.state)


class TestTimestamps(unittest.TestCase):

    def test_canonical_format(self):
        value = datetime(2024, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc)
        self.assertEqual(to_iso_utc(value), "2024-01-02T03:04:05.678Z")

    def test_naive_is_utc(self):
        self.assertEqual(to_iso_utc(datetime(2024, 1, 2, 3, 4, 5)), "2024-01-02T03:04:05.000Z")

    def test_offset_converted(self):
        value = datetime(2024, 1, 2, 3, 0, 0, tzinfo=timezone(timedelta(hours=3)))
        self.assertEqual(to_iso_utc(value), "2024-01-02T00:00:00.000Z")

    def test_parse_zulu(self):
        self.assertEqual(parse_iso("2024-01-02T03:04:05Z"), datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))

    def test_lexical_order_matches_time_order(self):
        earlier = to_iso_utc(datetime(2024, 1, 2, 9, 59, 59, 999000, tzinfo=timezone.utc))
        later = to_iso_utc(datetime(2024, 1, 2, 10, 0, 0, tzinfo=timezone.utc))
        self.assertLess(earlier, later)


if __name__ == '__main__':
    unittest.main()
