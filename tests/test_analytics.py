import unittest

from devicewatch.services.analytics import (
    compute_analytics,
    efficiency,
    health_score,
    summarize_readings,
)
from devicewatch.services.ingestion import ingest_reading
from factories import NOW, make_reading, make_record, memory_store


class TestHealthScore(unittest.TestCase):
    """Health deducts 2 per warning and 5 per danger"""

    def test_deductions(self):
        self.assertEqual(health_score(3, 2), 84)

    def test_clamped_at_zero(self):
        self.assertEqual(health_score(60, 0), 0)
        self.assertEqual(health_score(0, 21), 0)
        self.assertEqual(health_score(100, 100), 0)

    def test_no_events_is_full_health(self):
        self.assertEqual(health_score(0, 0), 100)

    def test_non_increasing_in_counts(self):
        for warnings in range(0, 60, 7):
            for dangers in range(0, 25, 3):
                score = health_score(warnings, dangers)
                self.assertGreaterEqual(score, health_score(warnings + 1, dangers))
                self.assertGreaterEqual(score, health_score(warnings, dangers + 1))
                self.assertEqual(score, max(0, 100 - 2 * warnings - 5 * dangers))


class TestEfficiency(unittest.TestCase):

    def test_ratio(self):
        self.assertEqual(efficiency(5, 20), 25)

    def test_zero_total_uses_floor_of_one(self):
        self.assertEqual(efficiency(0, 0), 0)

    def test_rounds_half_up(self):
        self.assertEqual(efficiency(1, 8), 13)  # 12.5
        self.assertEqual(efficiency(1, 3), 33)
        self.assertEqual(efficiency(2, 3), 67)

    def test_bounded(self):
        for total in range(1, 40):
            for active in range(0, total + 1):
                self.assertTrue(0 <= efficiency(active, total) <= 100)


class TestSummarizeReadings(unittest.TestCase):

    def test_empty_window(self):
        snapshot = summarize_readings([])
        self.assertEqual(snapshot.to_dict(), {
            "efficiency": 0,
            "health_score": 100,
            "total_readings": 0,
            "warnings": 0,
            "dangers": 0,
        })

    def test_counts_and_scores(self):
        readings = (
            [make_reading("SAFE", vibration=True)] * 5
            + [make_reading("WARNING")] * 3
            + [make_reading("DANGER")] * 2
            + [make_reading("ACTIVE")] * 10
        )
        snapshot = summarize_readings(readings)

        self.assertEqual(snapshot.total_readings, 20)
        self.assertEqual(snapshot.efficiency, 25)
        self.assertEqual(snapshot.warnings, 3)
        self.assertEqual(snapshot.dangers, 2)
        self.assertEqual(snapshot.health_score, 84)

    def test_unknown_states_do_not_count(self):
        snapshot = summarize_readings([make_reading("MAINTENANCE"), make_reading("warning")])
        self.assertEqual(snapshot.warnings, 0)
        self.assertEqual(snapshot.dangers, 0)
        self.assertEqual(snapshot.total_readings, 2)


class TestComputeAnalytics(unittest.TestCase):

    def setUp(self):
        self.database, self.store = memory_store()

    def tearDown(self):
        self.database.close()

    def test_only_trailing_window_counts(self):
        ingest_reading(self.store, make_record(minutes_ago=10, state="WARNING", vibration=True))
        ingest_reading(self.store, make_record(minutes_ago=60, state="DANGER"))
        ingest_reading(self.store, make_record(minutes_ago=25 * 60, state="DANGER", vibration=True))
        ingest_reading(self.store, make_record(device_id="OTHER", minutes_ago=5, state="DANGER"))

        snapshot = compute_analytics(self.store, "DEV-1", now=NOW)

        self.assertEqual(snapshot.total_readings, 2)
        self.assertEqual(snapshot.warnings, 1)
        self.assertEqual(snapshot.dangers, 1)
        self.assertEqual(snapshot.efficiency, 50)
        self.assertEqual(snapshot.health_score, 93)

    def test_unknown_device(self):
        snapshot = compute_analytics(self.store, "MISSING", now=NOW)
        self.assertEqual(snapshot.total_readings, 0)
        self.assertEqual(snapshot.health_score, 100)
        self.assertEqual(snapshot.efficiency, 0)

    def test_custom_window(self):
        ingest_reading(self.store, make_record(minutes_ago=90, state="WARNING"))
        snapshot = compute_analytics(self.store, "DEV-1", window_hours=1, now=NOW)
        self.assertEqual(snapshot.total_readings, 0)


if __name__ == '__main__':
    unittest.main()
