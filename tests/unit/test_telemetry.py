from __future__ import annotations

import unittest

from historian.observability.telemetry import (
    counter,
    get_counter,
    get_latency_stats,
    reset_telemetry,
    time_block,
)


class TelemetryTests(unittest.TestCase):
    def setUp(self):
        reset_telemetry()

    def test_time_block_appends_ms_suffix(self):
        with time_block("enrichment.client.latency"):
            pass

        self.assertEqual(get_latency_stats("enrichment.client.latency")["count"], 1)
        self.assertEqual(get_latency_stats("enrichment.client.latency_ms")["count"], 1)

    def test_time_block_records_even_on_error(self):
        with self.assertRaises(RuntimeError), time_block("storage.write_ms"):
            raise RuntimeError("boom")

        self.assertEqual(get_latency_stats("storage.write_ms")["count"], 1)

    def test_unknown_metric_has_empty_stats(self):
        self.assertEqual(get_latency_stats("never.latency")["count"], 0)

    def test_counter_increments(self):
        counter("cache.enrichment.hit")
        counter("cache.enrichment.hit", 2)
        self.assertEqual(get_counter("cache.enrichment.hit"), 3)
        self.assertEqual(get_counter("cache.enrichment.miss"), 0)

    def test_reset_clears_counters(self):
        counter("access.granted")
        reset_telemetry()
        self.assertEqual(get_counter("access.granted"), 0)


if __name__ == "__main__":
    unittest.main()
