"""Tests for the offline fallback table."""

import datetime
import unittest

from jadwal.models import PROVENANCE_OFFLINE
from jadwal.offline import offline_prayer_times


class TestOfflinePrayerTimes(unittest.TestCase):
    def test_july_uses_third_quarter(self):
        result = offline_prayer_times(datetime.date(2025, 7, 15))
        self.assertEqual(result.provenance, PROVENANCE_OFFLINE)
        self.assertEqual(
            dict(result.timings),
            {"Fajr": "04:35", "Dhuhr": "11:55", "Asr": "15:05", "Maghrib": "17:45", "Isha": "19:00"},
        )

    def test_quarter_boundaries(self):
        self.assertEqual(offline_prayer_times(datetime.date(2025, 3, 31))["Fajr"], "04:45")
        self.assertEqual(offline_prayer_times(datetime.date(2025, 4, 1))["Fajr"], "04:40")
        self.assertEqual(offline_prayer_times(datetime.date(2025, 9, 30))["Maghrib"], "17:45")
        self.assertEqual(offline_prayer_times(datetime.date(2025, 10, 1))["Maghrib"], "17:40")
        self.assertEqual(offline_prayer_times(datetime.date(2025, 12, 31))["Isha"], "18:55")

    def test_same_month_gives_same_times(self):
        a = offline_prayer_times(datetime.date(2024, 7, 1))
        b = offline_prayer_times(datetime.date(2030, 8, 31))
        self.assertEqual(dict(a.timings), dict(b.timings))

    def test_timings_are_read_only(self):
        result = offline_prayer_times(datetime.date(2025, 1, 10))
        with self.assertRaises(TypeError):
            result.timings["Fajr"] = "00:00"
        self.assertEqual(offline_prayer_times(datetime.date(2025, 1, 10))["Fajr"], "04:45")

    def test_sets_are_unhashable_but_comparable(self):
        a = offline_prayer_times(datetime.date(2025, 1, 10))
        b = offline_prayer_times(datetime.date(2025, 1, 10))
        self.assertEqual(a, b)
        with self.assertRaises(TypeError):
            hash(a)


if __name__ == "__main__":
    unittest.main()
