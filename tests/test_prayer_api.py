"""Tests for the prayer_api module."""

import copy
import datetime
import unittest
from unittest.mock import MagicMock, call, patch

import requests

from jadwal.models import PROVENANCE_REMOTE, Coordinate
from jadwal.prayer_api import (
    RemoteFetchFailed,
    fetch_prayer_times,
    format_request_date,
    parse_envelope,
)

JAKARTA = Coordinate(-6.1751, 106.8650)
DATE = datetime.date(2025, 3, 5)

MOCK_RESPONSE = {
    "code": 200,
    "status": "OK",
    "data": {
        "timings": {
            "Fajr": "04:36",
            "Sunrise": "05:50",
            "Dhuhr": "12:00",
            "Asr": "15:08",
            "Sunset": "18:06",
            "Maghrib": "18:06",
            "Isha": "19:14",
            "Imsak": "04:26",
            "Midnight": "00:00",
        },
        "date": {
            "gregorian": {"date": "05-03-2025", "weekday": {"en": "Wednesday"}},
            "hijri": {
                "day": "5",
                "month": {"en": "Ramaḍān", "ar": "رَمَضان"},
                "year": "1446",
            },
        },
    },
}


def mock_response(body, status_error=None):
    resp = MagicMock()
    resp.json.return_value = body
    if status_error is not None:
        resp.raise_for_status.side_effect = status_error
    else:
        resp.raise_for_status = MagicMock()
    return resp


class TestRequestDate(unittest.TestCase):
    def test_day_and_month_not_padded(self):
        self.assertEqual(format_request_date(datetime.date(2025, 3, 5)), "5-3-2025")
        self.assertEqual(format_request_date(datetime.date(2025, 12, 25)), "25-12-2025")


class TestParseEnvelope(unittest.TestCase):
    def test_builds_remote_set_with_hijri(self):
        result = parse_envelope(MOCK_RESPONSE, DATE)
        self.assertEqual(result.provenance, PROVENANCE_REMOTE)
        self.assertEqual(result["Fajr"], "04:36")
        self.assertEqual(result["Isha"], "19:14")
        self.assertNotIn("Imsak", result.timings)
        self.assertEqual(result.hijri["year"], "1446")
        self.assertEqual(result.date, DATE)

    def test_strips_timezone_suffix(self):
        body = copy.deepcopy(MOCK_RESPONSE)
        body["data"]["timings"]["Fajr"] = "04:36 (WIB)"
        self.assertEqual(parse_envelope(body, DATE)["Fajr"], "04:36")

    def test_rejects_error_envelope(self):
        with self.assertRaises(ValueError):
            parse_envelope({"code": 400, "status": "Bad Request"}, DATE)

    def test_rejects_missing_core_prayer(self):
        body = copy.deepcopy(MOCK_RESPONSE)
        del body["data"]["timings"]["Asr"]
        with self.assertRaises(ValueError):
            parse_envelope(body, DATE)

    def test_rejects_unpadded_time(self):
        body = copy.deepcopy(MOCK_RESPONSE)
        body["data"]["timings"]["Fajr"] = "4:36"
        with self.assertRaises(ValueError):
            parse_envelope(body, DATE)

    def test_ignores_malformed_hijri(self):
        body = copy.deepcopy(MOCK_RESPONSE)
        body["data"]["date"] = "05-03-2025"
        self.assertIsNone(parse_envelope(body, DATE).hijri)

    def test_rejects_non_object(self):
        with self.assertRaises(ValueError):
            parse_envelope(["nope"], DATE)


class TestFetchPrayerTimes(unittest.TestCase):
    @patch("jadwal.prayer_api.requests.get")
    def test_requests_proxy_endpoint(self, mock_get):
        mock_get.return_value = mock_response(MOCK_RESPONSE)
        sleep = MagicMock()

        result = fetch_prayer_times(JAKARTA, DATE, base_url="http://example.test/", sleep=sleep)

        self.assertEqual(result["Maghrib"], "18:06")
        args, kwargs = mock_get.call_args
        self.assertEqual(args[0], "http://example.test/api/prayer-times")
        self.assertEqual(
            kwargs["params"],
            {"date": "5-3-2025", "latitude": -6.1751, "longitude": 106.8650, "method": 11},
        )
        sleep.assert_not_called()

    @patch("jadwal.prayer_api.requests.get")
    def test_gives_up_after_three_attempts(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("offline")
        sleep = MagicMock()

        with self.assertRaises(RemoteFetchFailed) as ctx:
            fetch_prayer_times(JAKARTA, DATE, sleep=sleep)

        self.assertEqual(mock_get.call_count, 3)
        self.assertEqual(ctx.exception.attempts, 3)
        self.assertIsInstance(ctx.exception.__cause__, requests.ConnectionError)
        self.assertEqual(sleep.call_args_list, [call(2.0), call(2.0)])

    @patch("jadwal.prayer_api.requests.get")
    def test_succeeds_on_last_retry(self, mock_get):
        mock_get.side_effect = [
            requests.Timeout("slow"),
            mock_response({"code": 500, "status": "Error"}),
            mock_response(MOCK_RESPONSE),
        ]
        sleep = MagicMock()

        result = fetch_prayer_times(JAKARTA, DATE, sleep=sleep)

        self.assertEqual(result["Dhuhr"], "12:00")
        self.assertEqual(sleep.call_count, 2)

    @patch("jadwal.prayer_api.requests.get")
    def test_http_error_counts_as_failure(self, mock_get):
        mock_get.return_value = mock_response(MOCK_RESPONSE, status_error=requests.HTTPError("502"))

        with self.assertRaises(RemoteFetchFailed):
            fetch_prayer_times(JAKARTA, DATE, sleep=MagicMock())
        self.assertEqual(mock_get.call_count, 3)

    @patch("jadwal.prayer_api.requests.get")
    def test_reports_each_retry(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("offline")
        on_retry = MagicMock()

        with self.assertRaises(RemoteFetchFailed):
            fetch_prayer_times(JAKARTA, DATE, sleep=MagicMock(), on_retry=on_retry)
        self.assertEqual(on_retry.call_args_list, [call(1, 2), call(2, 2)])

    @patch("jadwal.prayer_api.requests.get")
    def test_no_retries_when_disabled(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("offline")
        sleep = MagicMock()

        with self.assertRaises(RemoteFetchFailed):
            fetch_prayer_times(JAKARTA, DATE, max_retries=0, sleep=sleep)
        self.assertEqual(mock_get.call_count, 1)
        sleep.assert_not_called()


if __name__ == "__main__":
    unittest.main()
