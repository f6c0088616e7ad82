"""Tests for reverse geocoding labels."""

import unittest
from unittest.mock import MagicMock, patch

import requests

from jadwal.geocoding import GENERIC_LOCATION_NAME, format_address, reverse_geocode


class TestFormatAddress(unittest.TestCase):
    def test_city_state_country(self):
        address = {"city": "Bandung", "state": "Jawa Barat", "country": "Indonesia"}
        self.assertEqual(format_address(address), "Bandung, Jawa Barat, Indonesia")

    def test_falls_back_through_town_and_village(self):
        self.assertEqual(format_address({"town": "Ciseeng", "country": "Indonesia"}), "Ciseeng, Indonesia")
        self.assertEqual(format_address({"village": "Cibodas"}), "Cibodas")

    def test_skips_state_equal_to_city(self):
        address = {"city": "Daerah Khusus Ibukota Jakarta", "state": "Daerah Khusus Ibukota Jakarta", "country": "Indonesia"}
        self.assertEqual(format_address(address), "Daerah Khusus Ibukota Jakarta, Indonesia")

    def test_county_used_when_no_state(self):
        self.assertEqual(format_address({"hamlet": "Dusun", "county": "Bogor"}), "Dusun, Bogor")

    def test_non_string_values(self):
        self.assertEqual(format_address({"city": 123, "country": "Indonesia"}), "123, Indonesia")

    def test_empty(self):
        self.assertEqual(format_address({}), "")


class TestReverseGeocode(unittest.TestCase):
    @patch("jadwal.geocoding.requests.get")
    def test_returns_name(self, mock_get):
        resp = MagicMock()
        resp.json.return_value = {"address": {"city": "Bandung", "state": "Jawa Barat", "country": "Indonesia"}}
        resp.raise_for_status = MagicMock()
        mock_get.return_value = resp

        self.assertEqual(reverse_geocode(-6.9, 107.6), "Bandung, Jawa Barat, Indonesia")
        params = mock_get.call_args[1]["params"]
        self.assertEqual(params["zoom"], 10)
        self.assertEqual(params["format"], "json")
        self.assertIn("User-Agent", mock_get.call_args[1]["headers"])

    @patch("jadwal.geocoding.requests.get")
    def test_network_failure_gives_generic_label(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("down")
        self.assertEqual(reverse_geocode(-6.9, 107.6), GENERIC_LOCATION_NAME)

    @patch("jadwal.geocoding.requests.get")
    def test_missing_address_gives_generic_label(self, mock_get):
        resp = MagicMock()
        resp.json.return_value = {"error": "Unable to geocode"}
        resp.raise_for_status = MagicMock()
        mock_get.return_value = resp
        self.assertEqual(reverse_geocode(0.0, 0.0), "Lokasi saat ini")

    @patch("jadwal.geocoding.requests.get")
    def test_numeric_address_fields_do_not_raise(self, mock_get):
        resp = MagicMock()
        resp.json.return_value = {"address": {"city": 123, "state": 45.6}}
        resp.raise_for_status = MagicMock()
        mock_get.return_value = resp
        self.assertEqual(reverse_geocode(0.0, 0.0), "123, 45.6")

    @patch("jadwal.geocoding.requests.get")
    def test_bad_json_gives_generic_label(self, mock_get):
        resp = MagicMock()
        resp.json.side_effect = ValueError("not json")
        resp.raise_for_status = MagicMock()
        mock_get.return_value = resp
        self.assertEqual(reverse_geocode(0.0, 0.0), GENERIC_LOCATION_NAME)


if __name__ == "__main__":
    unittest.main()
