"""Fetch prayer times and Hijri date through the backend's Aladhan proxy."""

import datetime
import logging
import re
import time

import requests

from jadwal.models import CORE_PRAYERS, PRAYER_NAMES, PROVENANCE_REMOTE, Coordinate, PrayerTimeSet

DEFAULT_API_BASE = "http://localhost:8000"
PRAYER_TIMES_PATH = "/api/prayer-times"

# Aladhan calculation method: 2 = ISNA, 3 = MWL, 5 = Egypt, 11 = Singapore (MUIS), 20 = Kemenag RI
DEFAULT_METHOD = 11
DEFAULT_TIMEOUT = 10
MAX_RETRIES = 2
RETRY_DELAY = 2.0

HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class RemoteFetchFailed(Exception):
    """The prayer-time proxy could not produce a usable answer."""

    def __init__(self, message: str, attempts: int = 1):
        super().__init__(message)
        self.attempts = attempts


def format_request_date(date: datetime.date) -> str:
    """D-M-YYYY, day and month without zero padding."""
    return f"{date.day}-{date.month}-{date.year}"


def parse_envelope(body, date: datetime.date) -> PrayerTimeSet:
    """
    Validate an Aladhan success envelope and build a remote PrayerTimeSet.

    Raises ValueError when the body is not {code: 200, status: "OK",
    data: {timings: {...}}} with all five core prayers present.
    """
    if not isinstance(body, dict):
        raise ValueError("response body is not a JSON object")
    if body.get("code") != 200 or body.get("status") != "OK":
        raise ValueError(f"prayer time API error: {body.get('status')}")

    data = body.get("data")
    raw_timings = data.get("timings") if isinstance(data, dict) else None
    if not isinstance(raw_timings, dict):
        raise ValueError("response has no timings")

    missing = [name for name in CORE_PRAYERS if not raw_timings.get(name)]
    if missing:
        raise ValueError(f"response is missing timings for {', '.join(missing)}")

    # Keep the known prayer names only (strip " (WIB)" suffixes and seconds)
    timings = {}
    for name in PRAYER_NAMES:
        raw = raw_timings.get(name)
        if raw:
            timings[name] = str(raw)[:5]
    bad = [name for name in CORE_PRAYERS if not HHMM.match(timings[name])]
    if bad:
        raise ValueError(f"malformed timings for {', '.join(bad)}")

    # Hijri date is optional, a malformed block is ignored
    hijri = None
    date_block = data.get("date")
    hijri_data = date_block.get("hijri") if isinstance(date_block, dict) else None
    if isinstance(hijri_data, dict):
        month = hijri_data.get("month")
        month = month if isinstance(month, dict) else {}
        hijri = {
            "day": hijri_data.get("day", ""),
            "month_name": month.get("en", ""),
            "month_ar": month.get("ar", ""),
            "year": hijri_data.get("year", ""),
        }

    return PrayerTimeSet(timings=timings, provenance=PROVENANCE_REMOTE, date=date, hijri=hijri)


def request_prayer_times(
    coordinate: Coordinate,
    date: datetime.date,
    base_url: str = DEFAULT_API_BASE,
    method: int = DEFAULT_METHOD,
    timeout: float = DEFAULT_TIMEOUT,
) -> PrayerTimeSet:
    """
    Single attempt against the proxy.

    Raises requests.RequestException or ValueError on failure.
    """
    url = base_url.rstrip("/") + PRAYER_TIMES_PATH
    params = {
        "date": format_request_date(date),
        "latitude": coordinate.latitude,
        "longitude": coordinate.longitude,
        "method": method,
    }
    resp = requests.get(url, params=params, headers={"Accept": "application/json"}, timeout=timeout)
    resp.raise_for_status()
    return parse_envelope(resp.json(), date)


def fetch_prayer_times(
    coordinate: Coordinate,
    date: datetime.date = None,
    base_url: str = DEFAULT_API_BASE,
    method: int = DEFAULT_METHOD,
    timeout: float = DEFAULT_TIMEOUT,
    max_retries: int = MAX_RETRIES,
    retry_delay: float = RETRY_DELAY,
    sleep=time.sleep,
    on_retry=None,
) -> PrayerTimeSet:
    """
    Fetch remote prayer times, retrying sequentially with a fixed delay.

    Makes at most 1 + max_retries attempts. on_retry(n, max_retries) is
    called before the n-th retry. Raises RemoteFetchFailed (with the last
    error chained) once they are all used up.
    """
    if date is None:
        date = datetime.date.today()

    attempts = 1 + max(0, max_retries)
    last_error = None
    for attempt in range(1, attempts + 1):
        logging.info(
            f"[PRAYER] Fetching prayer times ({coordinate.latitude}, {coordinate.longitude}) "
            f"attempt {attempt}/{attempts}"
        )
        try:
            return request_prayer_times(coordinate, date, base_url=base_url, method=method, timeout=timeout)
        except (requests.RequestException, ValueError) as e:
            last_error = e
            logging.warning(f"[PRAYER] Attempt {attempt}/{attempts} failed: {e}")
            if attempt < attempts:
                if on_retry is not None:
                    on_retry(attempt, attempts - 1)
                sleep(retry_delay)

    raise RemoteFetchFailed(
        f"prayer times unavailable after {attempts} attempts: {last_error}",
        attempts=attempts,
    ) from last_error
