"""
One refresh cycle: resolve location, then walk the prayer-time tiers.

remote proxy (retried) -> local calculation -> offline table. The returned
state always carries a complete set of times; degraded tiers add an
accuracy notice for the UI.
"""

import datetime
import logging

import pytz

from jadwal.calculator import calculate_prayer_times
from jadwal.location import DEFAULT_LOCATION, resolve_location
from jadwal.models import PrayerTimesState
from jadwal.offline import offline_prayer_times
from jadwal.prayer_api import RemoteFetchFailed, fetch_prayer_times

CALCULATED_NOTICE = "Menggunakan perhitungan lokal karena keterbatasan akses server."
OFFLINE_NOTICE = "Tidak dapat terhubung ke server. Menggunakan data perkiraan offline (kurang akurat)."
RETRY_NOTICE = "Mencoba menghubungi server lagi... ({n}/{total})"


def local_today(timezone_name: str) -> datetime.date:
    try:
        tz = pytz.timezone(timezone_name)
    except pytz.UnknownTimeZoneError:
        tz = pytz.utc
    return datetime.datetime.now(tz).date()


class PrayerTimesService:
    """
    Holds the collaborators of a refresh cycle.

    fetch_kwargs are passed straight to fetch_prayer_times (base_url,
    method, timeout, max_retries, retry_delay, sleep).
    """

    def __init__(
        self,
        provider=None,
        location_options: dict = None,
        fallback: dict = None,
        geocoder=None,
        fetch_kwargs: dict = None,
        fetcher=fetch_prayer_times,
        calculator=calculate_prayer_times,
        offline=offline_prayer_times,
    ):
        self.provider = provider
        self.location_options = dict(location_options or {})
        self.fallback = fallback or DEFAULT_LOCATION
        self.geocoder = geocoder
        self.fetch_kwargs = dict(fetch_kwargs or {})
        self.fetcher = fetcher
        self.calculator = calculator
        self.offline = offline

    def resolve(self):
        kwargs = dict(self.location_options)
        if self.geocoder is not None:
            kwargs["geocoder"] = self.geocoder
        return resolve_location(self.provider, fallback=self.fallback, **kwargs)

    def prayer_times_for(self, location, today: datetime.date, on_status=None):
        """
        Return (PrayerTimeSet, notice) for a resolved location.

        on_status(message) receives retry progress text while the remote
        tier is still being tried.
        """
        coordinate = location.coordinate
        fetch_kwargs = dict(self.fetch_kwargs)
        if on_status is not None:
            fetch_kwargs["on_retry"] = lambda n, total: on_status(RETRY_NOTICE.format(n=n, total=total))
        try:
            times = self.fetcher(coordinate, today, **fetch_kwargs)
            logging.info("[SERVICE] Using remote prayer times")
            return times, None
        except RemoteFetchFailed as e:
            logging.warning(f"[SERVICE] Remote tier failed, calculating locally: {e}")

        try:
            times = self.calculator(coordinate.latitude, coordinate.longitude, today)
            return times, CALCULATED_NOTICE
        except ValueError as e:
            logging.error(f"[SERVICE] Local calculation failed, using offline table: {e}")

        return self.offline(today), OFFLINE_NOTICE

    def refresh(self, today: datetime.date = None, on_status=None) -> PrayerTimesState:
        location = self.resolve()
        if today is None:
            today = local_today(location.timezone)
        times, notice = self.prayer_times_for(location, today, on_status=on_status)
        logging.info(f"[SERVICE] Prayer times ready ({times.provenance}) for {location.name}")
        return PrayerTimesState(location=location, prayer_times=times, notice=notice)
