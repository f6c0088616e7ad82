"""Location detection via position providers, with a Jakarta fallback."""

import logging
import time
from dataclasses import dataclass
from typing import Optional

import requests

from jadwal.geocoding import reverse_geocode
from jadwal.models import Coordinate, ResolvedLocation

DEFAULT_LOCATION = {
    "name": "Jakarta Pusat, Indonesia (default)",
    "lat": -6.1751,
    "lon": 106.8650,
    "timezone": "Asia/Jakarta",
}

IPAPI_URL = "http://ip-api.com/json/"

DEFAULT_TIMEOUT = 10
DEFAULT_MAXIMUM_AGE = 300  # accept a cached fix up to 5 minutes old

PERMISSION_DENIED = 1
POSITION_UNAVAILABLE = 2
TIMEOUT = 3

FALLBACK_PREFIX = "Menggunakan lokasi default."
REASONS = {
    PERMISSION_DENIED: "Akses lokasi ditolak.",
    POSITION_UNAVAILABLE: "Informasi lokasi tidak tersedia.",
    TIMEOUT: "Permintaan lokasi habis waktu.",
}
UNKNOWN_REASON = "Kesalahan tidak diketahui."
UNSUPPORTED_REASON = "Geolokasi tidak didukung. Menggunakan lokasi default."


class GeolocationError(Exception):
    """A provider could not produce a position. code is one of the module constants."""

    def __init__(self, code: int, message: str = ""):
        super().__init__(message or REASONS.get(code, UNKNOWN_REASON))
        self.code = code


@dataclass(frozen=True)
class Position:
    coordinate: Coordinate
    timezone: Optional[str] = None
    timestamp: float = 0.0


class IPGeolocationProvider:
    """
    Approximate position from the public IP address (ip-api.com).

    The last fix is kept in memory and reused while it is younger than the
    caller's maximum_age. enabled=False behaves like a user who refused
    location access.
    """

    def __init__(self, url: str = IPAPI_URL, enabled: bool = True, clock=time.time):
        self.url = url
        self.enabled = enabled
        self._clock = clock
        self._last: Optional[Position] = None

    def get_current_position(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        maximum_age: float = DEFAULT_MAXIMUM_AGE,
        enable_high_accuracy: bool = False,
    ) -> Position:
        if not self.enabled:
            raise GeolocationError(PERMISSION_DENIED)

        now = self._clock()
        if self._last is not None and now - self._last.timestamp <= maximum_age:
            logging.info("[LOC] Using cached position")
            return self._last

        # IP lookup is coarse either way; enable_high_accuracy has no effect
        try:
            resp = requests.get(
                self.url,
                params={"fields": "status,message,lat,lon,timezone"},
                timeout=timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.Timeout as e:
            raise GeolocationError(TIMEOUT, str(e)) from e
        except (requests.RequestException, ValueError) as e:
            raise GeolocationError(POSITION_UNAVAILABLE, str(e)) from e

        if not isinstance(data, dict) or data.get("status") != "success":
            message = data.get("message", "lookup failed") if isinstance(data, dict) else "lookup failed"
            raise GeolocationError(POSITION_UNAVAILABLE, message)
        try:
            coordinate = Coordinate(float(data["lat"]), float(data["lon"]))
        except (KeyError, TypeError, ValueError) as e:
            raise GeolocationError(POSITION_UNAVAILABLE, f"bad coordinates: {e}") from e

        self._last = Position(coordinate=coordinate, timezone=data.get("timezone"), timestamp=now)
        return self._last


class StaticPositionProvider:
    """A fixed, user-configured position."""

    def __init__(self, latitude: float, longitude: float, timezone: str = None):
        self.position = Position(Coordinate(latitude, longitude), timezone=timezone, timestamp=time.time())

    def get_current_position(self, timeout=DEFAULT_TIMEOUT, maximum_age=DEFAULT_MAXIMUM_AGE, enable_high_accuracy=False):
        return self.position


def fallback_location(reason: str, fallback: dict = None) -> ResolvedLocation:
    fallback = fallback or DEFAULT_LOCATION
    return ResolvedLocation(
        coordinate=Coordinate(fallback["lat"], fallback["lon"]),
        name=fallback["name"],
        timezone=fallback["timezone"],
        is_fallback=True,
        reason=reason,
    )


def resolve_location(
    provider=None,
    timeout: float = DEFAULT_TIMEOUT,
    maximum_age: float = DEFAULT_MAXIMUM_AGE,
    enable_high_accuracy: bool = False,
    fallback: dict = None,
    geocoder=reverse_geocode,
) -> ResolvedLocation:
    """
    Resolve the current location.

    provider=None means no geolocation capability. Geolocation errors never
    propagate: the fallback coordinate is returned with a reason string
    naming the cause. The display name comes from geocoder(lat, lon), which
    is expected to be best effort.
    """
    fallback = fallback or DEFAULT_LOCATION
    if provider is None:
        logging.warning("[LOC] No geolocation provider, using default location")
        return fallback_location(UNSUPPORTED_REASON, fallback)

    try:
        position = provider.get_current_position(
            timeout=timeout,
            maximum_age=maximum_age,
            enable_high_accuracy=enable_high_accuracy,
        )
    except GeolocationError as e:
        logging.warning(f"[LOC] Geolocation failed (code {e.code}): {e}")
        reason = f"{FALLBACK_PREFIX} {REASONS.get(e.code, UNKNOWN_REASON)}"
        return fallback_location(reason, fallback)

    coordinate = position.coordinate
    name = geocoder(coordinate.latitude, coordinate.longitude)
    logging.info(f"[LOC] Location {coordinate.latitude},{coordinate.longitude} ({name})")
    return ResolvedLocation(
        coordinate=coordinate,
        name=name,
        timezone=position.timezone or fallback["timezone"],
    )
