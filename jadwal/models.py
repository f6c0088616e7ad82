"""Value types shared by the location, prayer-time and widget layers."""

import datetime
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

PRAYER_NAMES = [
    "Fajr", "Sunrise", "Dhuhr", "Asr", "Sunset", "Maghrib", "Isha", "Midnight",
]
CORE_PRAYERS = ["Fajr", "Dhuhr", "Asr", "Maghrib", "Isha"]

PRAYER_DISPLAY = {
    "Fajr": "Subuh",
    "Sunrise": "Terbit",
    "Dhuhr": "Dzuhur",
    "Asr": "Ashar",
    "Sunset": "Terbenam",
    "Maghrib": "Maghrib",
    "Isha": "Isya",
    "Midnight": "Tengah Malam",
}

PROVENANCE_REMOTE = "remote"
PROVENANCE_CALCULATED = "calculated"
PROVENANCE_OFFLINE = "offline-default"


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

    def __post_init__(self):
        lat = float(self.latitude)
        lon = float(self.longitude)
        if not (math.isfinite(lat) and -90.0 <= lat <= 90.0):
            raise ValueError(f"latitude out of range: {self.latitude!r}")
        if not (math.isfinite(lon) and -180.0 <= lon <= 180.0):
            raise ValueError(f"longitude out of range: {self.longitude!r}")
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "latitude", lat)
        object.__setattr__(self, "longitude", lon)


@dataclass(frozen=True)
class PrayerTimeSet:
    """
    One complete set of prayer times for a day.

    timings maps prayer name -> "HH:MM" (24h, local). The remote tier also
    fills hijri with {day, month_name, month_ar, year}.
    """

    timings: Mapping[str, str]
    provenance: str
    date: datetime.date
    hijri: Optional[Mapping[str, str]] = field(default=None)

    # compared by value, never hashed
    __hash__ = None

    def __post_init__(self):
        object.__setattr__(self, "timings", MappingProxyType(dict(self.timings)))
        if self.hijri is not None:
            object.__setattr__(self, "hijri", MappingProxyType(dict(self.hijri)))

    def __getitem__(self, name: str) -> str:
        return self.timings[name]

    def get(self, name: str, default=None):
        return self.timings.get(name, default)


@dataclass(frozen=True)
class NextPrayer:
    name: str
    localized_name: str
    time: str
    seconds_remaining: int

    @property
    def countdown(self) -> str:
        return format_countdown(self.seconds_remaining)


@dataclass(frozen=True)
class ResolvedLocation:
    coordinate: Coordinate
    name: str
    timezone: str
    is_fallback: bool = False
    reason: Optional[str] = None


@dataclass(frozen=True)
class PrayerTimesState:
    location: ResolvedLocation
    prayer_times: PrayerTimeSet
    notice: Optional[str] = None

    @property
    def provenance(self) -> str:
        return self.prayer_times.provenance

    @property
    def disclaimer(self) -> str:
        """Location reason and accuracy notice joined for display; "" when both are absent."""
        parts = [p for p in (self.location.reason, self.notice) if p]
        return " ".join(parts)


def format_countdown(seconds: int) -> str:
    """Format seconds into HH:MM:SS countdown string."""
    if seconds < 0:
        return "00:00:00"
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60
    return f"{h:02d}:{m:02d}:{s:02d}"
