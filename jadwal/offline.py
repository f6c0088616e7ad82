"""Static Jakarta-area prayer times, used when nothing else is available."""

import datetime

from jadwal.models import PROVENANCE_OFFLINE, PrayerTimeSet

# One bucket per quarter: Jan-Mar, Apr-Jun, Jul-Sep, Oct-Dec
OFFLINE_TABLE = [
    {"Fajr": "04:45", "Dhuhr": "12:10", "Asr": "15:25", "Maghrib": "18:15", "Isha": "19:30"},
    {"Fajr": "04:40", "Dhuhr": "12:00", "Asr": "15:15", "Maghrib": "18:00", "Isha": "19:15"},
    {"Fajr": "04:35", "Dhuhr": "11:55", "Asr": "15:05", "Maghrib": "17:45", "Isha": "19:00"},
    {"Fajr": "04:30", "Dhuhr": "11:50", "Asr": "15:00", "Maghrib": "17:40", "Isha": "18:55"},
]


def offline_prayer_times(date: datetime.date) -> PrayerTimeSet:
    """Return the quarter bucket for date's month, tagged "offline-default"."""
    timings = OFFLINE_TABLE[(date.month - 1) // 3]
    return PrayerTimeSet(timings=dict(timings), provenance=PROVENANCE_OFFLINE, date=date)
