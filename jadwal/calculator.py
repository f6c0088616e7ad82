"""
Approximate prayer times computed locally from coordinates and date.

This is a rough seasonal/latitude heuristic, not a solar-position model. It
is only used when the prayer-time proxy cannot be reached.
"""

import datetime
import logging
import math

from jadwal.models import PROVENANCE_CALCULATED, PrayerTimeSet

# Equator / equinox baselines, decimal hours
BASELINE_HOURS = {
    "Fajr": 5.0,
    "Dhuhr": 12.0,
    "Asr": 15.25,
    "Maghrib": 18.0,
    "Isha": 19.5,
}

DAY_LENGTH_AMPLITUDE = 3.0  # hours at the poles
SUNRISE_AFTER_FAJR = 1.5
SUNSET_BEFORE_MAGHRIB = 0.5
MINUTE_EPSILON = 1e-9


def format_decimal_hours(hours: float) -> str:
    """Wrap decimal hours into [0, 24) and render as HH:MM, minutes truncated."""
    if not math.isfinite(hours):
        raise ValueError(f"cannot format non-finite hour value {hours!r}")
    # epsilon keeps e.g. 15.25 * 60 = 914.9999... from losing a minute
    total_minutes = int(math.floor((hours % 24) * 60 + MINUTE_EPSILON)) % (24 * 60)
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def seasonal_factor(date: datetime.date) -> float:
    """Smooth -1..+1 cycle over the year, peaking around the June solstice."""
    day_of_year = date.timetuple().tm_yday
    return math.sin(2 * math.pi * day_of_year / 365.0 - math.pi / 2)


def longitude_correction(longitude: float) -> float:
    """Offset in hours from the standard meridian of a 15-degree zone."""
    return (longitude % 15) / 15.0


def calculate_prayer_times(latitude: float, longitude: float, date: datetime.date) -> PrayerTimeSet:
    """
    Estimate the day's prayer times for (latitude, longitude).

    Returns a PrayerTimeSet tagged "calculated" containing the five core
    prayers plus Sunrise, Sunset and Midnight. Raises ValueError only for
    non-finite coordinates.
    """
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        raise ValueError(f"non-finite coordinate ({latitude!r}, {longitude!r})")

    hours = dict(BASELINE_HOURS)

    latitude_effect = abs(latitude) / 90.0
    day_length_change = seasonal_factor(date) * latitude_effect * DAY_LENGTH_AMPLITUDE
    if latitude <= 0:
        # southern hemisphere has the opposite season
        day_length_change = -day_length_change

    hours["Fajr"] -= day_length_change * 0.5
    hours["Maghrib"] += day_length_change * 0.5
    hours["Isha"] += day_length_change * 0.5

    correction = longitude_correction(longitude)
    for name in hours:
        hours[name] += correction

    timings = {
        "Fajr": format_decimal_hours(hours["Fajr"]),
        "Sunrise": format_decimal_hours(hours["Fajr"] + SUNRISE_AFTER_FAJR),
        "Dhuhr": format_decimal_hours(hours["Dhuhr"]),
        "Asr": format_decimal_hours(hours["Asr"]),
        "Sunset": format_decimal_hours(hours["Maghrib"] - SUNSET_BEFORE_MAGHRIB),
        "Maghrib": format_decimal_hours(hours["Maghrib"]),
        "Isha": format_decimal_hours(hours["Isha"]),
        "Midnight": format_decimal_hours(0.0),
    }
    logging.debug(f"[CALC] {latitude:.4f},{longitude:.4f} {date.isoformat()} -> {timings}")
    return PrayerTimeSet(timings=timings, provenance=PROVENANCE_CALCULATED, date=date)
