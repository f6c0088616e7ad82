"""Pick the upcoming prayer and the countdown to it."""

import datetime

from jadwal.models import CORE_PRAYERS, PRAYER_DISPLAY, NextPrayer


def time_str_to_dt(time_str: str, now: datetime.datetime) -> datetime.datetime:
    """
    Convert 'HH:MM' to a datetime on now's date, carrying now's tzinfo.
    """
    hour, minute = map(int, time_str.split(":"))
    return now.replace(hour=hour, minute=minute, second=0, microsecond=0)


def seconds_until(target_dt: datetime.datetime, now: datetime.datetime) -> int:
    """Return whole seconds from now until target_dt (negative if past)."""
    delta = target_dt - now
    return int(delta.total_seconds())


def select_next_prayer(prayer_times, now: datetime.datetime) -> NextPrayer:
    """
    Given a PrayerTimeSet (or plain timings dict) and the current time,
    return the next core prayer.

    Sunrise, Sunset and Midnight never qualify. After Isha the next prayer
    is tomorrow's Fajr.
    """
    now_hm = now.strftime("%H:%M")
    next_name = None
    for name in CORE_PRAYERS:
        if prayer_times[name] > now_hm:
            next_name = name
            break
    if next_name is None:
        next_name = CORE_PRAYERS[0]

    time_str = prayer_times[next_name]
    prayer_dt = time_str_to_dt(time_str, now)
    if prayer_dt < now:
        prayer_dt = prayer_dt + datetime.timedelta(days=1)
        tz = prayer_dt.tzinfo
        if hasattr(tz, "normalize"):
            # pytz zones need normalize() after arithmetic
            prayer_dt = tz.normalize(prayer_dt)

    return NextPrayer(
        name=next_name,
        localized_name=PRAYER_DISPLAY[next_name],
        time=time_str,
        seconds_remaining=seconds_until(prayer_dt, now),
    )
