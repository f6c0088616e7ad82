"""User settings stored as JSON under ~/.jadwal-shalat, merged over defaults."""

import copy
import functools
import json
import logging
import os

import pytz

from jadwal.geocoding import DEFAULT_USER_AGENT, NOMINATIM_REVERSE_URL, reverse_geocode
from jadwal.location import DEFAULT_LOCATION, IPAPI_URL, IPGeolocationProvider, StaticPositionProvider
from jadwal.models import Coordinate
from jadwal.prayer_api import DEFAULT_API_BASE, DEFAULT_METHOD
from jadwal.service import PrayerTimesService

CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".jadwal-shalat")
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")

DEFAULT_CONFIG = {
    "api_base_url": DEFAULT_API_BASE,
    "calculation_method": DEFAULT_METHOD,
    "request_timeout": 10,
    "max_retries": 2,
    "retry_delay": 2.0,
    "geolocation": {
        "provider": "ip",  # ip | manual | none
        "enabled": True,
        "url": IPAPI_URL,
        "timeout": 10,
        "maximum_age": 300,
        "enable_high_accuracy": False,
        "latitude": None,
        "longitude": None,
        "timezone": None,
    },
    "fallback": {
        "name": DEFAULT_LOCATION["name"],
        "latitude": DEFAULT_LOCATION["lat"],
        "longitude": DEFAULT_LOCATION["lon"],
        "timezone": DEFAULT_LOCATION["timezone"],
    },
    "geocode_url": NOMINATIM_REVERSE_URL,
    "user_agent": DEFAULT_USER_AGENT,
    "log_level": "INFO",
    "log_dir": os.path.join(CONFIG_DIR, "logs"),
}


class ConfigError(Exception):
    pass


def merge_config(base: dict, override: dict) -> dict:
    """Return base updated with override; nested dicts are merged key by key."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: str = None) -> dict:
    """
    Load settings from path (default CONFIG_FILE).

    A missing file gives the defaults. Raises ConfigError when the file
    cannot be read or is not a JSON object.
    """
    path = path or CONFIG_FILE
    if not os.path.isfile(path):
        logging.info(f"[CONFIG] No config at {path}, using defaults")
        return copy.deepcopy(DEFAULT_CONFIG)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config {path} must contain a JSON object")
    logging.info(f"[CONFIG] Loaded {path}")
    return merge_config(DEFAULT_CONFIG, data)


def build_provider(geo: dict):
    """Create the position provider named by the geolocation section."""
    kind = geo.get("provider", "ip")
    if kind == "ip":
        return IPGeolocationProvider(url=geo.get("url", IPAPI_URL), enabled=geo.get("enabled", True))
    if kind == "manual":
        if geo.get("latitude") is None or geo.get("longitude") is None:
            raise ConfigError("manual geolocation needs latitude and longitude")
        try:
            return StaticPositionProvider(
                float(geo["latitude"]), float(geo["longitude"]), timezone=geo.get("timezone")
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid manual coordinates: {e}") from e
    if kind == "none":
        return None
    raise ConfigError(f"unknown geolocation provider {kind!r}")


def build_fallback(fb: dict) -> dict:
    """Validate the fallback section and return it in DEFAULT_LOCATION form."""
    try:
        coordinate = Coordinate(float(fb["latitude"]), float(fb["longitude"]))
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"invalid fallback coordinates: {e}") from e
    try:
        pytz.timezone(fb["timezone"])
    except (KeyError, AttributeError, pytz.UnknownTimeZoneError) as e:
        raise ConfigError(f"invalid fallback timezone: {e}") from e
    return {
        "name": str(fb.get("name") or DEFAULT_LOCATION["name"]),
        "lat": coordinate.latitude,
        "lon": coordinate.longitude,
        "timezone": fb["timezone"],
    }


def build_service(config: dict) -> PrayerTimesService:
    geo = config["geolocation"]
    return PrayerTimesService(
        provider=build_provider(geo),
        location_options={
            "timeout": geo["timeout"],
            "maximum_age": geo["maximum_age"],
            "enable_high_accuracy": geo["enable_high_accuracy"],
        },
        fallback=build_fallback(config["fallback"]),
        geocoder=functools.partial(
            reverse_geocode,
            url=config["geocode_url"],
            user_agent=config["user_agent"],
        ),
        fetch_kwargs={
            "base_url": config["api_base_url"],
            "method": config["calculation_method"],
            "timeout": config["request_timeout"],
            "max_retries": config["max_retries"],
            "retry_delay": config["retry_delay"],
        },
    )
