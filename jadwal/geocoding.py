"""Best-effort display names for coordinates via Nominatim reverse lookup."""

import logging

import requests

NOMINATIM_REVERSE_URL = "https://nominatim.openstreetmap.org/reverse"
DEFAULT_USER_AGENT = "jadwal-shalat/1.0"
GENERIC_LOCATION_NAME = "Lokasi saat ini"


def format_address(address: dict) -> str:
    """
    Build "City, State, Country" from a Nominatim address block.

    The state is skipped when it repeats the city. Returns "" when nothing
    usable is present.
    """
    city = address.get("city") or address.get("town") or address.get("village") or address.get("hamlet")
    state = address.get("state") or address.get("county")
    country = address.get("country")

    parts = []
    if city:
        parts.append(str(city))
    if state and state != city:
        parts.append(str(state))
    if country:
        parts.append(str(country))
    return ", ".join(parts)


def reverse_geocode(
    lat: float,
    lon: float,
    url: str = NOMINATIM_REVERSE_URL,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: int = 5,
) -> str:
    """
    Look up a readable name for (lat, lon).

    Never raises: any failure returns GENERIC_LOCATION_NAME.
    """
    try:
        resp = requests.get(
            url,
            params={"format": "json", "lat": lat, "lon": lon, "zoom": 10},
            headers={"User-Agent": user_agent, "Accept-Language": "id,en"},
            timeout=timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        address = data.get("address") if isinstance(data, dict) else None
        if isinstance(address, dict):
            name = format_address(address)
            if name:
                return name
        logging.info(f"[GEO] No address for {lat},{lon}")
    except (requests.RequestException, ValueError) as e:
        logging.warning(f"[GEO] Reverse geocoding failed: {e}")
    return GENERIC_LOCATION_NAME
