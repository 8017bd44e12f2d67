from __future__ import annotations

import math
from typing import Optional
from urllib.parse import urlencode

from app.models import Coordinate

EARTH_RADIUS_KM = 6371.0

OSM_DIRECTIONS_URL = "https://www.openstreetmap.org/directions"


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in kilometers between two WGS84 coords."""
    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    dphi = math.radians(b.lat - a.lat)
    dlambda = math.radians(b.lon - a.lon)

    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def _check_speed(speed_kmh: float) -> None:
    if speed_kmh <= 0:
        raise ValueError(f"speed_kmh must be positive, got {speed_kmh}")


def minutes_from_km(km: float, speed_kmh: float = 30.0) -> int:
    """Travel time in whole minutes, never less than 1."""
    _check_speed(speed_kmh)
    return max(1, round((km / speed_kmh) * 60))


def search_radius_km(max_minutes: float = 10.0, speed_kmh: float = 30.0) -> float:
    _check_speed(speed_kmh)
    if max_minutes < 0:
        raise ValueError(f"max_minutes must not be negative, got {max_minutes}")
    return (max_minutes / 60) * speed_kmh


def search_radius_m(max_minutes: float = 10.0, speed_kmh: float = 30.0, min_radius_m: int = 500) -> int:
    """Radius in meters for the Overpass `around` filter, floored at `min_radius_m`."""
    return max(min_radius_m, round(search_radius_km(max_minutes, speed_kmh) * 1000))


def format_distance(km: float, speed_kmh: float = 30.0) -> str:
    return f"{km:.1f} km (~{minutes_from_km(km, speed_kmh)} min)"


def directions_url(destination: Coordinate, origin: Optional[Coordinate] = None) -> str:
    params = {
        "engine": "fossgis_osrm_car",
        "from": f"{origin.lat:.6f},{origin.lon:.6f}" if origin is not None else "",
        "to": f"{destination.lat:.6f},{destination.lon:.6f}",
    }
    return f"{OSM_DIRECTIONS_URL}?{urlencode(params)}"
