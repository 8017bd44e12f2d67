from __future__ import annotations

from typing import Iterable, List

from app.models import Coordinate, Facility
from app.services.geo import haversine_km


def rank_facilities(origin: Coordinate, facilities: Iterable[Facility]) -> List[Facility]:
    """Nearest first. Returns new Facility copies; ties keep source order."""
    ranked = [f.model_copy(update={"distance_km": haversine_km(origin, f.coordinate)}) for f in facilities]
    ranked.sort(key=lambda f: f.distance_km)
    return ranked
