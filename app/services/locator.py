from __future__ import annotations

import logging
from typing import List, Optional

import aiohttp

from app.config import get_settings
from app.models import Coordinate, Facility, FacilityCategory
from app.services.geo import search_radius_m
from app.services.overpass import build_query, fetch_facilities
from app.services.ranking import rank_facilities

logger = logging.getLogger(__name__)


async def find_nearby(
    session: aiohttp.ClientSession,
    category: FacilityCategory,
    device: Optional[Coordinate],
    *,
    max_minutes: Optional[float] = None,
    speed_kmh: Optional[float] = None,
) -> List[Facility]:
    """Facilities of `category` reachable within `max_minutes`, nearest first.

    A missing device coordinate (permission denied, no fix) is not an error:
    the result is simply empty and Overpass is never contacted.

    Every call queries Overpass afresh. `DataSourceError` from the fetch is
    propagated as-is and nothing is retried. Cancelling the awaiting task
    aborts the in-flight request.
    """
    settings = get_settings()
    if max_minutes is None:
        max_minutes = settings.default_max_minutes
    if speed_kmh is None:
        speed_kmh = settings.default_speed_kmh

    if device is None:
        logger.info("No device location; skipping %s lookup", category.value)
        return []

    radius_m = search_radius_m(max_minutes, speed_kmh, min_radius_m=settings.min_radius_m)
    query = build_query(
        device,
        radius_m,
        category,
        limit=settings.result_limit,
        timeout_s=round(settings.http_timeout_s),
    )
    logger.debug("Overpass query for %s within %d m:\n%s", category.value, radius_m, query)

    facilities = await fetch_facilities(session, query, category)
    ranked = rank_facilities(device, facilities)
    logger.info("Found %d %s facilities within %d m", len(ranked), category.value, radius_m)
    return ranked
