from __future__ import annotations

import asyncio
import logging
from typing import Optional

import aiohttp
from fastapi import FastAPI, HTTPException, Query

from app.config import get_settings
from app.models import Coordinate, FacilityCategory, NearbyFacility, NearbyResponse
from app.services.geo import directions_url, format_distance, minutes_from_km, search_radius_m
from app.services.locator import find_nearby
from app.services.overpass import DataSourceError, list_categories

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger("care_locator")

app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Finds hospitals, pharmacies and diagnostic labs near a device using OpenStreetMap data.",
)


@app.get("/", tags=["Root"])
async def root():
    return {"ok": True, "service": settings.app_name, "version": settings.version}


@app.get("/health", tags=["Healthcheck"])
async def health():
    return {"ok": True}


@app.get("/api/categories", tags=["Api Categories"])
async def api_categories():
    return {"categories": list_categories()}


@app.get("/api/nearby", response_model=NearbyResponse, tags=["Api Nearby"])
async def api_nearby(
    category: FacilityCategory = Query(...),
    lat: Optional[float] = Query(None, ge=-90.0, le=90.0),
    lon: Optional[float] = Query(None, ge=-180.0, le=180.0),
    max_minutes: float = Query(settings.default_max_minutes, gt=0, le=120),
    speed_kmh: float = Query(settings.default_speed_kmh, gt=0, le=200),
):
    """Omitting lat/lon means the device location is unavailable: the result is empty."""
    if (lat is None) != (lon is None):
        raise HTTPException(status_code=400, detail="Pass both lat and lon, or neither")
    origin = Coordinate(lat=lat, lon=lon) if lat is not None else None

    async with aiohttp.ClientSession() as session:
        try:
            facilities = await find_nearby(
                session,
                category,
                origin,
                max_minutes=max_minutes,
                speed_kmh=speed_kmh,
            )
        except DataSourceError as e:
            raise HTTPException(status_code=502, detail=f"Overpass error: {e.status_code}")
        except asyncio.TimeoutError:
            logger.warning("Overpass request timed out for %s", category.value)
            raise HTTPException(status_code=504, detail="Overpass timed out")
        except aiohttp.ClientError as e:
            logger.warning("Overpass request failed: %s", e)
            raise HTTPException(status_code=502, detail="Overpass unreachable")

    items = [
        NearbyFacility(
            **f.model_dump(),
            travel_minutes=minutes_from_km(f.distance_km, speed_kmh),
            distance_label=format_distance(f.distance_km, speed_kmh),
            directions_url=directions_url(f.coordinate, origin),
        )
        for f in facilities
    ]
    return NearbyResponse(
        category=category,
        origin=origin,
        radius_m=search_radius_m(max_minutes, speed_kmh, min_radius_m=settings.min_radius_m),
        count=len(items),
        facilities=items,
    )
