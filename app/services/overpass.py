from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import aiohttp

from app.config import get_settings
from app.models import Coordinate, Facility, FacilityCategory, RawFacilityRecord

logger = logging.getLogger(__name__)

# Each category maps to one or more predicate groups; a group is ANDed, groups are ORed.
# Labs are mapped either as healthcare=laboratory or as a clinic carrying that tag.
CATEGORY_TAGS: Dict[FacilityCategory, List[List[Tuple[str, str]]]] = {
    FacilityCategory.HOSPITAL: [[("amenity", "hospital")]],
    FacilityCategory.PHARMACY: [[("amenity", "pharmacy")]],
    FacilityCategory.LAB: [
        [("healthcare", "laboratory")],
        [("amenity", "clinic"), ("healthcare", "laboratory")],
    ],
}

ADDRESS_NOT_AVAILABLE = "Address not available"

_PHONE_KEYS = ("contact:phone", "phone", "contact:telephone")


class DataSourceError(Exception):
    """The POI data source answered with a non-success HTTP status."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Overpass error: {status_code}")
        self.status_code = status_code


def list_categories() -> dict[str, list[list[dict[str, str]]]]:
    return {
        category.value: [[{"key": key, "value": value} for key, value in group] for group in groups]
        for category, groups in CATEGORY_TAGS.items()
    }


def _degrees(value: float) -> str:
    # Overpass QL wants plain decimals; repr() switches to 5e-05 below 1e-4
    text = f"{value:.7f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def build_query(
    center: Coordinate,
    radius_m: int,
    category: FacilityCategory,
    *,
    limit: int = 50,
    timeout_s: int = 25,
) -> str:
    """Overpass QL asking for nodes, ways and relations of `category` around a point."""
    around = f"(around:{radius_m},{_degrees(center.lat)},{_degrees(center.lon)})"
    statements = []
    for group in CATEGORY_TAGS[category]:
        predicate = "".join(f'["{key}"="{value}"]' for key, value in group)
        for element_type in ("node", "way", "relation"):
            statements.append(f"  {element_type}{predicate}{around};")

    # Ways and relations have no point geometry, so ask for their center.
    body = "\n".join(statements)
    return f"""[out:json][timeout:{timeout_s}];
(
{body}
);
out center tags {limit};
"""


def encode_query(query: str) -> str:
    """GET query string carrying the Overpass QL in the `data` parameter."""
    return "data=" + quote(query, safe="-_.!~*'()")


def _number(value: Any) -> Optional[float]:
    # bool is an int subclass; strings are not accepted as coordinates
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def parse_element(element: Any) -> RawFacilityRecord:
    if not isinstance(element, dict):
        return RawFacilityRecord()

    osm_type = element.get("type")
    raw_id = element.get("id")
    if isinstance(raw_id, bool) or not isinstance(raw_id, (int, str)) or raw_id == "":
        raw_id = None

    tags = element.get("tags")
    if not isinstance(tags, dict):
        tags = {}

    center = element.get("center")
    if not isinstance(center, dict):
        center = {}

    return RawFacilityRecord(
        osm_type=osm_type if isinstance(osm_type, str) and osm_type else None,
        osm_id=str(raw_id) if raw_id is not None else None,
        tags={k: v for k, v in tags.items() if isinstance(k, str) and isinstance(v, str)},
        lat=_number(element.get("lat")),
        lon=_number(element.get("lon")),
        center_lat=_number(center.get("lat")),
        center_lon=_number(center.get("lon")),
    )


def _first(tags: Dict[str, str], *keys: str) -> Optional[str]:
    for key in keys:
        value = tags.get(key, "").strip()
        if value:
            return value
    return None


def extract_address(tags: Dict[str, str]) -> str:
    house = _first(tags, "addr:housenumber")
    street = _first(tags, "addr:street", "addr:road")
    area = _first(tags, "addr:suburb", "addr:neighbourhood")
    city = _first(tags, "addr:city", "addr:town", "addr:village")
    state = _first(tags, "addr:state")
    postcode = _first(tags, "addr:postcode")

    line1 = " ".join(p for p in (house, street) if p)
    line2 = ", ".join(p for p in (area, city) if p)
    line3 = " ".join(p for p in (state, postcode) if p)
    address = ", ".join(p for p in (line1, line2, line3) if p)

    return address or _first(tags, "addr:full") or ADDRESS_NOT_AVAILABLE


def extract_phone(tags: Dict[str, str]) -> Optional[str]:
    return _first(tags, *_PHONE_KEYS)


def _extras(tags: Dict[str, str], category: FacilityCategory) -> Dict[str, List[str]]:
    if category is not FacilityCategory.LAB:
        return {}
    services = []
    if tags.get("healthcare") == "laboratory":
        services.append("Lab Tests")
    if tags.get("amenity") == "clinic":
        services.append("Clinic")
    return {"services": services}


def to_facility(record: RawFacilityRecord, category: FacilityCategory) -> Optional[Facility]:
    """Normalize one record; None when it has no id or no usable geometry."""
    coordinate = record.coordinate()
    if record.osm_id is None or coordinate is None:
        return None

    facility_id = f"{record.osm_type}/{record.osm_id}" if record.osm_type else record.osm_id
    tags = record.tags
    return Facility(
        id=facility_id,
        name=_first(tags, "name") or category.default_name,
        address=extract_address(tags),
        phone=extract_phone(tags),
        coordinate=coordinate,
        category=category,
        extras=_extras(tags, category),
    )


def normalize_elements(data: Any, category: FacilityCategory) -> List[Facility]:
    elements = data.get("elements") if isinstance(data, dict) else None
    if not isinstance(elements, list):
        logger.warning("Overpass response has no elements array; treating as empty")
        return []

    # Deduplicate by id, first occurrence wins
    seen: set[str] = set()
    facilities: List[Facility] = []
    skipped = 0
    for element in elements:
        facility = to_facility(parse_element(element), category)
        if facility is None:
            skipped += 1
            continue
        if facility.id in seen:
            continue
        seen.add(facility.id)
        facilities.append(facility)

    if skipped:
        logger.debug("Discarded %d %s elements without id or coordinates", skipped, category.value)
    return facilities


async def fetch_facilities(
    session: aiohttp.ClientSession,
    query: str,
    category: FacilityCategory,
) -> List[Facility]:
    """Run `query` against Overpass and normalize the elements into facilities."""
    settings = get_settings()

    url = f"{settings.overpass_base_url}?{encode_query(query)}"
    headers = {"User-Agent": settings.user_agent}
    timeout = aiohttp.ClientTimeout(total=settings.http_timeout_s)

    async with session.get(url, headers=headers, timeout=timeout) as resp:
        if not 200 <= resp.status < 300:
            logger.warning("Overpass responded with HTTP %d", resp.status)
            raise DataSourceError(resp.status)
        try:
            data = await resp.json(content_type=None)
        except ValueError:
            logger.warning("Overpass returned a body that is not JSON; treating as empty")
            return []

    return normalize_elements(data, category)
