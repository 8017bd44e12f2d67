from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    """A latitude/longitude pair in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)


class FacilityCategory(str, Enum):
    HOSPITAL = "hospital"
    PHARMACY = "pharmacy"
    LAB = "lab"

    @property
    def default_name(self) -> str:
        return _DEFAULT_NAMES[self]


_DEFAULT_NAMES = {
    FacilityCategory.HOSPITAL: "Hospital",
    FacilityCategory.PHARMACY: "Pharmacy",
    FacilityCategory.LAB: "Pathology Lab",
}


class RawFacilityRecord(BaseModel):
    """One Overpass element after type checks; anything malformed is None."""

    osm_type: Optional[str] = None
    osm_id: Optional[str] = None
    tags: Dict[str, str] = Field(default_factory=dict)
    lat: Optional[float] = None
    lon: Optional[float] = None
    center_lat: Optional[float] = None
    center_lon: Optional[float] = None

    def coordinate(self) -> Optional[Coordinate]:
        """Direct point geometry first, then the center of a way/relation."""
        for lat, lon in ((self.lat, self.lon), (self.center_lat, self.center_lon)):
            if lat is None or lon is None:
                continue
            if -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0:
                return Coordinate(lat=lat, lon=lon)
        return None


class Facility(BaseModel):
    id: str
    name: str
    address: str = "Address not available"
    phone: Optional[str] = None
    coordinate: Coordinate
    distance_km: Optional[float] = Field(None, ge=0.0)
    category: FacilityCategory
    extras: Dict[str, List[str]] = Field(default_factory=dict)


class NearbyFacility(Facility):
    travel_minutes: int
    distance_label: str
    directions_url: str


class NearbyResponse(BaseModel):
    category: FacilityCategory
    origin: Optional[Coordinate] = None
    radius_m: int
    count: int
    facilities: List[NearbyFacility] = Field(default_factory=list)
