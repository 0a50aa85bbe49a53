"""Static cooling-shelter lookup.

The shelter entries are illustrative stand-ins. Each listed shelter is placed
``SHELTER_OFFSET`` degrees away from the requested point purely for display.
"""

import logging
from typing import Dict, List, Optional
from urllib.parse import quote

from pydantic import BaseModel

from silver_care_mcp.models import Coordinates

logger = logging.getLogger("silver_care.shelter")

SHELTER_OFFSET = 0.001
KAKAO_DIRECTIONS_URL = "https://map.kakao.com/link/to"


class ShelterTemplate(BaseModel):
    name: str
    distance: str
    kind: str
    direction: int  # +1 or -1, applied to both latitude and longitude offsets


class Region(BaseModel):
    name: str
    bounds: Optional[Dict[str, float]] = None
    shelters: List[ShelterTemplate]

    def contains(self, coords: Coordinates) -> bool:
        """Check if coordinates fall inside this region's bounding box"""
        if self.bounds is None:
            return True
        return (
            self.bounds["min_lat"] <= coords.latitude <= self.bounds["max_lat"]
            and self.bounds["min_lon"] <= coords.longitude <= self.bounds["max_lon"]
        )


class Shelter(BaseModel):
    name: str
    distance: str
    kind: str
    coordinates: Coordinates

    @property
    def directions_url(self) -> str:
        return f"{KAKAO_DIRECTIONS_URL}/{quote(self.name)},{self.coordinates.latitude},{self.coordinates.longitude}"


def _pair(first: str, first_dist: str, second: str, second_dist: str) -> List[ShelterTemplate]:
    return [
        ShelterTemplate(name=first, distance=first_dist, kind="Cooling shelter", direction=1),
        ShelterTemplate(name=second, distance=second_dist, kind="Public facility", direction=-1),
    ]


REGIONS = [
    Region(
        name="Seoul",
        bounds={"min_lat": 37.4, "max_lat": 37.7, "min_lon": 126.9, "max_lon": 127.1},
        shelters=_pair("Jongno 3-ga Senior Center", "120m", "Tapgol Park Management Office", "350m"),
    ),
    Region(
        name="Busan",
        bounds={"min_lat": 35.0, "max_lat": 35.3, "min_lon": 129.0, "max_lon": 129.2},
        shelters=_pair("Haeundae Community Center", "200m", "Gwangalli Beach Management Office", "450m"),
    ),
    Region(
        name="Jeju",
        bounds={"min_lat": 33.4, "max_lat": 33.6, "min_lon": 126.4, "max_lon": 126.6},
        shelters=_pair("Jeju City Hall", "180m", "Jeju Provincial Office", "320m"),
    ),
]

# Used when the point is outside every known region
DEFAULT_REGION = Region(
    name="Other",
    shelters=_pair("Nearest Senior Center", "150m", "Local Community Center", "280m"),
)


def _clamp(value: float, limit: float) -> float:
    return max(-limit, min(limit, value))


def find_region(coords: Coordinates) -> Region:
    for region in REGIONS:
        if region.contains(coords):
            return region
    return DEFAULT_REGION


def find_shelters(coords: Coordinates) -> List[Shelter]:
    """Return the fixed shelter list for the region containing ``coords``"""
    region = find_region(coords)
    logger.info(f"Using shelter region {region.name} for ({coords.latitude}, {coords.longitude})")
    return [
        Shelter(
            name=template.name,
            distance=template.distance,
            kind=template.kind,
            coordinates=Coordinates(
                latitude=_clamp(coords.latitude + template.direction * SHELTER_OFFSET, 90.0),
                longitude=_clamp(coords.longitude + template.direction * SHELTER_OFFSET, 180.0),
            ),
        )
        for template in region.shelters
    ]
