"""
Static desert region table and point-in-region lookup.

Single source of truth for the eight desert bounding boxes used by the
synthetic climate model and condition text. No external dependencies.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class DesertRegion:
    name: str
    lat_min: float
    lat_max: float
    lon_min: float
    lon_max: float

    def contains(self, lat: float, lon: float) -> bool:
        """Boundaries are inclusive."""
        return self.lat_min <= lat <= self.lat_max and self.lon_min <= lon <= self.lon_max


DESERT_REGIONS: tuple[DesertRegion, ...] = (
    DesertRegion("Sahara", 15, 30, -20, 50),
    DesertRegion("Arabian", 15, 30, 35, 60),
    DesertRegion("Gobi", 35, 50, 85, 120),
    DesertRegion("Australian", -30, -20, 120, 150),
    DesertRegion("North American", 25, 40, -120, -100),
    DesertRegion("Kalahari", -25, -15, 15, 25),
    DesertRegion("Thar", 20, 30, 65, 75),
    DesertRegion("Syrian", 30, 35, 35, 45),
)


def find_desert_region(lat: float, lon: float) -> Optional[DesertRegion]:
    """Return the first region containing (lat, lon), or None. Regions may overlap."""
    for region in DESERT_REGIONS:
        if region.contains(lat, lon):
            return region
    return None


def is_desert_region(lat: float, lon: float) -> bool:
    return find_desert_region(lat, lon) is not None
