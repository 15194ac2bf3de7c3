"""Common utilities shared across the weather pipeline and its HTTP surface."""
from .coordinates import validate_coordinate
from .desert_regions import (
    DESERT_REGIONS,
    DesertRegion,
    find_desert_region,
    is_desert_region,
)

__all__ = [
    "validate_coordinate",
    "DESERT_REGIONS",
    "DesertRegion",
    "find_desert_region",
    "is_desert_region",
]
