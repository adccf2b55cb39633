"""
Fixed-point (E6) coordinate utilities and grid bucketing.
"""

import math
from dataclasses import dataclass
from typing import Tuple

E6_SCALE = 1_000_000


def to_e6(degrees: float) -> int:
    """Convert decimal degrees to E6 units (rounded to the nearest unit)."""
    return int(round(degrees * E6_SCALE))


def from_e6(coord_e6: int) -> float:
    """Convert E6 units back to decimal degrees."""
    return coord_e6 / E6_SCALE


def bucket_index(coord_e6: int, grid_size_e6: int) -> int:
    """
    Floor-divide an E6 coordinate into its grid bucket.

    Args:
        coord_e6: Coordinate in E6 units (negative values allowed)
        grid_size_e6: Positive cell size in E6 units

    Returns:
        Bucket index; buckets never straddle zero because floor division is used
    """
    return int(coord_e6 // grid_size_e6)


def bucket_origin(bucket: int, grid_size_e6: int) -> float:
    """Degrees of the south/west edge of a bucket."""
    return from_e6(bucket * grid_size_e6)


@dataclass(frozen=True)
class BoundingBoxE6:
    """Inclusive geographic bounding box in E6 units."""

    min_lat_e6: int
    min_lon_e6: int
    max_lat_e6: int
    max_lon_e6: int

    @classmethod
    def from_degrees(cls, min_lat: float, min_lon: float,
                     max_lat: float, max_lon: float) -> 'BoundingBoxE6':
        """
        Build a box from decimal degrees.

        Minimums are floored and maximums ceiled so the box never shrinks
        when converted to fixed point.
        """
        return cls(
            min_lat_e6=math.floor(min_lat * E6_SCALE),
            min_lon_e6=math.floor(min_lon * E6_SCALE),
            max_lat_e6=math.ceil(max_lat * E6_SCALE),
            max_lon_e6=math.ceil(max_lon * E6_SCALE),
        )

    @classmethod
    def parse(cls, raw: str) -> 'BoundingBoxE6':
        """
        Parse a ``minLat,minLon,maxLat,maxLon`` string in decimal degrees.

        Raises:
            ValueError: If the string is malformed or the box is empty/inverted
        """
        parts = [p.strip() for p in str(raw or '').split(',')]
        if len(parts) != 4:
            raise ValueError("Invalid bbox. Expected minLat,minLon,maxLat,maxLon.")
        try:
            min_lat, min_lon, max_lat, max_lon = (float(p) for p in parts)
        except ValueError:
            raise ValueError(f"Invalid bbox values: {raw}")
        if not all(math.isfinite(v) for v in (min_lat, min_lon, max_lat, max_lon)):
            raise ValueError(f"Invalid bbox values: {raw}")
        if min_lat >= max_lat or min_lon >= max_lon:
            raise ValueError("Invalid bbox. Minimums must be smaller than maximums.")
        return cls.from_degrees(min_lat, min_lon, max_lat, max_lon)

    def contains(self, lat_e6: int, lon_e6: int) -> bool:
        return (self.min_lat_e6 <= lat_e6 <= self.max_lat_e6 and
                self.min_lon_e6 <= lon_e6 <= self.max_lon_e6)

    def bucket_range(self, grid_size_e6: int) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        """
        Inclusive bucket ranges covered by this box.

        Returns:
            ((lat_bucket_min, lat_bucket_max), (lon_bucket_min, lon_bucket_max))
        """
        return (
            (bucket_index(self.min_lat_e6, grid_size_e6), bucket_index(self.max_lat_e6, grid_size_e6)),
            (bucket_index(self.min_lon_e6, grid_size_e6), bucket_index(self.max_lon_e6, grid_size_e6)),
        )
