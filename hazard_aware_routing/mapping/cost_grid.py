"""
Lay heatmap buckets out as a routing grid.

The router works on integer (x, y) indices; this module fixes the frame that
maps heatmap buckets inside a bounding box onto those indices. Rows follow
latitude buckets (y = 0 is the southernmost row) and columns follow
longitude buckets.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..data.coordinates import BoundingBoxE6, bucket_index
from ..data.models import GridPoint, PathCell
from .heatmap_aggregator import parse_cell_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GridFrame:
    """Origin bucket and extent of a routing grid."""

    lat_origin: int
    lon_origin: int
    rows: int
    cols: int
    grid_size_e6: int

    @classmethod
    def from_bbox(cls, bbox: BoundingBoxE6, grid_size_e6: int) -> 'GridFrame':
        """Frame covering every bucket the bounding box touches."""
        if grid_size_e6 <= 0:
            raise ValueError(f"grid_size_e6 must be positive, got {grid_size_e6}")
        (lat_min, lat_max), (lon_min, lon_max) = bbox.bucket_range(grid_size_e6)
        return cls(
            lat_origin=lat_min,
            lon_origin=lon_min,
            rows=lat_max - lat_min + 1,
            cols=lon_max - lon_min + 1,
            grid_size_e6=grid_size_e6,
        )

    def bucket_to_index(self, lat_bucket: int, lon_bucket: int) -> Optional[GridPoint]:
        """Routing index of a bucket, or None if it lies outside the frame."""
        x = lon_bucket - self.lon_origin
        y = lat_bucket - self.lat_origin
        if 0 <= x < self.cols and 0 <= y < self.rows:
            return GridPoint(x, y)
        return None

    def index_to_bucket(self, point: GridPoint) -> Tuple[int, int]:
        """(lat_bucket, lon_bucket) of a routing index."""
        return self.lat_origin + point.y, self.lon_origin + point.x

    def coordinate_to_index(self, lat_e6: int, lon_e6: int) -> Optional[GridPoint]:
        """Routing index of the cell containing an E6 coordinate."""
        return self.bucket_to_index(bucket_index(lat_e6, self.grid_size_e6),
                                    bucket_index(lon_e6, self.grid_size_e6))


def build_routing_grid(heatmap: Mapping[str, Mapping[str, int]], frame: GridFrame,
                       accessibility: Optional[Mapping[Any, Mapping[str, bool]]] = None
                       ) -> List[List[PathCell]]:
    """
    Build a PathCell grid from heatmap risk and accessibility tags.

    Args:
        heatmap: Output of ``aggregate_heatmap`` built with the frame's grid size
        frame: Routing grid frame
        accessibility: Optional mapping from (x, y) routing index to
            {'has_ramp', 'has_stairs'} flags

    Returns:
        ``frame.rows`` lists of ``frame.cols`` PathCells; cells without
        hazards have risk 0
    """
    risk: Dict[GridPoint, int] = {}
    for key, value in heatmap.items():
        point = frame.bucket_to_index(*parse_cell_key(key))
        if point is not None:
            risk[point] = value['avg_risk']

    accessibility = accessibility or {}
    grid = []
    for y in range(frame.rows):
        row = []
        for x in range(frame.cols):
            tags = accessibility.get((x, y), {})
            row.append(PathCell(
                risk=risk.get(GridPoint(x, y), 0),
                has_ramp=bool(tags.get('has_ramp', False)),
                has_stairs=bool(tags.get('has_stairs', False)),
            ))
        grid.append(row)

    logger.debug(f"Routing grid built: {frame.rows}x{frame.cols}, "
                 f"{len(risk)} cells carry hazard risk")
    return grid
