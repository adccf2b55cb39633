"""
Grid-based heatmap aggregation of hazard risk scores.

Hazards are binned into fixed-size cells by floor-dividing their E6
coordinates, scored, and reduced to an integer average risk per cell.
"""

import logging
import time
from dataclasses import replace
from numbers import Integral
from typing import Dict, Iterable, List, Optional, Tuple

import geojson

from ..algorithms.scoring.risk_scorer import RiskScorer
from ..config.routing_config import RoutingConfig
from ..data.coordinates import bucket_index, bucket_origin
from ..data.models import CellAccumulator, HazardSnapshot

logger = logging.getLogger(__name__)

CellKey = Tuple[int, int]


def cell_key(lat_bucket: int, lon_bucket: int) -> str:
    """Render a bucket pair as the ``"<lat>_<lon>"`` heatmap key."""
    return f"{lat_bucket}_{lon_bucket}"


def parse_cell_key(key: str) -> CellKey:
    """
    Parse a ``"<lat>_<lon>"`` heatmap key.

    Raises:
        ValueError: If the key is not two underscore-separated integers
    """
    # Negative buckets contain '-', never '_', so a single split is safe
    parts = key.split('_')
    if len(parts) != 2:
        raise ValueError(f"Invalid heatmap cell key: {key!r}")
    return int(parts[0]), int(parts[1])


class HeatmapAggregator:
    """
    Aggregates hazard risk into spatial grid cells.

    The reduction is associative and commutative, so the output does not
    depend on the order hazards are supplied in.
    """

    def __init__(self, config: Optional[RoutingConfig] = None,
                 grid_size_e6: Optional[int] = None,
                 scorer: Optional[RiskScorer] = None):
        """
        Initialize heatmap aggregator.

        Args:
            config: Routing configuration parameters
            grid_size_e6: Cell size in E6 units (overrides config)
            scorer: Risk scorer to use (defaults to one built from config)

        Raises:
            ValueError: If the grid size is not a positive integer
        """
        self.config = config or RoutingConfig()
        self.grid_size_e6 = self.config.grid_size_e6 if grid_size_e6 is None else grid_size_e6

        if isinstance(self.grid_size_e6, bool) or not isinstance(self.grid_size_e6, Integral):
            raise ValueError(f"grid_size_e6 must be an integer, got {self.grid_size_e6!r}")
        if self.grid_size_e6 <= 0:
            raise ValueError(f"grid_size_e6 must be positive, got {self.grid_size_e6}")
        self.grid_size_e6 = int(self.grid_size_e6)

        # The scorer only needs the decay constants; an explicit grid size wins
        self.scorer = scorer or RiskScorer(replace(self.config, grid_size_e6=self.grid_size_e6))

    def cell_for(self, lat_e6: int, lon_e6: int) -> CellKey:
        """Bucket pair containing a coordinate."""
        return (bucket_index(lat_e6, self.grid_size_e6),
                bucket_index(lon_e6, self.grid_size_e6))

    def accumulate(self, hazards: Iterable[HazardSnapshot],
                   now: Optional[float] = None) -> Dict[CellKey, CellAccumulator]:
        """
        Score hazards and accumulate their risk per cell.

        Args:
            hazards: Hazard snapshots
            now: Reference time shared by every hazard in the batch

        Returns:
            Dictionary mapping bucket pairs to running totals
        """
        if now is None:
            now = time.time()

        grid: Dict[CellKey, CellAccumulator] = {}
        for hazard in hazards:
            key = self.cell_for(hazard.lat_e6, hazard.lon_e6)
            risk = self.scorer.score_hazard(hazard, now=now)
            grid.setdefault(key, CellAccumulator()).add(risk)
        return grid

    def aggregate_cells(self, hazards: Iterable[HazardSnapshot],
                        now: Optional[float] = None) -> Dict[CellKey, Dict[str, int]]:
        """
        Aggregate hazards into cells keyed by bucket pairs.

        Returns:
            Dictionary mapping (lat_bucket, lon_bucket) to {'avg_risk', 'count'}
        """
        grid = self.accumulate(hazards, now=now)
        heatmap = {
            key: {'avg_risk': acc.average(), 'count': acc.count}
            for key, acc in sorted(grid.items())
        }
        logger.debug(f"Aggregated {sum(acc.count for acc in grid.values())} hazards "
                     f"into {len(heatmap)} cells of {self.grid_size_e6} E6 units")
        return heatmap

    def aggregate(self, hazards: Iterable[HazardSnapshot],
                  now: Optional[float] = None) -> Dict[str, Dict[str, int]]:
        """
        Aggregate hazards into cells keyed by ``"<lat_bucket>_<lon_bucket>"``.

        Cells without hazards are absent from the result.

        Returns:
            Dictionary mapping cell keys to {'avg_risk', 'count'}
        """
        return {
            cell_key(*key): value
            for key, value in self.aggregate_cells(hazards, now=now).items()
        }

    def to_cells(self, heatmap: Dict[str, Dict[str, int]],
                 min_risk: int = 0, max_risk: int = 100) -> List[Dict[str, float]]:
        """Translate an aggregated heatmap back to real coordinates."""
        return heatmap_to_cells(heatmap, self.grid_size_e6, min_risk, max_risk)


def aggregate_heatmap(hazards: Iterable[HazardSnapshot], grid_size_e6: int = 900,
                      now: Optional[float] = None) -> Dict[str, Dict[str, int]]:
    """
    Aggregate hazards into a risk heatmap.

    Args:
        hazards: Hazard snapshots
        grid_size_e6: Positive cell size in E6 units
        now: Reference time in unix seconds (defaults to the wall clock)

    Returns:
        Dictionary mapping ``"<lat_bucket>_<lon_bucket>"`` to {'avg_risk', 'count'}
    """
    return HeatmapAggregator(grid_size_e6=grid_size_e6).aggregate(hazards, now=now)


def heatmap_to_cells(heatmap: Dict[str, Dict[str, int]], grid_size_e6: int,
                     min_risk: int = 0, max_risk: int = 100) -> List[Dict[str, float]]:
    """
    Convert heatmap cells to their south-west corner coordinates.

    Args:
        heatmap: Output of ``aggregate_heatmap``
        grid_size_e6: Cell size the heatmap was built with
        min_risk: Inclusive lower bound on cell average risk
        max_risk: Inclusive upper bound on cell average risk

    Returns:
        List of {'lat', 'lon', 'risk', 'count'} sorted by bucket
    """
    cells = []
    for key in sorted(heatmap, key=parse_cell_key):
        value = heatmap[key]
        if not min_risk <= value['avg_risk'] <= max_risk:
            continue
        lat_bucket, lon_bucket = parse_cell_key(key)
        cells.append({
            'lat': bucket_origin(lat_bucket, grid_size_e6),
            'lon': bucket_origin(lon_bucket, grid_size_e6),
            'risk': value['avg_risk'],
            'count': value['count'],
        })
    return cells


def heatmap_to_feature_collection(heatmap: Dict[str, Dict[str, int]], grid_size_e6: int,
                                  min_risk: int = 0,
                                  max_risk: int = 100) -> geojson.FeatureCollection:
    """
    Render heatmap cells as a GeoJSON FeatureCollection of points.

    Each feature sits at the centre of its cell and carries the average risk
    and hazard count as properties.
    """
    half_cell = grid_size_e6 / 2e6
    features = []
    for cell in heatmap_to_cells(heatmap, grid_size_e6, min_risk, max_risk):
        lat = cell['lat'] + half_cell
        lon = cell['lon'] + half_cell
        features.append(geojson.Feature(
            geometry=geojson.Point((lon, lat)),  # GeoJSON order is (lon, lat)
            properties={
                'risk': cell['risk'],
                'count': cell['count'],
            }
        ))
    return geojson.FeatureCollection(features)
