"""
Spatial aggregation and map-facing views for hazard-aware routing.

This module contains:
- Grid-based heatmap aggregation and GeoJSON export
- Hazard filtering, listing views and area statistics
- Routing grid construction from heatmap buckets
"""

from .heatmap_aggregator import (
    HeatmapAggregator,
    aggregate_heatmap,
    cell_key,
    parse_cell_key,
    heatmap_to_cells,
    heatmap_to_feature_collection
)
from .hazard_queries import (
    HazardFilter,
    select_hazards,
    build_hazard_view,
    filter_hazards,
    sort_hazard_views,
    summarize_hazards
)
from .cost_grid import GridFrame, build_routing_grid

__all__ = [
    'HeatmapAggregator',
    'aggregate_heatmap',
    'cell_key',
    'parse_cell_key',
    'heatmap_to_cells',
    'heatmap_to_feature_collection',
    'HazardFilter',
    'select_hazards',
    'build_hazard_view',
    'filter_hazards',
    'sort_hazard_views',
    'summarize_hazards',
    'GridFrame',
    'build_routing_grid'
]
