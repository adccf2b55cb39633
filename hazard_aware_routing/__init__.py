"""
Hazard-Aware Routing Engine

Risk evaluation and routing for crowdsourced hazard reports: time-decayed,
trust-weighted risk scores, grid heatmaps and accessibility-aware routes that
steer around high-risk terrain.

## Quick Start

```python
from hazard_aware_routing import (
    load_hazard_snapshots, aggregate_heatmap, astar_path, PathCell
)

hazards = load_hazard_snapshots(rows_from_storage)
heatmap = aggregate_heatmap(hazards)          # {"<lat>_<lon>": {"avg_risk", "count"}}

grid = [[PathCell(risk=0), PathCell(risk=80)],
        [PathCell(risk=0), PathCell(risk=0)]]
path = astar_path(grid, (0, 0), (1, 0), risk_threshold=50)
```

## Main Components

- **RiskScorer**: bounded 0-100 risk per hazard
- **HeatmapAggregator**: per-cell average risk over E6 grid buckets
- **RiskAwareGridRouter**: A* over risk/accessibility grids
- **RoutingConfig**: Configuration management

## Architecture

- `algorithms/`: Risk scoring and grid routing
- `mapping/`: Heatmaps, hazard queries and routing grid construction
- `data/`: Hazard types, E6 coordinates and record validation
- `config/`: Configuration management
"""

from .config import RoutingConfig
from .data import (
    Vote,
    HazardSnapshot,
    PathCell,
    GridPoint,
    BoundingBoxE6,
    load_hazard_snapshots
)
from .algorithms import (
    RiskScorer,
    calculate_risk_score,
    RiskAwareGridRouter,
    GridRouteDetails,
    astar_path
)
from .mapping import (
    HeatmapAggregator,
    aggregate_heatmap,
    heatmap_to_cells,
    heatmap_to_feature_collection,
    HazardFilter,
    filter_hazards,
    summarize_hazards,
    GridFrame,
    build_routing_grid
)

# Version information
__version__ = "1.0.0"

# Public API
__all__ = [
    # Configuration
    'RoutingConfig',

    # Data types
    'Vote',
    'HazardSnapshot',
    'PathCell',
    'GridPoint',
    'BoundingBoxE6',
    'load_hazard_snapshots',

    # Core algorithms
    'RiskScorer',
    'calculate_risk_score',
    'RiskAwareGridRouter',
    'GridRouteDetails',
    'astar_path',

    # Heatmaps and queries
    'HeatmapAggregator',
    'aggregate_heatmap',
    'heatmap_to_cells',
    'heatmap_to_feature_collection',
    'HazardFilter',
    'filter_hazards',
    'summarize_hazards',
    'GridFrame',
    'build_routing_grid',

    # Metadata
    '__version__'
]
