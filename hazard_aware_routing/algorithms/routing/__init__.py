"""
Core routing algorithms.
"""

from .astar_grid import RiskAwareGridRouter, GridRouteDetails, astar_path
from .grid_graph import build_grid_graph, hop_count_path, reference_path_cost

__all__ = [
    'RiskAwareGridRouter',
    'GridRouteDetails',
    'astar_path',
    'build_grid_graph',
    'hop_count_path',
    'reference_path_cost'
]
