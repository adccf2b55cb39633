"""
NetworkX views of routing cost grids.

Used for baseline comparisons and route validation; the primary planner in
``astar_grid`` runs its own heap-based search over the raw cost array.
"""

import logging
import math
from typing import List

import networkx as nx
import numpy as np

from ...data.models import GridPoint

logger = logging.getLogger(__name__)


def build_grid_graph(costs: np.ndarray) -> nx.DiGraph:
    """
    Build a directed 4-connected graph from a step-cost array.

    Edges point into passable cells only and carry the cost of entering the
    target cell as ``weight``; impassable cells remain as isolated sinks so
    they can still serve as a start node.

    Args:
        costs: (rows, cols) array of entry costs, inf for impassable cells

    Returns:
        DiGraph whose nodes are GridPoint(x, y)
    """
    rows, cols = costs.shape
    graph = nx.DiGraph()

    for y in range(rows):
        for x in range(cols):
            graph.add_node(GridPoint(x, y), cost=float(costs[y, x]))

    for y in range(rows):
        for x in range(cols):
            for dx, dy in ((0, 1), (1, 0), (0, -1), (-1, 0)):
                nbr_x, nbr_y = x + dx, y + dy
                if not (0 <= nbr_x < cols and 0 <= nbr_y < rows):
                    continue
                cost = float(costs[nbr_y, nbr_x])
                if math.isinf(cost):
                    continue
                graph.add_edge(GridPoint(x, y), GridPoint(nbr_x, nbr_y), weight=cost)

    logger.debug(f"Grid graph built: {graph.number_of_nodes()} nodes, "
                 f"{graph.number_of_edges()} edges")
    return graph


def hop_count_path(costs: np.ndarray, start: GridPoint, end: GridPoint) -> List[GridPoint]:
    """
    Fewest-steps path over passable cells, ignoring cost gradients.

    Returns:
        Grid points from start to end inclusive, or [] if unreachable
    """
    graph = build_grid_graph(costs)
    try:
        return list(nx.shortest_path(graph, start, end))
    except (nx.NetworkXNoPath, nx.NodeNotFound):
        return []


def reference_path_cost(costs: np.ndarray, start: GridPoint, end: GridPoint) -> float:
    """
    Optimal path cost computed by Dijkstra's algorithm.

    Returns:
        Total entry cost of the cheapest route, or inf if unreachable
    """
    graph = build_grid_graph(costs)
    try:
        return float(nx.dijkstra_path_length(graph, start, end, weight='weight'))
    except (nx.NetworkXNoPath, nx.NodeNotFound):
        return math.inf
