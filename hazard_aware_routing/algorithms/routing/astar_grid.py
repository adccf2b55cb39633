"""
Risk-aware A* routing over a rectangular hazard cost grid.
"""

import heapq
import logging
import math
import time
from collections.abc import Mapping
from dataclasses import replace
from numbers import Real
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from ...config.routing_config import RoutingConfig
from ...data.models import GridPoint, PathCell
from .grid_graph import hop_count_path

logger = logging.getLogger(__name__)

# 4-connected moves, no diagonals
NEIGHBOR_OFFSETS = ((0, 1), (1, 0), (0, -1), (-1, 0))

NO_PARENT = -1


def _as_path_cell(cell: Any) -> PathCell:
    """
    Accept PathCell objects or mappings with risk and ramp/stairs flags.

    Flags may use snake_case (``has_ramp``) or camelCase (``hasRamp``) keys.
    """
    if isinstance(cell, PathCell):
        return cell
    if isinstance(cell, Mapping):
        risk = cell.get('risk')
        return PathCell(
            risk=0.0 if risk is None else risk,
            has_ramp=bool(cell.get('has_ramp', cell.get('hasRamp', False))),
            has_stairs=bool(cell.get('has_stairs', cell.get('hasStairs', False))),
        )
    raise TypeError(f"Unsupported grid cell type: {type(cell).__name__}")


def _as_point(point: Any) -> Optional[GridPoint]:
    """Coerce (x, y) tuples, GridPoints or {'x', 'y'} mappings; None if malformed."""
    try:
        if isinstance(point, Mapping):
            x, y = point['x'], point['y']
        else:
            x, y = point
    except (KeyError, TypeError, ValueError):
        return None
    if not all(isinstance(v, (int, np.integer)) and not isinstance(v, bool) for v in (x, y)):
        return None
    return GridPoint(int(x), int(y))


class GridRouteDetails:
    """Container for a planned grid route and its metrics."""

    def __init__(self, nodes: List[GridPoint], step_costs: Optional[np.ndarray] = None,
                 risks: Optional[List[float]] = None, algorithm: str = "risk_astar"):
        """
        Initialize route details.

        Args:
            nodes: Grid points in route order (empty when no route exists)
            step_costs: Per-cell entry costs the route was planned with
            risks: Risk of each cell along the route
            algorithm: Algorithm name used
        """
        self.nodes = nodes
        self.algorithm = algorithm
        self.risks = risks or []
        self.calculation_time: Optional[float] = None

        # The start cell is occupied, not entered, so it carries no cost
        self.total_cost = 0.0
        if step_costs is not None:
            for point in nodes[1:]:
                self.total_cost += float(step_costs[point.y, point.x])

    @property
    def found(self) -> bool:
        return bool(self.nodes)

    @property
    def step_count(self) -> int:
        return max(0, len(self.nodes) - 1)

    def get_summary(self) -> Dict[str, Any]:
        """Get summary statistics for the route."""
        return {
            'algorithm': self.algorithm,
            'found': self.found,
            'node_count': len(self.nodes),
            'step_count': self.step_count,
            'total_cost': round(self.total_cost, 4),
            'average_risk': round(float(np.mean(self.risks)), 4) if self.risks else 0,
            'max_risk': round(float(np.max(self.risks)), 4) if self.risks else 0,
            'calculation_time_ms': round(self.calculation_time * 1000, 1) if self.calculation_time else None
        }


class RiskAwareGridRouter:
    """
    A* search over a grid of PathCells with hazard-risk and accessibility costs.

    Entering a cell costs ``1 + risk / 20``; in wheelchair mode ramps lower
    that by 0.5 and stairs raise it by 10, and the result never drops below
    0.1. Cells whose risk exceeds the threshold are impassable unless an
    explicit over-threshold penalty is configured.

    Malformed grids and out-of-bounds endpoints are treated as "no route" and
    produce an empty path rather than an exception.
    """

    def __init__(self, config: Optional[RoutingConfig] = None):
        """
        Initialize grid router.

        Args:
            config: Routing configuration parameters
        """
        self.config = config or RoutingConfig()
        self.config.validate()

    def with_options(self, **options) -> 'RiskAwareGridRouter':
        """Router sharing this configuration with some fields overridden."""
        return RiskAwareGridRouter(replace(self.config, **options))

    def cell_cost(self, cell: PathCell) -> float:
        """
        Cost of stepping into a cell.

        Returns:
            Positive cost, or infinity when the cell is impassable
        """
        risk = cell.risk
        if not isinstance(risk, Real) or not math.isfinite(risk):
            return math.inf

        cost = 1.0 + risk / self.config.risk_cost_divisor
        if risk > self.config.risk_threshold:
            if self.config.over_threshold_penalty is None:
                return math.inf
            cost += self.config.over_threshold_penalty

        if self.config.wheelchair_mode:
            if cell.has_ramp:
                cost -= self.config.ramp_bonus
            if cell.has_stairs:
                cost += self.config.stairs_penalty

        return max(self.config.min_step_cost, cost)

    def step_costs(self, grid: Sequence[Sequence[Any]]) -> Optional[np.ndarray]:
        """
        Evaluate the entry cost of every cell.

        Args:
            grid: Rows of cells, ``grid[y][x]``

        Returns:
            (rows, cols) float array with inf for impassable cells, or None if
            the grid is empty or not rectangular
        """
        try:
            rows = len(grid)
            if rows == 0:
                logger.warning("Routing grid is empty")
                return None

            cols = len(grid[0])
            if cols == 0 or any(len(row) != cols for row in grid):
                logger.warning(f"Routing grid is not rectangular ({rows} rows)")
                return None

            costs = np.empty((rows, cols), dtype=float)
            for y, row in enumerate(grid):
                for x, cell in enumerate(row):
                    costs[y, x] = self.cell_cost(_as_path_cell(cell))
        except TypeError as e:
            logger.warning(f"Malformed routing grid: {e}")
            return None
        return costs

    def find_path(self, grid: Sequence[Sequence[Any]], start: Any, end: Any) -> List[GridPoint]:
        """
        Find the cheapest 4-connected path from start to end.

        Args:
            grid: Rows of PathCells (or equivalent mappings), ``grid[y][x]``
            start: Start index as (x, y)
            end: End index as (x, y)

        Returns:
            Grid points from start to end inclusive, or [] if there is no route
        """
        costs = self.step_costs(grid)
        if costs is None:
            return []
        return self._search(costs, start, end)

    def find_route(self, grid: Sequence[Sequence[Any]], start: Any, end: Any) -> GridRouteDetails:
        """
        Find a route and collect its metrics.

        Args:
            grid: Rows of PathCells (or equivalent mappings), ``grid[y][x]``
            start: Start index as (x, y)
            end: End index as (x, y)

        Returns:
            GridRouteDetails; ``found`` is False when no safe route exists
        """
        start_time = time.time()

        costs = self.step_costs(grid)
        path = [] if costs is None else self._search(costs, start, end)

        risks = [_as_path_cell(grid[p.y][p.x]).risk for p in path]
        route = GridRouteDetails(path, costs, risks, "risk_astar")
        route.calculation_time = time.time() - start_time

        if route.found:
            logger.info(f"Route found: {len(path)} cells, "
                        f"cost {route.total_cost:.2f}, "
                        f"calculated in {route.calculation_time*1000:.1f}ms")
        else:
            logger.info(f"No safe route from {start} to {end}")

        return route

    def find_route_shortest(self, grid: Sequence[Sequence[Any]], start: Any, end: Any) -> GridRouteDetails:
        """
        Find the fewest-steps route over passable cells (baseline comparison).

        Risk only matters through the threshold; cost gradients are ignored.
        """
        start_time = time.time()

        costs = self.step_costs(grid)
        start_point, end_point = _as_point(start), _as_point(end)
        path: List[GridPoint] = []
        if costs is not None and self._in_bounds(costs, start_point) and self._in_bounds(costs, end_point):
            path = hop_count_path(costs, start_point, end_point)

        risks = [_as_path_cell(grid[p.y][p.x]).risk for p in path]
        route = GridRouteDetails(path, costs, risks, "shortest_path")
        route.calculation_time = time.time() - start_time
        return route

    def find_multiple_routes(self, grid: Sequence[Sequence[Any]], start: Any, end: Any,
                             algorithms: Optional[List[str]] = None) -> Dict[str, GridRouteDetails]:
        """
        Find routes with several algorithms for comparison.

        Args:
            grid: Rows of PathCells
            start: Start index as (x, y)
            end: End index as (x, y)
            algorithms: Algorithm names ('risk_astar', 'shortest_path')

        Returns:
            Dictionary mapping algorithm names to GridRouteDetails
        """
        if algorithms is None:
            algorithms = ['risk_astar', 'shortest_path']

        routes = {}
        for algorithm in algorithms:
            if algorithm == 'risk_astar':
                routes[algorithm] = self.find_route(grid, start, end)
            elif algorithm == 'shortest_path':
                routes[algorithm] = self.find_route_shortest(grid, start, end)
            else:
                logger.warning(f"Unknown algorithm: {algorithm}")
        return routes

    def validate_route(self, grid: Sequence[Sequence[Any]], route: GridRouteDetails) -> bool:
        """
        Validate that a route is feasible and meets constraints.

        Checks bounds, 4-connected continuity, passability of every entered
        cell and the detour ratio against the hop-count baseline.

        Args:
            grid: Grid the route was planned on
            route: Route to validate

        Returns:
            True if route is valid
        """
        if not route.nodes:
            return False

        costs = self.step_costs(grid)
        if costs is None:
            return False

        for point in route.nodes:
            if not self._in_bounds(costs, point):
                logger.error(f"Route leaves the grid at {point}")
                return False

        for prev, curr in zip(route.nodes, route.nodes[1:]):
            if abs(prev.x - curr.x) + abs(prev.y - curr.y) != 1:
                logger.error(f"Discontinuous path at {prev} -> {curr}")
                return False
            if math.isinf(costs[curr.y, curr.x]):
                logger.error(f"Route enters impassable cell {curr}")
                return False

        baseline = hop_count_path(costs, route.nodes[0], route.nodes[-1])
        baseline_steps = len(baseline) - 1
        if baseline_steps > 0:
            detour_ratio = route.step_count / baseline_steps
            if detour_ratio > self.config.max_detour_ratio:
                logger.warning(f"Route exceeds max detour ratio: {detour_ratio:.2f}")
                return False

        return True

    @staticmethod
    def _in_bounds(costs: np.ndarray, point: Optional[GridPoint]) -> bool:
        if point is None:
            return False
        rows, cols = costs.shape
        return 0 <= point.x < cols and 0 <= point.y < rows

    def _search(self, costs: np.ndarray, start: Any, end: Any) -> List[GridPoint]:
        """A* over a precomputed step-cost array."""
        start, end = _as_point(start), _as_point(end)
        if not self._in_bounds(costs, start) or not self._in_bounds(costs, end):
            logger.debug(f"Route endpoints {start} -> {end} outside grid {costs.shape}")
            return []
        if start == end:
            return [start]

        rows, cols = costs.shape
        passable = costs[np.isfinite(costs)]
        if passable.size == 0:
            return []

        # Manhattan distance stays admissible only if no step is cheaper than
        # the unit it assumes; ramps can make steps cheaper than 1
        h_scale = min(1.0, float(passable.min()))

        def heuristic(x: int, y: int) -> float:
            return (abs(x - end.x) + abs(y - end.y)) * h_scale

        g_score = np.full((rows, cols), np.inf)
        visited = np.zeros((rows, cols), dtype=bool)

        # Node arena: parallel lists, parents are indices into them
        node_x: List[int] = []
        node_y: List[int] = []
        node_g: List[float] = []
        node_parent: List[int] = []
        open_heap: list = []

        def push(x: int, y: int, g: float, parent: int) -> None:
            index = len(node_x)
            node_x.append(x)
            node_y.append(y)
            node_g.append(g)
            node_parent.append(parent)
            h = heuristic(x, y)
            # Ties on f prefer nodes closer to the goal, then insertion order
            heapq.heappush(open_heap, (g + h, h, index))

        g_score[start.y, start.x] = 0.0
        push(start.x, start.y, 0.0, NO_PARENT)
        expanded = 0

        while open_heap:
            _, _, index = heapq.heappop(open_heap)
            x, y = node_x[index], node_y[index]
            if visited[y, x]:
                continue

            if x == end.x and y == end.y:
                logger.debug(f"A* expanded {expanded} cells, path cost {node_g[index]:.3f}")
                return self._reconstruct(index, node_x, node_y, node_parent)

            visited[y, x] = True
            expanded += 1
            g = node_g[index]

            for dx, dy in NEIGHBOR_OFFSETS:
                nbr_x, nbr_y = x + dx, y + dy
                if not (0 <= nbr_x < cols and 0 <= nbr_y < rows):
                    continue
                if visited[nbr_y, nbr_x]:
                    continue
                cost = float(costs[nbr_y, nbr_x])
                if math.isinf(cost):
                    continue
                candidate = g + cost
                if candidate < g_score[nbr_y, nbr_x]:
                    g_score[nbr_y, nbr_x] = candidate
                    push(nbr_x, nbr_y, candidate, index)

        logger.debug(f"A* exhausted open set after expanding {expanded} cells")
        return []

    @staticmethod
    def _reconstruct(index: int, node_x: List[int], node_y: List[int],
                     node_parent: List[int]) -> List[GridPoint]:
        path = []
        while index != NO_PARENT:
            path.append(GridPoint(node_x[index], node_y[index]))
            index = node_parent[index]
        path.reverse()
        return path


def astar_path(grid: Sequence[Sequence[Any]], start: Any, end: Any,
               risk_threshold: float = 50, wheelchair_mode: bool = False,
               over_threshold_penalty: Optional[float] = None) -> List[GridPoint]:
    """
    Plan a risk-avoiding, accessibility-aware route on a grid.

    Args:
        grid: Rows of PathCells (or {'risk', 'has_ramp', 'has_stairs'} mappings)
        start: Start index as (x, y)
        end: End index as (x, y)
        risk_threshold: Cells with risk above this are impassable
        wheelchair_mode: Prefer ramps and heavily penalize stairs
        over_threshold_penalty: If set, over-threshold cells stay passable at
            this extra cost instead of being excluded

    Returns:
        Ordered grid points from start to end inclusive, or [] if no safe route
    """
    config = RoutingConfig(
        risk_threshold=risk_threshold,
        wheelchair_mode=wheelchair_mode,
        over_threshold_penalty=over_threshold_penalty,
    )
    return RiskAwareGridRouter(config).find_path(grid, start, end)
