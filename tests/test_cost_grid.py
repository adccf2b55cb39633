"""
test_cost_grid.py - Heatmap buckets laid out as routing grids
"""

import pytest

from hazard_aware_routing import (
    BoundingBoxE6,
    GridFrame,
    HeatmapAggregator,
    RiskAwareGridRouter,
    RoutingConfig,
    build_routing_grid
)
from hazard_aware_routing.data.models import GridPoint


@pytest.fixture
def frame():
    # 3 latitude buckets (rows) x 4 longitude buckets (cols) starting at (10, 20)
    return GridFrame(lat_origin=10, lon_origin=20, rows=3, cols=4, grid_size_e6=900)


class TestGridFrame:

    def test_from_bbox(self):
        bbox = BoundingBoxE6(9000, 18000, 11_699, 21_599)
        assert GridFrame.from_bbox(bbox, 900) == GridFrame(10, 20, 3, 4, 900)

    def test_from_bbox_rejects_bad_grid(self):
        with pytest.raises(ValueError):
            GridFrame.from_bbox(BoundingBoxE6(0, 0, 10, 10), 0)

    def test_bucket_index_translation(self, frame):
        assert frame.bucket_to_index(10, 20) == GridPoint(0, 0)
        assert frame.bucket_to_index(12, 23) == GridPoint(3, 2)
        assert frame.bucket_to_index(13, 20) is None
        assert frame.bucket_to_index(10, 19) is None
        assert frame.index_to_bucket(GridPoint(3, 2)) == (12, 23)

    def test_coordinate_to_index(self, frame):
        assert frame.coordinate_to_index(9000, 18000) == GridPoint(0, 0)
        assert frame.coordinate_to_index(10_800, 20_700) == GridPoint(3, 2)
        assert frame.coordinate_to_index(0, 0) is None


class TestBuildRoutingGrid:

    def test_places_heatmap_risk(self, frame):
        heatmap = {"11_21": {'avg_risk': 80, 'count': 2},
                   "99_99": {'avg_risk': 90, 'count': 1}}
        grid = build_routing_grid(heatmap, frame)
        assert len(grid) == 3 and all(len(row) == 4 for row in grid)
        assert grid[1][1].risk == 80
        assert sum(cell.risk for row in grid for cell in row) == 80

    def test_accessibility_tags(self, frame):
        grid = build_routing_grid({}, frame, accessibility={
            (1, 0): {'has_stairs': True},
            GridPoint(2, 2): {'has_ramp': True},
        })
        assert grid[0][1].has_stairs is True
        assert grid[2][2].has_ramp is True
        assert grid[0][0].has_ramp is False


class TestEndToEnd:
    """Hazard snapshots -> heatmap -> routing grid -> route."""

    def test_route_avoids_hazard_cell(self, make_hazard, make_votes, now):
        config = RoutingConfig()
        # Heavily confirmed hazard in bucket (0, 1)
        hazards = [make_hazard(lat_e6=100, lon_e6=1000, votes=make_votes(20))]
        heatmap = HeatmapAggregator(config).aggregate(hazards, now=now)
        assert heatmap["0_1"]['avg_risk'] > config.risk_threshold

        frame = GridFrame.from_bbox(BoundingBoxE6(0, 0, 1799, 2699), config.grid_size_e6)
        grid = build_routing_grid(heatmap, frame)

        router = RiskAwareGridRouter(config)
        start = frame.coordinate_to_index(100, 100)
        end = frame.coordinate_to_index(100, 2000)
        route = router.find_route(grid, start, end)

        assert route.found
        assert GridPoint(1, 0) not in route.nodes
        assert route.nodes[0] == start and route.nodes[-1] == end
        assert router.validate_route(grid, route)
