"""
test_heatmap_aggregator.py - Grid bucketing and per-cell risk averages
"""

import random

import numpy as np
import pytest

from hazard_aware_routing.config import RoutingConfig
from hazard_aware_routing.mapping import (
    HeatmapAggregator,
    aggregate_heatmap,
    cell_key,
    parse_cell_key,
    heatmap_to_cells,
    heatmap_to_feature_collection
)

from .conftest import HOUR


class TestBucketing:
    """Floor-division bucketing of E6 coordinates."""

    @pytest.mark.parametrize("coord_e6, bucket", [
        (0, 0), (899, 0), (900, 1), (1799, 1),
        (-1, -1), (-900, -1), (-901, -2),
    ])
    def test_floor_division(self, coord_e6, bucket):
        aggregator = HeatmapAggregator()
        assert aggregator.cell_for(coord_e6, coord_e6) == (bucket, bucket)

    def test_negative_buckets_in_keys(self, make_hazard, now):
        heatmap = aggregate_heatmap([make_hazard(lat_e6=-1, lon_e6=-901)], now=now)
        assert list(heatmap) == ["-1_-2"]

    def test_custom_grid_size(self, make_hazard, now):
        heatmap = aggregate_heatmap([make_hazard(lat_e6=41_000_000, lon_e6=29_000_000)],
                                    grid_size_e6=90_000, now=now)
        assert list(heatmap) == ["455_322"]

    def test_cell_key_round_trip_with_negatives(self):
        assert cell_key(-3, 12) == "-3_12"
        assert parse_cell_key("-3_12") == (-3, 12)

    @pytest.mark.parametrize("key", ["", "1", "1_2_3", "a_b"])
    def test_parse_rejects_malformed_keys(self, key):
        with pytest.raises(ValueError):
            parse_cell_key(key)


class TestAggregation:
    """Accumulate scores per cell and reduce to integer averages."""

    def test_empty_input(self, now):
        assert aggregate_heatmap([], now=now) == {}

    def test_single_hazard(self, make_hazard, now):
        heatmap = aggregate_heatmap([make_hazard(lat_e6=1000, lon_e6=2000)], now=now)
        assert heatmap == {"1_2": {'avg_risk': 20, 'count': 1}}

    def test_average_within_cell(self, make_hazard, now):
        hazards = [
            make_hazard(lat_e6=100, lon_e6=100),             # 20
            make_hazard(lat_e6=200, lon_e6=200, votes=()),   # 0
        ]
        assert aggregate_heatmap(hazards, now=now) == {"0_0": {'avg_risk': 10, 'count': 2}}

    def test_average_rounds_half_up(self, make_hazard, make_votes, now):
        hazards = [
            make_hazard(lat_e6=100, lon_e6=100),  # 20
            # 3 * log2(1.5) * 4 = 7.02 -> 7, no freshness multiplier
            make_hazard(lat_e6=100, lon_e6=100, severity=3,
                        votes=make_votes(1, age=72 * HOUR), last_activity=None),
        ]
        assert aggregate_heatmap(hazards, now=now)["0_0"] == {'avg_risk': 14, 'count': 2}

    def test_separate_cells(self, make_hazard, now):
        hazards = [make_hazard(lat_e6=0, lon_e6=0), make_hazard(lat_e6=900, lon_e6=0)]
        heatmap = aggregate_heatmap(hazards, now=now)
        assert set(heatmap) == {"0_0", "1_0"}
        assert all(cell['count'] == 1 for cell in heatmap.values())

    def test_order_independent(self, make_hazard, make_votes, now):
        rng = random.Random(42)
        hazards = [
            make_hazard(lat_e6=rng.randint(-5000, 5000), lon_e6=rng.randint(-5000, 5000),
                        severity=rng.randint(1, 5),
                        votes=make_votes(rng.randint(0, 6), value=rng.choice([1, -1]),
                                         age=rng.uniform(0, 200 * HOUR)),
                        last_activity=now - rng.uniform(0, 300 * HOUR))
            for _ in range(60)
        ]
        expected = aggregate_heatmap(hazards, now=now)
        for _ in range(5):
            shuffled = hazards[:]
            rng.shuffle(shuffled)
            assert aggregate_heatmap(shuffled, now=now) == expected

    def test_batching_does_not_change_totals(self, make_hazard, now):
        hazards = [make_hazard(lat_e6=i * 300, lon_e6=0) for i in range(9)]
        aggregator = HeatmapAggregator()
        whole = aggregator.accumulate(hazards, now=now)
        first = aggregator.accumulate(hazards[:4], now=now)
        second = aggregator.accumulate(hazards[4:], now=now)
        for key, acc in whole.items():
            parts = [p[key] for p in (first, second) if key in p]
            assert acc.total_risk == sum(p.total_risk for p in parts)
            assert acc.count == sum(p.count for p in parts)

    def test_keyed_by_bucket_pairs(self, make_hazard, now):
        cells = HeatmapAggregator().aggregate_cells([make_hazard(lat_e6=-1, lon_e6=900)], now=now)
        assert cells == {(-1, 1): {'avg_risk': 20, 'count': 1}}


class TestConfiguration:
    """Grid size must be a positive integer."""

    @pytest.mark.parametrize("grid_size", [0, -900, 900.0, True])
    def test_invalid_grid_size(self, grid_size):
        with pytest.raises(ValueError):
            HeatmapAggregator(grid_size_e6=grid_size)

    def test_invalid_config_grid_size(self):
        with pytest.raises(ValueError):
            HeatmapAggregator(RoutingConfig(grid_size_e6=0))

    def test_numpy_integer_grid_size(self, make_hazard, now):
        heatmap = aggregate_heatmap([make_hazard(lat_e6=1800, lon_e6=-1)],
                                    grid_size_e6=np.int64(900), now=now)
        assert list(heatmap) == ["2_-1"]
        RoutingConfig(grid_size_e6=np.int64(900)).validate()

    def test_explicit_grid_size_overrides_config(self, make_hazard, now):
        aggregator = HeatmapAggregator(RoutingConfig(grid_size_e6=0), grid_size_e6=450)
        assert aggregator.grid_size_e6 == 450
        assert list(aggregator.aggregate([make_hazard(lat_e6=900, lon_e6=0)], now=now)) == ["2_0"]

    def test_function_rejects_bad_grid(self, make_hazard, now):
        with pytest.raises(ValueError):
            aggregate_heatmap([make_hazard()], grid_size_e6=0, now=now)


class TestCellExport:
    """Translate buckets back to coordinates."""

    def test_cells_carry_corner_coordinates(self):
        heatmap = {"1_2": {'avg_risk': 40, 'count': 3}, "-1_0": {'avg_risk': 5, 'count': 1}}
        cells = heatmap_to_cells(heatmap, 900)
        assert cells[0] == {'lat': pytest.approx(-0.0009), 'lon': 0.0, 'risk': 5, 'count': 1}
        assert cells[1] == {'lat': pytest.approx(0.0009), 'lon': pytest.approx(0.0018),
                            'risk': 40, 'count': 3}

    def test_cells_filtered_by_risk(self):
        heatmap = {"0_0": {'avg_risk': 10, 'count': 1},
                   "0_1": {'avg_risk': 50, 'count': 1},
                   "0_2": {'avg_risk': 90, 'count': 1}}
        cells = heatmap_to_cells(heatmap, 900, min_risk=50, max_risk=90)
        assert [c['risk'] for c in cells] == [50, 90]

    def test_aggregator_to_cells_uses_its_grid(self, make_hazard, now):
        aggregator = HeatmapAggregator(grid_size_e6=1000)
        heatmap = aggregator.aggregate([make_hazard(lat_e6=2500, lon_e6=1500)], now=now)
        cells = aggregator.to_cells(heatmap)
        assert cells[0]['lat'] == pytest.approx(0.002)
        assert cells[0]['lon'] == pytest.approx(0.001)

    def test_feature_collection(self):
        heatmap = {"1_2": {'avg_risk': 40, 'count': 3}, "0_0": {'avg_risk': 0, 'count': 1}}
        collection = heatmap_to_feature_collection(heatmap, 1000, min_risk=1)
        assert collection['type'] == 'FeatureCollection'
        assert len(collection['features']) == 1

        feature = collection['features'][0]
        lon, lat = feature['geometry']['coordinates']
        assert lat == pytest.approx(0.0015)
        assert lon == pytest.approx(0.0025)
        assert feature['properties'] == {'risk': 40, 'count': 3}
