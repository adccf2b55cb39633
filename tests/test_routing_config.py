"""
test_routing_config.py - Configuration defaults, presets and validation
"""

import pytest

from hazard_aware_routing.config import RoutingConfig


class TestDefaults:

    def test_documented_constants(self):
        config = RoutingConfig()
        assert config.grid_size_e6 == 900
        assert config.vote_half_life_seconds == 259200
        assert config.freshness_half_life_days == 7
        assert config.risk_threshold == 50
        assert config.wheelchair_mode is False
        assert config.over_threshold_penalty is None
        config.validate()

    @pytest.mark.parametrize("factory", [
        RoutingConfig.create_balanced_config,
        RoutingConfig.create_wheelchair_config,
        RoutingConfig.create_cautious_config,
        RoutingConfig.create_permissive_config,
    ])
    def test_presets_are_valid(self, factory):
        factory().validate()

    def test_preset_semantics(self):
        assert RoutingConfig.create_wheelchair_config().wheelchair_mode is True
        assert RoutingConfig.create_cautious_config().risk_threshold < RoutingConfig().risk_threshold
        assert RoutingConfig.create_permissive_config().over_threshold_penalty > 0


class TestValidation:

    @pytest.mark.parametrize("overrides", [
        {'grid_size_e6': 0},
        {'grid_size_e6': -900},
        {'grid_size_e6': 900.5},
        {'vote_half_life_seconds': 0},
        {'freshness_half_life_days': -1},
        {'evidence_limit': 0},
        {'score_scale': 0},
        {'min_severity': 0},
        {'min_severity': 4, 'max_severity': 3},
        {'risk_threshold': float('nan')},
        {'risk_cost_divisor': 0},
        {'min_step_cost': 0},
        {'over_threshold_penalty': -1},
        {'max_detour_ratio': 0.5},
    ])
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(ValueError):
            RoutingConfig(**overrides).validate()
