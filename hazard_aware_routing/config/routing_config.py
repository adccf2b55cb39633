"""
Configuration management for hazard risk scoring, heatmaps and grid routing.
"""

import math
from dataclasses import dataclass
from numbers import Integral
from typing import Optional


@dataclass
class RoutingConfig:
    """Configuration parameters for hazard-aware scoring and routing."""

    # Spatial Binning
    grid_size_e6: int = 900  # E6 units per heatmap cell (~100m at mid-latitudes)

    # Risk Scoring
    vote_half_life_seconds: float = 72 * 3600.0  # individual vote staleness
    freshness_half_life_days: float = 7.0  # hazard-level inactivity decay
    evidence_limit: float = 5.0  # log2 evidence clamped to [-limit, limit]
    score_scale: float = 4.0  # |severity * evidence| -> 0-100 score
    min_severity: int = 1
    max_severity: int = 5
    high_risk_score: int = 70  # hazards at or above count as high risk in stats

    # Grid Routing
    risk_threshold: float = 50.0  # cells above this risk are impassable
    wheelchair_mode: bool = False
    ramp_bonus: float = 0.5  # subtracted from step cost in wheelchair mode
    stairs_penalty: float = 10.0  # added to step cost in wheelchair mode
    risk_cost_divisor: float = 20.0  # step cost = 1 + risk / divisor
    min_step_cost: float = 0.1
    over_threshold_penalty: Optional[float] = None  # soft mode when set

    # Route Validation
    max_detour_ratio: float = 3.0  # vs. hop-count baseline over passable cells

    def validate(self) -> None:
        """Validate configuration parameters."""
        if isinstance(self.grid_size_e6, bool) or not isinstance(self.grid_size_e6, Integral):
            raise ValueError("grid_size_e6 must be an integer")
        if self.grid_size_e6 <= 0:
            raise ValueError("grid_size_e6 must be positive")
        if not self.vote_half_life_seconds > 0:
            raise ValueError("vote_half_life_seconds must be positive")
        if not self.freshness_half_life_days > 0:
            raise ValueError("freshness_half_life_days must be positive")
        if not self.evidence_limit > 0:
            raise ValueError("evidence_limit must be positive")
        if not self.score_scale > 0:
            raise ValueError("score_scale must be positive")
        if not 1 <= self.min_severity <= self.max_severity:
            raise ValueError("severity bounds must satisfy 1 <= min_severity <= max_severity")
        if math.isnan(self.risk_threshold):
            raise ValueError("risk_threshold must be a number")
        if not self.risk_cost_divisor > 0:
            raise ValueError("risk_cost_divisor must be positive")
        if not self.min_step_cost > 0:
            raise ValueError("min_step_cost must be positive")
        if self.over_threshold_penalty is not None and not self.over_threshold_penalty >= 0:
            raise ValueError("over_threshold_penalty must be non-negative")
        if self.max_detour_ratio < 1.0:
            raise ValueError("max_detour_ratio must be >= 1.0")

    @classmethod
    def create_balanced_config(cls) -> 'RoutingConfig':
        """Create balanced configuration (default)."""
        return cls()

    @classmethod
    def create_wheelchair_config(cls) -> 'RoutingConfig':
        """Create configuration that prefers ramps and avoids stairs."""
        return cls(wheelchair_mode=True)

    @classmethod
    def create_cautious_config(cls) -> 'RoutingConfig':
        """
        Create configuration that prioritizes safety over route length.

        Excludes moderately risky cells and tolerates long detours around them.
        """
        return cls(
            risk_threshold=30.0,      # Block anything above moderate risk
            max_detour_ratio=5.0      # Accept long safe detours
        )

    @classmethod
    def create_permissive_config(cls) -> 'RoutingConfig':
        """
        Create configuration that keeps high-risk cells passable at a penalty.

        Useful when any route is better than none, e.g. evacuation guidance.
        """
        return cls(
            risk_threshold=50.0,
            over_threshold_penalty=100.0,  # Strongly discouraged, still passable
            max_detour_ratio=2.0
        )
