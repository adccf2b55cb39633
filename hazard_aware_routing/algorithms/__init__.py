"""
Risk scoring and routing algorithms.

This module contains:
- Time-decayed, trust-weighted hazard risk scoring
- Risk-aware A* routing over accessibility grids
- NetworkX baselines for route comparison and validation
"""

from .scoring.risk_scorer import RiskScorer, calculate_risk_score
from .routing.astar_grid import RiskAwareGridRouter, GridRouteDetails, astar_path

__all__ = [
    'RiskScorer',
    'calculate_risk_score',
    'RiskAwareGridRouter',
    'GridRouteDetails',
    'astar_path'
]
