"""
Hazard risk scoring.
"""

from .risk_scorer import RiskScorer, calculate_risk_score

__all__ = [
    'RiskScorer',
    'calculate_risk_score'
]
