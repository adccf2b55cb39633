"""
Configuration management for hazard-aware routing.
"""

from .routing_config import RoutingConfig

__all__ = [
    'RoutingConfig'
]
