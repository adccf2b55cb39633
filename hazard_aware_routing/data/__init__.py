"""
Hazard data types and utilities for hazard-aware routing.

This module contains:
- Immutable hazard, vote and grid cell types
- Fixed-point (E6) coordinate handling and bucketing
- Validation of storage records
"""

from .models import Vote, HazardSnapshot, PathCell, GridPoint
from .coordinates import BoundingBoxE6, to_e6, from_e6, bucket_index
from .records import VoteRecord, HazardRecord, load_hazard_snapshots

__all__ = [
    'Vote',
    'HazardSnapshot',
    'PathCell',
    'GridPoint',
    'BoundingBoxE6',
    'to_e6',
    'from_e6',
    'bucket_index',
    'VoteRecord',
    'HazardRecord',
    'load_hazard_snapshots'
]
