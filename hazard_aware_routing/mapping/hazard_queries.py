"""
Filtering, per-hazard views and area statistics over hazard snapshots.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from ..algorithms.scoring.risk_scorer import RiskScorer
from ..data.coordinates import BoundingBoxE6
from ..data.models import HazardSnapshot

logger = logging.getLogger(__name__)

SORT_KEYS = ('recent', 'risk', 'votes')


@dataclass(frozen=True)
class HazardFilter:
    """Selection criteria applied before views, stats or heatmaps."""

    bbox: Optional[BoundingBoxE6] = None
    category: Optional[int] = None
    min_risk: int = 0
    max_risk: int = 100
    time_window_hours: float = 0.0  # 0 disables the activity window
    include_closed: bool = False

    def __post_init__(self):
        if self.min_risk > self.max_risk:
            raise ValueError("min_risk must not exceed max_risk")
        if self.time_window_hours < 0:
            raise ValueError("time_window_hours must be non-negative")


def _last_activity(hazard: HazardSnapshot) -> float:
    if hazard.last_activity_timestamp is not None:
        return hazard.last_activity_timestamp
    if hazard.created_at is not None:
        return hazard.created_at
    return 0.0


def select_hazards(hazards: Iterable[HazardSnapshot], hazard_filter: HazardFilter,
                   now: Optional[float] = None) -> List[HazardSnapshot]:
    """
    Apply the location, category, closed and activity-window criteria.

    Risk bounds are not applied here since they need scoring; see
    ``filter_hazards``.
    """
    if now is None:
        now = time.time()

    cutoff = None
    if hazard_filter.time_window_hours > 0:
        cutoff = int(now) - int(hazard_filter.time_window_hours * 3600)

    selected = []
    for hazard in hazards:
        if hazard_filter.bbox is not None and not hazard_filter.bbox.contains(hazard.lat_e6, hazard.lon_e6):
            continue
        if hazard_filter.category is not None and hazard.category != hazard_filter.category:
            continue
        if hazard.closed and not hazard_filter.include_closed:
            continue
        if cutoff is not None and _last_activity(hazard) < cutoff:
            continue
        selected.append(hazard)
    return selected


def build_hazard_view(hazard: HazardSnapshot, now: Optional[float] = None,
                      scorer: Optional[RiskScorer] = None) -> Dict[str, Any]:
    """
    Summarize a hazard for listing: location, vote tallies and current risk.

    Args:
        hazard: Hazard snapshot
        now: Reference time in unix seconds
        scorer: Risk scorer (defaults to the standard configuration)

    Returns:
        Dictionary of display fields
    """
    scorer = scorer or RiskScorer()
    votes = hazard.votes
    return {
        'id': hazard.hazard_id,
        'lat': hazard.lat,
        'lon': hazard.lon,
        'category': hazard.category,
        'severity': hazard.severity,
        'closed': hazard.closed,
        'up_votes': sum(1 for vote in votes if vote.value > 0),
        'down_votes': sum(1 for vote in votes if vote.value < 0),
        'total_votes': len(votes),
        'net_votes': sum(vote.value for vote in votes),
        'risk': scorer.score_hazard(hazard, now=now),
        'last_activity_timestamp': _last_activity(hazard),
    }


def filter_hazards(hazards: Iterable[HazardSnapshot], hazard_filter: HazardFilter,
                   now: Optional[float] = None,
                   scorer: Optional[RiskScorer] = None) -> List[Dict[str, Any]]:
    """
    Select hazards and return views whose risk lies within the filter bounds.

    Args:
        hazards: Hazard snapshots
        hazard_filter: Selection criteria
        now: Reference time shared by the whole batch
        scorer: Risk scorer (defaults to the standard configuration)

    Returns:
        Hazard views in input order
    """
    if now is None:
        now = time.time()
    scorer = scorer or RiskScorer()

    views = [build_hazard_view(h, now=now, scorer=scorer)
             for h in select_hazards(hazards, hazard_filter, now=now)]
    return [v for v in views if hazard_filter.min_risk <= v['risk'] <= hazard_filter.max_risk]


def sort_hazard_views(views: List[Dict[str, Any]], sort: str = 'recent') -> List[Dict[str, Any]]:
    """
    Order hazard views for listing.

    Args:
        views: Output of ``filter_hazards``
        sort: 'recent' (latest activity first), 'risk' or 'votes'; ties fall
            back to latest activity

    Raises:
        ValueError: If the sort key is unknown
    """
    if sort not in SORT_KEYS:
        raise ValueError(f"Invalid sort key {sort!r}. Use recent|risk|votes.")

    if sort == 'risk':
        key = lambda v: (v['risk'], v['last_activity_timestamp'])
    elif sort == 'votes':
        key = lambda v: (v['total_votes'], v['last_activity_timestamp'])
    else:
        key = lambda v: v['last_activity_timestamp']
    return sorted(views, key=key, reverse=True)


def summarize_hazards(hazards: Iterable[HazardSnapshot], hazard_filter: HazardFilter,
                      now: Optional[float] = None,
                      scorer: Optional[RiskScorer] = None) -> Dict[str, Any]:
    """
    Area statistics over the hazards matching a filter.

    Returns:
        Dictionary with hazard_count, open_count, closed_count, total_votes,
        avg_risk, max_risk, high_risk_count and last_activity_timestamp
        (None when no hazard matched)
    """
    scorer = scorer or RiskScorer()
    views = filter_hazards(hazards, hazard_filter, now=now, scorer=scorer)

    hazard_count = len(views)
    open_count = sum(1 for v in views if not v['closed'])
    total_risk = sum(v['risk'] for v in views)
    last_activity = max((v['last_activity_timestamp'] for v in views), default=0)

    stats = {
        'hazard_count': hazard_count,
        'open_count': open_count,
        'closed_count': hazard_count - open_count,
        'total_votes': sum(v['total_votes'] for v in views),
        # Integer mean, halves rounded up
        'avg_risk': (2 * total_risk + hazard_count) // (2 * hazard_count) if hazard_count else 0,
        'max_risk': max((v['risk'] for v in views), default=0),
        'high_risk_count': sum(1 for v in views if v['risk'] >= scorer.config.high_risk_score),
        'last_activity_timestamp': last_activity or None,
    }
    logger.debug(f"Summarized {hazard_count} hazards")
    return stats
