"""
Immutable value types shared by scoring, aggregation and routing.
"""

from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple


@dataclass(frozen=True)
class Vote:
    """A single up/down vote on a hazard report."""

    value: int  # +1 confirms the hazard, -1 disputes it
    created_at: float  # unix seconds
    trust: float = 1.0  # voter credibility weight
    voter: Optional[str] = None


@dataclass(frozen=True)
class HazardSnapshot:
    """
    Read-only view of a hazard report as supplied by the storage layer.

    Coordinates are fixed-point integers scaled by 1e6 (E6 units) so that grid
    bucketing is exact and reproducible.
    """

    lat_e6: int
    lon_e6: int
    severity: float
    votes: Tuple[Vote, ...] = ()
    last_activity_timestamp: Optional[float] = None

    # Query metadata, not used by scoring
    hazard_id: Optional[int] = None
    category: int = 0
    closed: bool = False
    created_at: Optional[float] = None

    @property
    def lat(self) -> float:
        return self.lat_e6 / 1e6

    @property
    def lon(self) -> float:
        return self.lon_e6 / 1e6


@dataclass(frozen=True)
class PathCell:
    """Routing attributes of one cell in the path-planning grid."""

    risk: float = 0.0
    has_ramp: bool = False
    has_stairs: bool = False


class GridPoint(NamedTuple):
    """Integer routing-grid index: x is the column, y the row."""

    x: int
    y: int


@dataclass
class CellAccumulator:
    """Running heatmap totals for one grid cell."""

    total_risk: int = 0
    count: int = 0

    def add(self, risk: int) -> None:
        self.total_risk += risk
        self.count += 1

    def average(self) -> int:
        """Integer mean, halves rounded up, computed without floats."""
        return (2 * self.total_risk + self.count) // (2 * self.count)
