"""
Shared fixtures for hazard-aware routing tests.
"""

import pytest

from hazard_aware_routing.data.models import HazardSnapshot, PathCell, Vote

NOW = 1_700_000_000.0
HOUR = 3600.0
DAY = 86400.0


@pytest.fixture
def now():
    """Fixed reference time so scores are reproducible."""
    return NOW


@pytest.fixture
def make_votes():
    """Build n identical votes aged ``age`` seconds relative to NOW."""
    def _make(n=1, value=1, age=0.0, trust=1.0):
        return tuple(Vote(value=value, created_at=NOW - age, trust=trust) for _ in range(n))
    return _make


@pytest.fixture
def make_hazard(make_votes):
    """Build a hazard snapshot with fresh upvotes by default."""
    def _make(lat_e6=41_000_000, lon_e6=29_000_000, severity=5, votes=None,
              last_activity=NOW, **kwargs):
        if votes is None:
            votes = make_votes(1)
        return HazardSnapshot(lat_e6=lat_e6, lon_e6=lon_e6, severity=severity,
                              votes=tuple(votes), last_activity_timestamp=last_activity,
                              **kwargs)
    return _make


def grid_from_risks(risks, **tags):
    """Build a PathCell grid from rows of risk values."""
    return [[PathCell(risk=r, **tags) for r in row] for row in risks]
