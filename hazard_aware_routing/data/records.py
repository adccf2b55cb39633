"""
Pydantic schemas for hazard records supplied by the storage layer.

Records arrive as plain dictionaries (database rows, indexer events). They are
validated here once and converted to the immutable snapshots the scoring and
aggregation code consumes.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field, field_validator

from .models import HazardSnapshot, Vote

logger = logging.getLogger(__name__)


class VoteRecord(BaseModel):
    """A vote row as stored by the persistence layer."""
    value: int = Field(..., description="+1 to confirm, -1 to dispute")
    created_at: float = Field(..., description="Unix seconds; non-finite values are kept and skipped when scoring")
    trust: float = Field(default=1.0, ge=0.0, description="Voter credibility weight")
    voter: Optional[str] = Field(default=None, description="Voter identifier")

    @field_validator('value')
    @classmethod
    def validate_vote_value(cls, v):
        """Votes are strictly up or down."""
        if v not in (-1, 1):
            raise ValueError('value must be +1 or -1')
        return v

    @field_validator('trust', mode='before')
    @classmethod
    def default_missing_trust(cls, v):
        """Unknown trust counts as a regular voter."""
        return 1.0 if v is None else v

    def to_vote(self) -> Vote:
        return Vote(value=self.value, created_at=self.created_at,
                    trust=self.trust, voter=self.voter)


class HazardRecord(BaseModel):
    """A hazard row with its votes."""
    id: Optional[int] = Field(default=None, description="Storage identifier")
    lat_e6: int = Field(..., ge=-90_000_000, le=90_000_000, description="Latitude in E6 units")
    lon_e6: int = Field(..., ge=-180_000_000, le=180_000_000, description="Longitude in E6 units")
    severity: float = Field(..., description="Reported severity, clamped to 1-5 when scoring")
    category: int = Field(default=0, ge=0, description="Hazard category code")
    closed: bool = Field(default=False, description="Whether the hazard was closed")
    votes: List[VoteRecord] = Field(default_factory=list)
    created_at: Optional[float] = Field(default=None, description="Unix seconds")
    last_activity_timestamp: Optional[float] = Field(default=None, description="Unix seconds")

    @field_validator('votes', mode='before')
    @classmethod
    def default_missing_votes(cls, v):
        return [] if v is None else v

    def effective_last_activity(self) -> Optional[float]:
        """Last activity, falling back to the creation time."""
        if self.last_activity_timestamp is not None:
            return self.last_activity_timestamp
        return self.created_at

    def to_snapshot(self) -> HazardSnapshot:
        return HazardSnapshot(
            lat_e6=self.lat_e6,
            lon_e6=self.lon_e6,
            severity=self.severity,
            votes=tuple(vote.to_vote() for vote in self.votes),
            last_activity_timestamp=self.effective_last_activity(),
            hazard_id=self.id,
            category=self.category,
            closed=self.closed,
            created_at=self.created_at,
        )


def load_hazard_snapshots(records: Iterable[Dict[str, Any]]) -> List[HazardSnapshot]:
    """
    Validate storage records and convert them to hazard snapshots.

    Args:
        records: Iterable of hazard dictionaries

    Returns:
        List of HazardSnapshot objects in input order

    Raises:
        pydantic.ValidationError: If any record is malformed
    """
    snapshots = [HazardRecord.model_validate(record).to_snapshot() for record in records]
    logger.debug(f"Loaded {len(snapshots)} hazard snapshots")
    return snapshots
