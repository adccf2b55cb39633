"""
Time-decayed, trust-weighted risk scoring for crowd-reported hazards.
"""

import logging
import math
import time
from numbers import Real
from typing import Iterable, Optional

from ...config.routing_config import RoutingConfig
from ...data.models import HazardSnapshot, Vote

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400.0
MAX_SCORE = 100


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _is_finite_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


class RiskScorer:
    """
    Turn a hazard's severity and its votes into a bounded 0-100 risk score.

    Each vote is weighted by its age (exponential decay, 72h half-life by
    default) and by the voter's trust. The weighted net signal is log-compressed
    so that piling on votes cannot saturate the score, multiplied by the
    clamped severity and finally decayed by how long the hazard has been quiet
    (7 day half-life by default).

    Scores depend on "now"; pass ``now`` explicitly for reproducible results.
    """

    def __init__(self, config: Optional[RoutingConfig] = None):
        """
        Initialize risk scorer.

        Args:
            config: Routing configuration parameters
        """
        self.config = config or RoutingConfig()
        self.config.validate()

        self._vote_decay_rate = math.log(2) / self.config.vote_half_life_seconds
        self._freshness_decay_rate = math.log(2) / self.config.freshness_half_life_days

    def score(self, severity, votes: Iterable[Vote],
              last_activity_timestamp: Optional[float] = None,
              now: Optional[float] = None) -> int:
        """
        Calculate the risk score of a single hazard.

        Args:
            severity: Reported severity; clamped to [min_severity, max_severity]
            votes: Votes on the hazard, in any order
            last_activity_timestamp: Unix seconds of the last activity, if known
            now: Reference time in unix seconds (defaults to the wall clock)

        Returns:
            Integer risk score in [0, 100]
        """
        if not _is_finite_number(severity) or severity <= 0:
            return 0
        sev = min(max(severity, self.config.min_severity), self.config.max_severity)

        votes = list(votes or ())
        if not votes:
            return 0

        if now is None:
            now = time.time()

        weighted_net = self.weighted_vote_signal(votes, now)
        if weighted_net == 0:
            return 0

        risk = sev * self.evidence(weighted_net)

        if _is_finite_number(last_activity_timestamp):
            risk *= self.freshness_factor(last_activity_timestamp, now)

        return min(max(_round_half_up(abs(risk) * self.config.score_scale), 0), MAX_SCORE)

    def score_hazard(self, hazard: HazardSnapshot, now: Optional[float] = None) -> int:
        """Score a hazard snapshot."""
        return self.score(hazard.severity, hazard.votes,
                          hazard.last_activity_timestamp, now=now)

    def weighted_vote_signal(self, votes: Iterable[Vote], now: float) -> float:
        """
        Sum of vote signs weighted by age decay and trust.

        Votes with non-finite timestamps are skipped rather than counted as
        fresh; trust values are clamped to be non-negative.
        """
        weighted_net = 0.0
        skipped = 0

        for vote in votes:
            created_at = getattr(vote, 'created_at', None)
            if not _is_finite_number(created_at):
                skipped += 1
                continue

            trust = getattr(vote, 'trust', None)
            if trust is None:
                trust = 1.0
            elif not _is_finite_number(trust):
                skipped += 1
                continue
            trust = max(0.0, trust)

            value = getattr(vote, 'value', 0)
            sign = 1 if value > 0 else -1 if value < 0 else 0

            age = max(0.0, now - created_at)
            age_weight = math.exp(-age * self._vote_decay_rate)
            weighted_net += sign * age_weight * trust

        if skipped:
            logger.debug(f"Skipped {skipped} votes with non-finite timestamp or trust")

        return weighted_net

    def evidence(self, weighted_net: float) -> float:
        """Log-compressed, clamped evidence for a weighted net vote signal."""
        if weighted_net == 0:
            return 0.0
        limit = self.config.evidence_limit
        magnitude = math.log2(abs(weighted_net) + 1)
        return max(-limit, min(limit, math.copysign(magnitude, weighted_net)))

    def freshness_factor(self, last_activity_timestamp: float, now: float) -> float:
        """Exponential decay multiplier for a hazard that has gone quiet."""
        inactivity_days = max(0.0, (now - last_activity_timestamp) / SECONDS_PER_DAY)
        return math.exp(-inactivity_days * self._freshness_decay_rate)


_default_scorer = RiskScorer()


def calculate_risk_score(severity, votes: Iterable[Vote],
                         last_activity_timestamp: Optional[float] = None,
                         now: Optional[float] = None) -> int:
    """
    Calculate a hazard risk score with the default configuration.

    Args:
        severity: Reported severity (1-5 after clamping)
        votes: Time-stamped, trust-weighted votes
        last_activity_timestamp: Unix seconds of the last activity, if known
        now: Reference time in unix seconds (defaults to the wall clock)

    Returns:
        Integer risk score in [0, 100]
    """
    return _default_scorer.score(severity, votes, last_activity_timestamp, now=now)
