"""Risk thresholds shared by scoring, report assembly and alerting.

One table maps an impact score to a risk tier; sentiment, recommended
action and recommendation bucket are all projections of that tier.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RiskTier(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class Sentiment(str, Enum):
    NEGATIVE = "NEGATIVE"
    CAUTIOUS = "CAUTIOUS"
    POSITIVE = "POSITIVE"


class Action(str, Enum):
    AVOID = "AVOID"
    CAUTION = "CAUTION"
    NEUTRAL = "NEUTRAL"


class Bucket(str, Enum):
    AVOID = "avoid"
    CAUTION = "caution"
    SAFE = "safe"


TIER_SENTIMENT = {
    RiskTier.HIGH: Sentiment.NEGATIVE,
    RiskTier.MEDIUM: Sentiment.CAUTIOUS,
    RiskTier.LOW: Sentiment.POSITIVE,
}

TIER_ACTION = {
    RiskTier.HIGH: Action.AVOID,
    RiskTier.MEDIUM: Action.CAUTION,
    RiskTier.LOW: Action.NEUTRAL,
}

TIER_BUCKET = {
    RiskTier.HIGH: Bucket.AVOID,
    RiskTier.MEDIUM: Bucket.CAUTION,
    RiskTier.LOW: Bucket.SAFE,
}

TIER_REASON = {
    RiskTier.HIGH: "Heavy tariff news flow against a structurally exposed sector",
    RiskTier.MEDIUM: "Some tariff-related news flow; monitor exposure",
    RiskTier.LOW: "Little tariff-related news flow",
}


@dataclass(frozen=True)
class RiskThresholds:
    """Score boundaries, inclusive lower bounds on a 0-10 scale.

    Attributes:
        high_min: Lowest score classified as HIGH risk.
        medium_min: Lowest score classified as MEDIUM risk.
        alert_min: Lowest score listed as high risk in messages and
            triggering alert delivery.
    """

    high_min: float = 7.0
    medium_min: float = 4.0
    alert_min: float = 5.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.medium_min <= self.high_min <= 10.0:
            raise ValueError(
                f"Thresholds must satisfy 0 <= medium_min <= high_min <= 10, "
                f"got medium_min={self.medium_min}, high_min={self.high_min}"
            )

    def tier(self, score: float) -> RiskTier:
        if score >= self.high_min:
            return RiskTier.HIGH
        if score >= self.medium_min:
            return RiskTier.MEDIUM
        return RiskTier.LOW

    def sentiment(self, score: float) -> Sentiment:
        return TIER_SENTIMENT[self.tier(score)]

    def action(self, score: float) -> Action:
        return TIER_ACTION[self.tier(score)]

    def bucket(self, score: float) -> Bucket:
        return TIER_BUCKET[self.tier(score)]

    def is_alert(self, score: float) -> bool:
        return score >= self.alert_min


DEFAULT_THRESHOLDS = RiskThresholds()
