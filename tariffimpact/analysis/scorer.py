"""Keyword-based sector impact scoring.

A news item is relevant to a sector when its lower-cased title and
description contain at least one of the sector's keywords and at least
one tariff keyword. The impact score is a saturating function of the
relevant-item count, biased upward for HIGH-vulnerability sectors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from tariffimpact.analysis.thresholds import (
    DEFAULT_THRESHOLDS,
    TIER_REASON,
    Action,
    RiskThresholds,
    RiskTier,
    Sentiment,
)
from tariffimpact.catalog import Sector, SectorCatalog, Vulnerability
from tariffimpact.logging_setup import get_logger
from tariffimpact.news.models import NewsItem

logger = get_logger("analysis.scorer")

MAX_SCORE = 10.0
POINTS_PER_ITEM = 2.0
HIGH_VULNERABILITY_BONUS = 2.0
MAX_RELEVANT_NEWS = 3


@dataclass(frozen=True)
class Recommendation:
    action: Action
    reason: str
    risk: RiskTier

    def to_dict(self) -> dict[str, str]:
        return {"action": self.action.value, "reason": self.reason, "risk": self.risk.value}


@dataclass(frozen=True)
class SectorResult:
    """Impact assessment for one sector in one run."""

    sector: str
    impact_score: float
    sentiment: Sentiment
    relevant_news_count: int
    relevant_news: tuple[NewsItem, ...]
    recommendation: Recommendation
    vulnerability: Vulnerability

    def to_dict(self) -> dict[str, Any]:
        return {
            "sector": self.sector,
            "impact_score": self.impact_score,
            "sentiment": self.sentiment.value,
            "vulnerability": self.vulnerability.value,
            "relevant_news_count": self.relevant_news_count,
            "relevant_news": [item.to_dict() for item in self.relevant_news],
            "recommendation": self.recommendation.to_dict(),
        }


def matches_any(text: str, keywords: Iterable[str]) -> bool:
    """Case-insensitive substring test; ``text`` must already be lower-cased."""
    return any(keyword in text for keyword in keywords)


def is_relevant(item: NewsItem, sector: Sector, tariff_keywords: Sequence[str]) -> bool:
    text = item.text
    return matches_any(text, sector.keywords) and matches_any(text, tariff_keywords)


def compute_impact_score(relevant_count: int, vulnerability: Vulnerability) -> float:
    """Saturating impact score in [0, 10].

    The HIGH-vulnerability bonus applies only once at least one item is
    relevant, so a run without matching news always scores 0.
    """
    if relevant_count <= 0:
        return 0.0
    bonus = HIGH_VULNERABILITY_BONUS if vulnerability == Vulnerability.HIGH else 0.0
    score = relevant_count * POINTS_PER_ITEM + bonus
    return max(0.0, min(MAX_SCORE, score))


def score_sector(
    sector: Sector,
    news: Sequence[NewsItem],
    tariff_keywords: Sequence[str],
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
) -> SectorResult:
    """Score one sector against a news list. Pure; performs no I/O."""
    relevant_count = 0
    relevant_news: list[NewsItem] = []

    for item in news:
        if is_relevant(item, sector, tariff_keywords):
            relevant_count += 1
            if len(relevant_news) < MAX_RELEVANT_NEWS:
                relevant_news.append(item)

    score = compute_impact_score(relevant_count, sector.vulnerability)
    tier = thresholds.tier(score)

    return SectorResult(
        sector=sector.name,
        impact_score=score,
        sentiment=thresholds.sentiment(score),
        relevant_news_count=relevant_count,
        relevant_news=tuple(relevant_news),
        recommendation=Recommendation(
            action=thresholds.action(score),
            reason=TIER_REASON[tier],
            risk=tier,
        ),
        vulnerability=sector.vulnerability,
    )


def score_sector_by_name(
    name: str,
    news: Sequence[NewsItem],
    catalog: SectorCatalog,
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
) -> SectorResult:
    """Score a sector looked up by name.

    Raises:
        UnknownSectorError: If the catalog has no such sector.
    """
    sector = catalog.get(name)
    return score_sector(sector, news, catalog.tariff_keywords, thresholds)


def score_all(
    news: Sequence[NewsItem],
    catalog: SectorCatalog,
    sectors: Sequence[str] | None = None,
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
) -> list[SectorResult]:
    """Score every catalog sector, or the named subset.

    Names are resolved before any scoring so an unknown name fails the
    whole call. Results are sorted by descending impact score; the sort
    is stable, so ties keep catalog order.

    Raises:
        UnknownSectorError: If any requested name is not in the catalog.
    """
    if sectors:
        selected = [catalog.get(name) for name in sectors]
        # Keep catalog order and drop repeats
        wanted = {s.name for s in selected}
        targets = [s for s in catalog if s.name in wanted]
    else:
        targets = list(catalog)

    results = [score_sector(s, news, catalog.tariff_keywords, thresholds) for s in targets]
    results.sort(key=lambda r: r.impact_score, reverse=True)

    logger.debug(
        "Scored %d sectors against %d news items (top: %s)",
        len(results),
        len(news),
        f"{results[0].sector}={results[0].impact_score}" if results else "none",
    )
    return results
