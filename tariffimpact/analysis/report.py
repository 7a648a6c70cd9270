"""Report assembly and persistence.

Builds a Report from scored sectors: partitions sectors into
avoid/caution/safe buckets, derives the overall risk tier, attaches a
prefix of the historical event list and the most significant tariff
headlines, and writes the result as a JSON file (plus an optional CSV
sector table).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence

import pandas as pd

from tariffimpact.analysis.scorer import SectorResult
from tariffimpact.analysis.thresholds import (
    DEFAULT_THRESHOLDS,
    Bucket,
    RiskThresholds,
    RiskTier,
)
from tariffimpact.catalog import HistoricalEvent, SectorCatalog
from tariffimpact.logging_setup import get_logger
from tariffimpact.news.models import NewsItem

logger = get_logger("analysis.report")

MAX_SIGNIFICANT_NEWS = 5
HIGH_IMPACT_KEYWORD_COUNT = 3

REPORT_PREFIX = "tariff-report"
SECTOR_CSV_PREFIX = "tariff-sectors"


@dataclass(frozen=True)
class SignificantNews:
    """A headline containing tariff keywords."""

    item: NewsItem
    matched_keywords: tuple[str, ...]
    impact: RiskTier

    def to_dict(self) -> dict[str, Any]:
        data = self.item.to_dict()
        data["matched_keywords"] = list(self.matched_keywords)
        data["impact"] = self.impact.value
        return data


@dataclass(frozen=True)
class Recommendations:
    """Disjoint sector-name lists covering every analyzed sector."""

    avoid: tuple[str, ...] = ()
    caution: tuple[str, ...] = ()
    safe: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, list[str]]:
        return {"avoid": list(self.avoid), "caution": list(self.caution), "safe": list(self.safe)}


@dataclass(frozen=True)
class ReportSummary:
    total_news: int
    significant_news_count: int
    sectors_analyzed: int
    avoid_count: int
    caution_count: int
    safe_count: int
    overall_risk: RiskTier

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_news": self.total_news,
            "significant_news_count": self.significant_news_count,
            "sectors_analyzed": self.sectors_analyzed,
            "avoid_count": self.avoid_count,
            "caution_count": self.caution_count,
            "safe_count": self.safe_count,
            "overall_risk": self.overall_risk.value,
        }


@dataclass(frozen=True)
class Report:
    timestamp: datetime
    summary: ReportSummary
    sector_results: tuple[SectorResult, ...]
    historical_context: tuple[HistoricalEvent, ...]
    recommendations: Recommendations
    significant_news: tuple[SignificantNews, ...] = field(default_factory=tuple)

    @property
    def top_result(self) -> SectorResult | None:
        return self.sector_results[0] if self.sector_results else None

    def to_dict(self) -> dict[str, Any]:
        return report_to_dict(self)


def find_significant_news(
    news: Sequence[NewsItem],
    tariff_keywords: Sequence[str],
    limit: int = MAX_SIGNIFICANT_NEWS,
) -> tuple[list[SignificantNews], int]:
    """Find news items mentioning tariff keywords.

    An item matching three or more keywords is HIGH impact, otherwise
    MEDIUM.

    Returns:
        Tuple of (first ``limit`` significant items, total significant count).
    """
    significant: list[SignificantNews] = []
    count = 0
    for item in news:
        text = item.text
        matched = tuple(k for k in tariff_keywords if k in text)
        if not matched:
            continue
        count += 1
        if len(significant) < limit:
            impact = RiskTier.HIGH if len(matched) >= HIGH_IMPACT_KEYWORD_COUNT else RiskTier.MEDIUM
            significant.append(SignificantNews(item=item, matched_keywords=matched, impact=impact))
    return significant, count


def partition_sectors(
    results: Sequence[SectorResult],
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
) -> Recommendations:
    """Place every sector in exactly one of avoid/caution/safe."""
    buckets: dict[Bucket, list[str]] = {b: [] for b in Bucket}
    for result in results:
        buckets[thresholds.bucket(result.impact_score)].append(result.sector)
    return Recommendations(
        avoid=tuple(buckets[Bucket.AVOID]),
        caution=tuple(buckets[Bucket.CAUTION]),
        safe=tuple(buckets[Bucket.SAFE]),
    )


def overall_risk(
    results: Sequence[SectorResult],
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
) -> RiskTier:
    """Risk tier of the highest-scoring sector (LOW when nothing was scored)."""
    if not results:
        return RiskTier.LOW
    return thresholds.tier(max(r.impact_score for r in results))


def assemble_report(
    results: Sequence[SectorResult],
    news: Sequence[NewsItem],
    catalog: SectorCatalog,
    history_limit: int = 3,
    now: datetime | None = None,
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
) -> Report:
    """Assemble a report from sector results and the news they were scored on.

    Args:
        results: Sector results; re-sorted by descending score (stable).
        news: The news list used for scoring.
        catalog: Catalog providing tariff keywords and historical events.
        history_limit: Number of historical events to attach.
        now: Report timestamp. Defaults to the current UTC time.
        thresholds: Threshold table for bucketing and overall risk.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    ordered = sorted(results, key=lambda r: r.impact_score, reverse=True)
    recommendations = partition_sectors(ordered, thresholds)
    significant, significant_count = find_significant_news(news, catalog.tariff_keywords)

    summary = ReportSummary(
        total_news=len(news),
        significant_news_count=significant_count,
        sectors_analyzed=len(ordered),
        avoid_count=len(recommendations.avoid),
        caution_count=len(recommendations.caution),
        safe_count=len(recommendations.safe),
        overall_risk=overall_risk(ordered, thresholds),
    )

    return Report(
        timestamp=now,
        summary=summary,
        sector_results=tuple(ordered),
        historical_context=tuple(catalog.historical_events[: max(0, history_limit)]),
        recommendations=recommendations,
        significant_news=tuple(significant),
    )


def report_to_dict(report: Report) -> dict[str, Any]:
    """JSON-serializable projection of a report."""
    return {
        "timestamp": report.timestamp.isoformat(),
        "summary": report.summary.to_dict(),
        "sector_results": [r.to_dict() for r in report.sector_results],
        "historical_context": [e.to_dict() for e in report.historical_context],
        "recommendations": report.recommendations.to_dict(),
        "significant_news": [s.to_dict() for s in report.significant_news],
    }


def report_stamp(report: Report) -> str:
    """Filesystem-safe UTC run stamp, e.g. 20261017T091500Z."""
    return report.timestamp.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def _free_path(reports_dir: Path, prefix: str, stamp: str, suffix: str) -> Path:
    """First unused ``prefix-stamp[-N]suffix`` path; runs within one second get -1, -2, ..."""
    path = reports_dir / f"{prefix}-{stamp}{suffix}"
    n = 0
    while path.exists():
        n += 1
        path = reports_dir / f"{prefix}-{stamp}-{n}{suffix}"
    return path


def save_report(report: Report, reports_dir: Path) -> Path:
    """Write the report as UTF-8 JSON, one file per run.

    Returns:
        Path of the written file.
    """
    reports_dir = Path(reports_dir)
    reports_dir.mkdir(parents=True, exist_ok=True)
    path = _free_path(reports_dir, REPORT_PREFIX, report_stamp(report), ".json")

    with open(path, "x", encoding="utf-8") as f:
        json.dump(report_to_dict(report), f, indent=2, ensure_ascii=False)

    logger.info("Saved report to %s", path)
    return path


def sector_results_frame(report: Report) -> pd.DataFrame:
    """Tabulate sector results, one row per sector in report order."""
    rows = [
        {
            "sector": r.sector,
            "impact_score": r.impact_score,
            "sentiment": r.sentiment.value,
            "vulnerability": r.vulnerability.value,
            "relevant_news_count": r.relevant_news_count,
            "action": r.recommendation.action.value,
            "risk": r.recommendation.risk.value,
        }
        for r in report.sector_results
    ]
    columns = [
        "sector",
        "impact_score",
        "sentiment",
        "vulnerability",
        "relevant_news_count",
        "action",
        "risk",
    ]
    return pd.DataFrame(rows, columns=columns)


def write_sector_csv(report: Report, reports_dir: Path) -> Path:
    """Write the sector table as CSV next to the JSON report."""
    reports_dir = Path(reports_dir)
    reports_dir.mkdir(parents=True, exist_ok=True)
    path = _free_path(reports_dir, SECTOR_CSV_PREFIX, report_stamp(report), ".csv")

    df = sector_results_frame(report)
    df.to_csv(path, index=False)
    logger.info("Wrote sector table to %s (%d sectors)", path, len(df))
    return path
