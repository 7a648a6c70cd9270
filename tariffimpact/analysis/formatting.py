"""Chat message rendering.

Every function here is a pure projection of already-computed data; none
of them scores anything. Output uses Telegram's legacy Markdown.
"""

from __future__ import annotations

import math
import re
from typing import Iterable

from tariffimpact.analysis.report import Report
from tariffimpact.analysis.scorer import SectorResult
from tariffimpact.analysis.thresholds import DEFAULT_THRESHOLDS, RiskThresholds
from tariffimpact.catalog import HistoricalEvent, SectorCatalog

RISK_ICONS = {"HIGH": "🔴", "MEDIUM": "🟡", "LOW": "🟢"}

_MARKDOWN_SPECIAL = re.compile(r"([_*\[`])")


def escape_markdown(text: str) -> str:
    """Escape characters that legacy Telegram Markdown treats as entity markers."""
    return _MARKDOWN_SPECIAL.sub(r"\\\1", text)


def _names(names: Iterable[str]) -> str:
    joined = ", ".join(names)
    return joined or "none"


def alert_results(
    report: Report, thresholds: RiskThresholds = DEFAULT_THRESHOLDS
) -> list[SectorResult]:
    """Sector results at or above the alert threshold, in report order."""
    return [r for r in report.sector_results if thresholds.is_alert(r.impact_score)]


def format_message(report: Report, thresholds: RiskThresholds = DEFAULT_THRESHOLDS) -> str:
    """Render a report as a chat message.

    High-risk sectors first, then the three recommendation buckets, then a
    footer citing how many news items were analysed.
    """
    risk = report.summary.overall_risk.value
    lines = [
        "📊 *Tariff Impact Report*",
        f"_{report.timestamp.strftime('%Y-%m-%d %H:%M UTC')}_",
        f"Overall risk: {RISK_ICONS[risk]} *{risk}*",
        "",
        "⚠️ *High risk sectors:*",
    ]

    high_risk = alert_results(report, thresholds)
    if high_risk:
        for r in high_risk:
            lines.append(f"• {r.sector}: {r.impact_score:.1f}/10 ({r.sentiment.value})")
    else:
        lines.append("• none")

    recs = report.recommendations
    lines.extend([
        "",
        "💡 *Recommendations:*",
        f"🔴 Avoid: {_names(recs.avoid)}",
        f"🟡 Caution: {_names(recs.caution)}",
        f"🟢 Safe: {_names(recs.safe)}",
        "",
        f"_Based on {report.summary.total_news} news items._",
    ])
    return "\n".join(lines)


def format_alerts(report: Report, thresholds: RiskThresholds = DEFAULT_THRESHOLDS) -> str:
    """Render the current high-impact alerts."""
    alerts = alert_results(report, thresholds)
    if not alerts:
        return "🚨 *Current Alerts*\n\nNo high-impact alerts at this time.\n\n🔔 To enable auto-alerts: /watch"

    lines = ["🚨 *Current Alerts*", ""]
    for r in alerts:
        lines.append(f"• *{r.sector}*: {r.impact_score:.1f}/10, {r.recommendation.action.value}")
        if r.relevant_news:
            lines.append(f"   {escape_markdown(r.relevant_news[0].title)}")
    return "\n".join(lines)


def severity_stars(severity: int) -> str:
    return "⭐" * math.ceil(severity / 2)


def format_history(events: Iterable[HistoricalEvent]) -> str:
    """Render historical tariff events, severity shown as stars."""
    lines = ["📜 *Historical Events:*", ""]
    for e in events:
        lines.append(f"{e.date} {severity_stars(e.severity)}")
        lines.append(f"   {escape_markdown(e.event)}")
        if e.impact:
            lines.append(f"   {escape_markdown(e.impact)}")
        lines.append("")
    return "\n".join(lines).rstrip()


def format_sectors(catalog: SectorCatalog) -> str:
    """Render the tracked sectors with their vulnerability tier."""
    lines = ["📊 *Tracked Sectors:*", ""]
    for s in catalog:
        tickers = ", ".join(s.stocks)
        lines.append(f"• {s.name}: {s.vulnerability.value} vulnerability ({tickers})")
    return "\n".join(lines)
