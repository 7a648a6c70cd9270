"""Console output helpers for CLI commands.

Provides encoding-safe output with emoji/ASCII fallback for cross-platform
compatibility (Windows cmd.exe, PowerShell, Unix terminals), and the
console rendering of a report.
"""

import contextlib
import os
import sys

from tariffimpact.analysis.report import Report


def _can_encode(s: str) -> bool:
    """Check if string can be encoded with current stdout encoding."""
    try:
        encoding = sys.stdout.encoding or "utf-8"
        s.encode(encoding, errors="strict")
        return True
    except (LookupError, UnicodeEncodeError):
        return False


def _fmt(s: str, ascii_fallback: str, use_emoji: bool | None = None) -> str:
    """Format string with emoji fallback to ASCII.

    Args:
        s: String with emoji.
        ascii_fallback: ASCII fallback string.
        use_emoji: Whether to attempt emoji. If None, checks TARIFF_NO_EMOJI
            environment variable (set to any value to disable emoji).

    Returns:
        Formatted string (emoji if possible, ASCII otherwise).
    """
    if use_emoji is None:
        use_emoji = not os.environ.get("TARIFF_NO_EMOJI")

    if not use_emoji:
        return ascii_fallback
    if _can_encode(s):
        return s
    return ascii_fallback


def configure_windows_console() -> None:
    """Configure Windows console for UTF-8 output (best-effort)."""
    if os.name == "nt":
        with contextlib.suppress(AttributeError, OSError):
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]


SENTIMENT_MARKS = {
    "NEGATIVE": ("🔴", "[-]"),
    "CAUTIOUS": ("🟡", "[~]"),
    "POSITIVE": ("🟢", "[+]"),
}


def format_console(report: Report, use_emoji: bool | None = None) -> str:
    """Render a report for the terminal."""
    lines = [
        _fmt("📊 Tariff Impact Analysis", "Tariff Impact Analysis", use_emoji),
        f"   {report.timestamp.strftime('%Y-%m-%d %H:%M:%S UTC')} | "
        f"{report.summary.total_news} news items, "
        f"{report.summary.significant_news_count} tariff-related | "
        f"overall risk {report.summary.overall_risk.value}",
        "",
        _fmt("📈 SECTOR ANALYSIS:", "SECTOR ANALYSIS:", use_emoji),
    ]

    width = max((len(r.sector) for r in report.sector_results), default=0)
    for r in report.sector_results:
        emoji, ascii_mark = SENTIMENT_MARKS[r.sentiment.value]
        mark = _fmt(emoji, ascii_mark, use_emoji)
        lines.append(
            f"  {r.sector:<{width}}  {mark} {r.sentiment.value:<8}  "
            f"{r.impact_score:4.1f}/10  ({r.relevant_news_count} news)"
        )

    recs = report.recommendations
    lines.extend([
        "",
        _fmt("💡 RECOMMENDATIONS:", "RECOMMENDATIONS:", use_emoji),
        f"  AVOID:   {', '.join(recs.avoid) or '-'}",
        f"  CAUTION: {', '.join(recs.caution) or '-'}",
        f"  SAFE:    {', '.join(recs.safe) or '-'}",
    ])

    if report.historical_context:
        lines.extend(["", _fmt("📜 HISTORICAL CONTEXT:", "HISTORICAL CONTEXT:", use_emoji)])
        for e in report.historical_context:
            lines.append(f"  {e.date}  {e.event} ({e.impact})")

    return "\n".join(lines)
