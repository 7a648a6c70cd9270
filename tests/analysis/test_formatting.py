"""Tests for chat message rendering."""

from tariffimpact.analysis.formatting import (
    escape_markdown,
    format_alerts,
    format_history,
    format_message,
    format_sectors,
    severity_stars,
)
from tariffimpact.analysis.report import assemble_report
from tariffimpact.analysis.scorer import score_all


def _report(small_catalog, make_news, fixed_now, titles):
    news = [make_news(t) for t in titles]
    return assemble_report(score_all(news, small_catalog), news, small_catalog, now=fixed_now)


class TestFormatMessage:
    """Tests for the report chat message."""

    def test_sections_in_order(self, small_catalog, make_news, fixed_now):
        """High-risk list, then buckets, then the news-count footer."""
        report = _report(
            small_catalog, make_news, fixed_now,
            ["steel tariff 1", "steel tariff 2", "oil tariff"],
        )
        text = format_message(report)

        high = text.index("High risk sectors")
        avoid = text.index("Avoid:")
        caution = text.index("Caution:")
        safe = text.index("Safe:")
        footer = text.index("Based on 3 news items")
        assert high < avoid < caution < safe < footer

    def test_high_risk_uses_alert_threshold(self, small_catalog, make_news, fixed_now):
        """Sectors at or above 5 are listed as high risk, others are not."""
        # Steel: 2 matches + HIGH bonus = 6.0; Energy: 1 match = 2.0
        report = _report(
            small_catalog, make_news, fixed_now,
            ["steel tariff 1", "steel tariff 2", "oil tariff"],
        )
        text = format_message(report)
        high_section = text.split("Recommendations")[0]

        assert "Steel: 6.0/10" in high_section
        assert "Energy" not in high_section

    def test_no_high_risk(self, small_catalog, fixed_now):
        """Empty news lists 'none' under high risk."""
        report = assemble_report(score_all([], small_catalog), [], small_catalog, now=fixed_now)
        text = format_message(report)
        assert "• none" in text
        assert "Safe: Steel, Energy, Pharma" in text
        assert "Based on 0 news items" in text

    def test_is_deterministic(self, small_catalog, make_news, fixed_now):
        """Formatting the same report twice gives identical text."""
        report = _report(small_catalog, make_news, fixed_now, ["steel tariff"])
        assert format_message(report) == format_message(report)


class TestOtherMessages:
    """Tests for alerts, history and sector listings."""

    def test_alerts_none(self, small_catalog, fixed_now):
        report = assemble_report(score_all([], small_catalog), [], small_catalog, now=fixed_now)
        assert "No high-impact alerts" in format_alerts(report)

    def test_alerts_list_headline(self, small_catalog, make_news, fixed_now):
        report = _report(small_catalog, make_news, fixed_now, ["steel tariff A", "steel tariff B"])
        text = format_alerts(report)
        assert "*Steel*: 6.0/10, CAUTION" in text
        assert "steel tariff A" in text

    def test_severity_stars(self):
        assert severity_stars(9) == "⭐" * 5
        assert severity_stars(8) == "⭐" * 4
        assert severity_stars(1) == "⭐"

    def test_history(self, small_catalog):
        text = format_history(small_catalog.historical_events[:2])
        assert "2019-05-10" in text
        assert "2018-07-06" in text
        assert "2018-03-01" not in text

    def test_sectors(self, catalog):
        text = format_sectors(catalog)
        assert "Agriculture: HIGH vulnerability" in text
        assert "Pharmaceuticals: LOW vulnerability" in text

    def test_alert_headline_markdown_escaped(self, small_catalog, make_news, fixed_now):
        """Headline punctuation cannot break the chat's Markdown parse."""
        report = _report(small_catalog, make_news, fixed_now, ["US_China *steel* tariff", "steel tariff B"])
        text = format_alerts(report)
        assert r"US\_China \*steel\* tariff" in text
        assert "*Steel*: 6.0/10" in text


class TestEscapeMarkdown:
    """Tests for legacy Markdown escaping."""

    def test_special_characters(self):
        assert escape_markdown("a_b*c[d`e") == r"a\_b\*c\[d\`e"

    def test_plain_text_unchanged(self):
        assert escape_markdown("Steel tariff (25%)") == "Steel tariff (25%)"
