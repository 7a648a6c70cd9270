"""Tests for console rendering and emoji fallback."""

from tariffimpact.analysis.report import assemble_report
from tariffimpact.analysis.scorer import score_all
from tariffimpact.cli._console import _fmt, format_console


class TestFmt:
    """Tests for emoji/ASCII selection."""

    def test_explicit_ascii(self):
        assert _fmt("✅", "[OK]", use_emoji=False) == "[OK]"

    def test_env_disables_emoji(self, monkeypatch):
        monkeypatch.setenv("TARIFF_NO_EMOJI", "1")
        assert _fmt("✅", "[OK]") == "[OK]"


class TestFormatConsole:
    """Tests for the terminal report."""

    def test_ascii_report(self, small_catalog, make_news, fixed_now):
        news = [make_news("steel tariff"), make_news("oil tariff")]
        report = assemble_report(score_all(news, small_catalog), news, small_catalog, now=fixed_now)

        text = format_console(report, use_emoji=False)

        assert text.isascii()
        assert "2026-10-17 09:15:00 UTC" in text
        assert "2 news items, 2 tariff-related" in text
        assert "Steel   [~] CAUTIOUS   4.0/10  (1 news)" in text
        assert "CAUTION: Steel" in text
        assert "SAFE:    Energy, Pharma" in text
        assert "AVOID:   -" in text

    def test_history_section(self, small_catalog, fixed_now):
        report = assemble_report([], [], small_catalog, history_limit=1, now=fixed_now)
        text = format_console(report, use_emoji=False)
        assert "HISTORICAL CONTEXT:" in text
        assert "2019-05-10  E3 (I3)" in text
