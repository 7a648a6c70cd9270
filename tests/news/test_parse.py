"""Tests for news normalization."""

from datetime import datetime, timezone

from tariffimpact.news.parse import (
    _compute_hash,
    clean_text,
    detect_country,
    extract_tariff_keywords,
    normalize_news_item,
    normalize_news_items,
)

KEYWORDS = ("tariff", "tariffs", "trade war", "import tax")


class TestCleanText:
    """Tests for markup stripping."""

    def test_strips_tags_and_entities(self):
        assert clean_text("<p>Steel &amp; aluminum</p>\n<b>tariffs</b>") == "Steel & aluminum tariffs"

    def test_empty(self):
        assert clean_text(None) == ""
        assert clean_text("") == ""


class TestDetectCountry:
    """Tests for country tagging."""

    def test_first_pattern_wins(self):
        """China is checked before the US."""
        assert detect_country("China tariffs on US agriculture") == "CHINA"

    def test_us(self):
        assert detect_country("United States lawmakers debate import tax") == "US"

    def test_word_boundaries(self):
        """'eu' inside another word does not match the EU."""
        assert detect_country("Museum reopens") == "GLOBAL"


class TestExtractTariffKeywords:
    """Tests for keyword extraction."""

    def test_substring_case_insensitive(self):
        found = extract_tariff_keywords("TRADE WAR and Tariffs", KEYWORDS)
        assert found == ["tariff", "tariffs", "trade war"]

    def test_none(self):
        assert extract_tariff_keywords("Quarterly earnings beat", KEYWORDS) == []


class TestNormalizeNewsItem:
    """Tests for single-item normalization."""

    def test_full_item(self):
        """Explicit fields are kept and keywords recorded."""
        item = normalize_news_item(
            {
                "title": "Steel tariffs rise",
                "description": "<i>25% tariff</i>",
                "source": "wire",
                "published_at": "2026-10-16T13:00:00Z",
                "country": "us",
            },
            KEYWORDS,
        )
        assert item.title == "Steel tariffs rise"
        assert item.description == "25% tariff"
        assert item.country == "US"
        assert item.published_at == datetime(2026, 10, 16, 13, 0, tzinfo=timezone.utc)
        assert item.keywords == frozenset({"tariff", "tariffs"})

    def test_rss_field_names(self):
        """'summary' and 'published_utc' are accepted."""
        item = normalize_news_item(
            {
                "title": "Canada weighs duties",
                "summary": "Import tax on energy",
                "published_utc": "2026-10-16T08:00:00-04:00",
            },
            KEYWORDS,
        )
        assert item.description == "Import tax on energy"
        assert item.published_at == datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)
        assert item.country == "CANADA"
        assert item.source == "unknown"

    def test_naive_and_invalid_timestamps(self):
        """Naive times are taken as UTC; unparseable ones become now."""
        naive = normalize_news_item({"title": "x", "published_at": "2026-01-01T00:00:00"}, KEYWORDS)
        assert naive.published_at.tzinfo is not None

        bad = normalize_news_item({"title": "x", "published_at": "yesterday"}, KEYWORDS)
        assert bad.published_at.tzinfo is not None


class TestNormalizeNewsItems:
    """Tests for batch normalization."""

    def test_drops_untitled_and_duplicates(self):
        raws = [
            {"title": "Tariff news", "source": "a"},
            {"title": "TARIFF NEWS", "source": "A"},
            {"title": "", "source": "a"},
            {"title": "Tariff news", "source": "b"},
        ]
        items = normalize_news_items(raws, KEYWORDS)
        assert [(i.title, i.source) for i in items] == [("Tariff news", "a"), ("Tariff news", "b")]

    def test_keep_duplicates(self):
        raws = [{"title": "Same", "source": "a"}, {"title": "Same", "source": "a"}]
        assert len(normalize_news_items(raws, KEYWORDS, deduplicate=False)) == 2

    def test_hash_is_case_insensitive(self):
        assert _compute_hash("Wire", "Title") == _compute_hash("wire", "TITLE")

    def test_non_object_items_skipped(self):
        raws = [["x"], "text", None, {"title": "Tariff news", "source": "a"}]
        items = normalize_news_items(raws, KEYWORDS)
        assert [i.title for i in items] == ["Tariff news"]

    def test_non_string_title_coerced(self):
        item = normalize_news_item({"title": 123, "description": 4.5}, KEYWORDS)
        assert item.title == "123"
        assert item.description == "4.5"
