"""Tests for news sources."""

import json

import pytest

from tariffimpact.config import NewsConfig
from tariffimpact.news import source as source_module
from tariffimpact.news.source import (
    SAMPLE_NEWS,
    JsonlNewsSource,
    RssNewsSource,
    StaticNewsSource,
    UpstreamUnavailableError,
    build_news_source,
    fetch_news_safely,
)


def _news_config(tmp_path, source="static"):
    return NewsConfig(
        source=source,
        news_file=tmp_path / "news.jsonl",
        rss_sources=tmp_path / "rss.txt",
        request_timeout=5,
    )


class TestStaticNewsSource:
    """Tests for the in-memory source."""

    def test_sample_news(self, catalog):
        items = StaticNewsSource(catalog).fetch()
        assert len(items) == len(SAMPLE_NEWS)
        assert all(item.published_at.tzinfo is not None for item in items)

    def test_fetch_returns_copy(self, small_catalog):
        source = StaticNewsSource(small_catalog, [{"title": "steel tariff"}])
        first = source.fetch()
        first.clear()
        assert len(source.fetch()) == 1

    def test_sample_scores(self, catalog):
        """Sample news exercises every tier except the top one."""
        from tariffimpact.analysis.scorer import score_all

        results = {r.sector: r.impact_score for r in score_all(StaticNewsSource(catalog).fetch(), catalog)}
        assert results["Agriculture"] == 4.0
        assert results["Pharmaceuticals"] == 0.0


class TestJsonlNewsSource:
    """Tests for JSONL file input."""

    def test_reads_lines_skipping_invalid(self, tmp_path, small_catalog):
        path = tmp_path / "news.jsonl"
        path.write_text(
            json.dumps({"title": "Steel tariff", "source": "a"})
            + "\n\nnot json\n"
            + json.dumps({"title": "Oil tariff", "source": "b"})
            + "\n",
            encoding="utf-8",
        )
        items = JsonlNewsSource(path, small_catalog).fetch()
        assert [i.title for i in items] == ["Steel tariff", "Oil tariff"]
        assert items[0].keywords == frozenset({"tariff"})

    def test_missing_file_unavailable(self, tmp_path, small_catalog):
        with pytest.raises(UpstreamUnavailableError):
            JsonlNewsSource(tmp_path / "missing.jsonl", small_catalog).fetch()


class TestRssNewsSource:
    """Tests for the RSS source."""

    def test_no_urls(self, tmp_path, small_catalog):
        with pytest.raises(UpstreamUnavailableError, match="No RSS URLs"):
            RssNewsSource(tmp_path / "none.txt", small_catalog).fetch()

    def test_all_feeds_failed(self, tmp_path, small_catalog, monkeypatch):
        sources = tmp_path / "rss.txt"
        sources.write_text("https://a.example\nhttps://b.example\n", encoding="utf-8")
        monkeypatch.setattr(source_module, "fetch_rss_items", lambda urls, **kw: ([], len(urls)))

        with pytest.raises(UpstreamUnavailableError, match="All 2"):
            RssNewsSource(sources, small_catalog).fetch()

    def test_partial_success(self, tmp_path, small_catalog, monkeypatch):
        sources = tmp_path / "rss.txt"
        sources.write_text("https://a.example\nhttps://b.example\n", encoding="utf-8")
        raw = [{"source": "a.example", "title": "Steel tariff", "description": "", "published_at": ""}]
        monkeypatch.setattr(source_module, "fetch_rss_items", lambda urls, **kw: (raw, 1))

        items = RssNewsSource(sources, small_catalog).fetch()
        assert [i.title for i in items] == ["Steel tariff"]


class TestFetchNewsSafely:
    """Tests for degraded fetching."""

    def test_unavailable_becomes_empty(self, tmp_path, small_catalog, caplog):
        source = JsonlNewsSource(tmp_path / "missing.jsonl", small_catalog)
        assert fetch_news_safely(source) == []
        assert "continuing with no news" in caplog.text

    def test_os_error_becomes_empty(self):
        class Broken:
            def fetch(self):
                raise OSError("disk gone")

        assert fetch_news_safely(Broken()) == []

    def test_other_errors_propagate(self):
        class Buggy:
            def fetch(self):
                raise KeyError("bug")

        with pytest.raises(KeyError):
            fetch_news_safely(Buggy())


class TestBuildNewsSource:
    """Tests for source selection."""

    def test_explicit_paths_win(self, tmp_path, small_catalog):
        config = _news_config(tmp_path, source="rss")
        source = build_news_source(small_catalog, config, news_file=tmp_path / "x.jsonl")
        assert isinstance(source, JsonlNewsSource)

        source = build_news_source(small_catalog, _news_config(tmp_path), rss_sources=tmp_path / "r.txt")
        assert isinstance(source, RssNewsSource)

    @pytest.mark.parametrize(
        "name,expected",
        [("static", StaticNewsSource), ("jsonl", JsonlNewsSource), ("rss", RssNewsSource), ("bogus", StaticNewsSource)],
    )
    def test_configured_source(self, tmp_path, small_catalog, name, expected):
        assert isinstance(build_news_source(small_catalog, _news_config(tmp_path, name)), expected)


class TestMalformedNewsFile:
    """Bad records in a news file degrade instead of crashing the run."""

    def test_non_object_lines_skipped(self, tmp_path, small_catalog, caplog):
        path = tmp_path / "news.jsonl"
        path.write_text('["x"]\n42\n' + json.dumps({"title": "Steel tariff"}) + "\n", encoding="utf-8")

        items = JsonlNewsSource(path, small_catalog).fetch()

        assert [i.title for i in items] == ["Steel tariff"]
        assert "Skipping non-object line" in caplog.text

    def test_non_string_fields_coerced(self, tmp_path, small_catalog):
        path = tmp_path / "news.jsonl"
        path.write_text(json.dumps({"title": 123, "description": ["steel", "tariff"]}) + "\n", encoding="utf-8")

        items = JsonlNewsSource(path, small_catalog).fetch()

        assert items[0].title == "123"
        assert "steel" in items[0].description

    def test_invalid_utf8_is_unavailable(self, tmp_path, small_catalog):
        path = tmp_path / "news.jsonl"
        path.write_bytes(b'{"title": "steel tariff \xff"}\n')

        with pytest.raises(UpstreamUnavailableError, match="not valid UTF-8"):
            JsonlNewsSource(path, small_catalog).fetch()
        assert fetch_news_safely(JsonlNewsSource(path, small_catalog)) == []

    @pytest.mark.parametrize(
        "payload",
        [b'["x"]\n', b'{"title": 123}\n', b'{"title": "\xff"}\n'],
    )
    def test_run_completes(self, tmp_path, small_catalog, payload):
        """A full analysis run over a malformed file still yields a report."""
        from tariffimpact.pipeline import run_analysis

        path = tmp_path / "news.jsonl"
        path.write_bytes(payload)

        report = run_analysis(small_catalog, JsonlNewsSource(path, small_catalog))

        assert report.summary.sectors_analyzed == 3
        assert all(r.impact_score == 0.0 for r in report.sector_results)
