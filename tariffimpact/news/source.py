"""News sources.

A news source supplies the list of NewsItem analysed by one run. Sources
raise UpstreamUnavailableError when they cannot deliver;
``fetch_news_safely`` turns that into an empty list so a run can proceed.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence

from tariffimpact.catalog import SectorCatalog
from tariffimpact.config import NewsConfig
from tariffimpact.logging_setup import get_logger
from tariffimpact.news.models import NewsItem
from tariffimpact.news.parse import normalize_news_items
from tariffimpact.news.pull import REQUEST_TIMEOUT, fetch_rss_items, load_sources

logger = get_logger("news.source")


class UpstreamUnavailableError(Exception):
    """Raised when a news source cannot supply news."""

    pass


class NewsSource(Protocol):
    """Anything that can produce a list of news items."""

    def fetch(self) -> List[NewsItem]: ...


SAMPLE_NEWS: List[Dict] = [
    {
        "title": "Trump announces new tariffs on steel",
        "description": "25% tariff on steel imports",
        "source": "sample-wire",
        "published_at": "2026-10-16T13:00:00+00:00",
        "country": "US",
    },
    {
        "title": "China responds to tariffs",
        "description": "Retaliatory tariffs on US goods",
        "source": "sample-wire",
        "published_at": "2026-10-16T14:30:00+00:00",
        "country": "CHINA",
    },
    {
        "title": "China tariffs on US agriculture",
        "description": "25% tariff on soybean imports",
        "source": "sample-wire",
        "published_at": "2026-10-16T15:10:00+00:00",
        "country": "CHINA",
    },
    {
        "title": "EU weighs tariffs on Chinese electric vehicles",
        "description": "Automakers brace for higher import duties",
        "source": "sample-wire",
        "published_at": "2026-10-16T16:45:00+00:00",
        "country": "EU",
    },
    {
        "title": "Chipmakers warn of trade war fallout",
        "description": "Semiconductor supply chains face new export curbs and tariffs",
        "source": "sample-wire",
        "published_at": "2026-10-16T18:20:00+00:00",
        "country": "US",
    },
    {
        "title": "Canada considers retaliatory duties on US energy",
        "description": "Crude oil and natural gas exports could face a levy",
        "source": "sample-wire",
        "published_at": "2026-10-17T07:05:00+00:00",
        "country": "CANADA",
    },
    {
        "title": "Retailers stock up ahead of tariff deadline",
        "description": "Apparel and toys imports surge before new import tax",
        "source": "sample-wire",
        "published_at": "2026-10-17T08:40:00+00:00",
        "country": "US",
    },
    {
        "title": "Pharmaceutical makers see limited exposure",
        "description": "Drugmakers expect little change from the latest policy round",
        "source": "sample-wire",
        "published_at": "2026-10-17T09:15:00+00:00",
        "country": "GLOBAL",
    },
]


class StaticNewsSource:
    """In-memory news list; the built-in sample by default."""

    def __init__(self, catalog: SectorCatalog, raw_items: Optional[Sequence[Dict]] = None) -> None:
        self._items = normalize_news_items(
            SAMPLE_NEWS if raw_items is None else raw_items,
            catalog.tariff_keywords,
        )

    def fetch(self) -> List[NewsItem]:
        return list(self._items)


class JsonlNewsSource:
    """Raw news items read from a JSONL file, one object per line."""

    def __init__(self, path: Path, catalog: SectorCatalog) -> None:
        self.path = Path(path)
        self.catalog = catalog

    def fetch(self) -> List[NewsItem]:
        if not self.path.exists():
            raise UpstreamUnavailableError(f"News file not found: {self.path}")

        raw_items: List[Dict] = []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        record = json.loads(line)
                    except json.JSONDecodeError:
                        logger.warning("Invalid JSON line in %s: %s", self.path, line[:100])
                        continue
                    if not isinstance(record, dict):
                        logger.warning("Skipping non-object line in %s: %s", self.path, line[:100])
                        continue
                    raw_items.append(record)
        except UnicodeDecodeError as e:
            raise UpstreamUnavailableError(f"News file {self.path} is not valid UTF-8: {e}") from e

        items = normalize_news_items(raw_items, self.catalog.tariff_keywords)
        logger.info("Loaded %d news items from %s", len(items), self.path)
        return items


class RssNewsSource:
    """News fetched from the RSS/Atom feeds listed in a sources file."""

    def __init__(
        self,
        sources_path: Path,
        catalog: SectorCatalog,
        timeout: int = REQUEST_TIMEOUT,
        delay_between_requests: float = 1.0,
    ) -> None:
        self.sources_path = Path(sources_path)
        self.catalog = catalog
        self.timeout = timeout
        self.delay_between_requests = delay_between_requests

    def fetch(self) -> List[NewsItem]:
        urls = load_sources(self.sources_path)
        if not urls:
            raise UpstreamUnavailableError(f"No RSS URLs loaded from {self.sources_path}")

        raw_items, failures = fetch_rss_items(
            urls, timeout=self.timeout, delay_between_requests=self.delay_between_requests
        )
        if failures == len(urls):
            raise UpstreamUnavailableError(f"All {failures} RSS feeds failed")

        return normalize_news_items(raw_items, self.catalog.tariff_keywords)


def fetch_news_safely(source: NewsSource) -> List[NewsItem]:
    """Fetch news, degrading to an empty list when the source is unavailable."""
    try:
        return source.fetch()
    except UpstreamUnavailableError as e:
        logger.warning("News source unavailable, continuing with no news: %s", e)
    except OSError as e:
        logger.warning("News source I/O error, continuing with no news: %s", e)
    return []


def build_news_source(
    catalog: SectorCatalog,
    config: NewsConfig,
    news_file: Optional[Path] = None,
    rss_sources: Optional[Path] = None,
) -> NewsSource:
    """Build the news source selected by explicit paths or configuration."""
    if news_file is not None:
        return JsonlNewsSource(news_file, catalog)
    if rss_sources is not None:
        return RssNewsSource(rss_sources, catalog, timeout=config.request_timeout)

    if config.source == "jsonl":
        return JsonlNewsSource(config.news_file, catalog)
    if config.source == "rss":
        return RssNewsSource(config.rss_sources, catalog, timeout=config.request_timeout)
    if config.source != "static":
        logger.warning("Unknown NEWS_SOURCE '%s', using built-in sample news", config.source)
    return StaticNewsSource(catalog)
