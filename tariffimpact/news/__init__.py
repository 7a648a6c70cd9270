"""News ingestion module.

Modules:
    models: NewsItem record
    parse: Normalize raw items, tag country and tariff keywords
    pull: Fetch raw items from RSS/Atom feeds
    source: News sources and safe fetching
"""

from tariffimpact.news.models import NewsItem
from tariffimpact.news.parse import normalize_news_item, normalize_news_items
from tariffimpact.news.source import (
    JsonlNewsSource,
    NewsSource,
    RssNewsSource,
    StaticNewsSource,
    UpstreamUnavailableError,
    build_news_source,
    fetch_news_safely,
)

__all__ = [
    "NewsItem",
    "normalize_news_item",
    "normalize_news_items",
    "NewsSource",
    "StaticNewsSource",
    "JsonlNewsSource",
    "RssNewsSource",
    "UpstreamUnavailableError",
    "build_news_source",
    "fetch_news_safely",
]
