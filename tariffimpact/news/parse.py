"""News normalization.

Turns raw news dictionaries (from RSS, JSONL files or the built-in
sample) into immutable NewsItem records: strips markup, normalizes the
publication time to UTC, tags the country of origin and records the
tariff keywords present.
"""

from __future__ import annotations

import hashlib
import re
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Sequence, Set, Tuple

from tariffimpact.logging_setup import get_logger
from tariffimpact.news.models import NewsItem

logger = get_logger("news.parse")

# Ordered: the first country whose pattern matches wins
COUNTRY_PATTERNS: List[Tuple[str, str]] = [
    ("CHINA", r"\b(china|chinese|beijing)\b"),
    ("EU", r"\b(eu|european union|brussels|europe)\b"),
    ("CANADA", r"\b(canada|canadian|ottawa)\b"),
    ("MEXICO", r"\b(mexico|mexican)\b"),
    ("JAPAN", r"\b(japan|japanese|tokyo)\b"),
    ("INDIA", r"\b(india|indian|new delhi)\b"),
    ("US", r"\b(us|u\.s|usa|united states|america|american|washington|trump)\b"),
]

DEFAULT_COUNTRY = "GLOBAL"


def _compute_hash(source: str, title: str) -> str:
    """Compute content hash for deduplication."""
    content = f"{source}|{title}".lower()
    return hashlib.sha256(content.encode()).hexdigest()[:16]


def _normalize_timestamp(timestamp: object) -> datetime:
    """Normalize a timestamp (datetime or ISO string) to an aware UTC datetime."""
    if isinstance(timestamp, datetime):
        dt = timestamp
    else:
        try:
            dt = datetime.fromisoformat(str(timestamp).replace("Z", "+00:00"))
        except ValueError:
            return datetime.now(timezone.utc)

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def clean_text(text: object) -> str:
    """Strip HTML tags and normalize whitespace. Non-string values are stringified."""
    if text is None or text == "":
        return ""

    text = re.sub(r"<[^>]+>", " ", str(text))
    text = text.replace("&amp;", "&")
    text = text.replace("&lt;", "<")
    text = text.replace("&gt;", ">")
    text = text.replace("&quot;", '"')
    text = text.replace("&#39;", "'")
    text = text.replace("&nbsp;", " ")
    return re.sub(r"\s+", " ", text).strip()


def detect_country(text: str) -> str:
    """Detect the country a news text is about."""
    text_lower = text.lower()
    for country, pattern in COUNTRY_PATTERNS:
        if re.search(pattern, text_lower):
            return country
    return DEFAULT_COUNTRY


def extract_tariff_keywords(text: str, tariff_keywords: Iterable[str]) -> List[str]:
    """Return the tariff keywords contained in text (case-insensitive substring)."""
    text_lower = text.lower()
    return [k for k in tariff_keywords if k in text_lower]


def normalize_news_item(raw_item: Dict, tariff_keywords: Sequence[str]) -> NewsItem:
    """Normalize a single raw news dictionary.

    Accepts both ``description`` and the RSS-style ``summary`` field, and
    both ``published_at`` and ``published_utc``.
    """
    title = clean_text(raw_item.get("title", ""))
    description = clean_text(raw_item.get("description") or raw_item.get("summary", ""))
    source = str(raw_item.get("source") or "unknown")
    published = raw_item.get("published_at") or raw_item.get("published_utc") or ""

    combined_text = f"{title} {description}"
    country = str(raw_item.get("country") or detect_country(combined_text)).upper()

    return NewsItem(
        title=title,
        description=description,
        source=source,
        published_at=_normalize_timestamp(published),
        country=country,
        keywords=frozenset(extract_tariff_keywords(combined_text, tariff_keywords)),
    )


def normalize_news_items(
    raw_items: Iterable[Dict],
    tariff_keywords: Sequence[str],
    deduplicate: bool = True,
) -> List[NewsItem]:
    """Normalize raw news dictionaries, dropping untitled items and duplicates.

    Args:
        raw_items: Raw news dictionaries.
        tariff_keywords: Tariff keywords to record on each item.
        deduplicate: Whether to drop items with the same source and title.

    Returns:
        Normalized items in input order.
    """
    seen_hashes: Set[str] = set()
    items: List[NewsItem] = []
    dropped = 0

    for raw_item in raw_items:
        if not isinstance(raw_item, dict):
            logger.warning("Skipping news item that is not an object: %r", raw_item)
            dropped += 1
            continue
        item = normalize_news_item(raw_item, tariff_keywords)
        if not item.title:
            dropped += 1
            continue

        if deduplicate:
            content_hash = _compute_hash(item.source, item.title)
            if content_hash in seen_hashes:
                dropped += 1
                continue
            seen_hashes.add(content_hash)

        items.append(item)

    if dropped:
        logger.debug("Dropped %d untitled or duplicate news items", dropped)
    return items
