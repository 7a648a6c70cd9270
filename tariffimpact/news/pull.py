"""RSS feed fetching for news ingestion.

Fetches news from public RSS/Atom feeds without requiring API keys and
returns raw news dictionaries for normalization.
"""

from __future__ import annotations

import re
import time
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import Dict, Iterator, List, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from tariffimpact import __version__
from tariffimpact.logging_setup import get_logger
from tariffimpact.news.parse import clean_text

logger = get_logger("news.pull")

# Timeout for RSS requests (seconds)
REQUEST_TIMEOUT = 15

USER_AGENT = f"TariffImpactAnalyzer/{__version__} (RSS News Reader)"

ATOM_NS = "{http://www.w3.org/2005/Atom}"


def _parse_rss_date(date_str: str) -> Optional[datetime]:
    """Parse various RSS date formats to datetime."""
    if not date_str:
        return None

    formats = [
        "%a, %d %b %Y %H:%M:%S %z",  # RFC 822
        "%a, %d %b %Y %H:%M:%S GMT",
        "%Y-%m-%dT%H:%M:%S%z",  # ISO 8601
        "%Y-%m-%dT%H:%M:%SZ",
        "%Y-%m-%dT%H:%M:%S.%f%z",
        "%Y-%m-%dT%H:%M:%S.%fZ",
    ]

    date_str = re.sub(r"\s+", " ", date_str.strip())

    for fmt in formats:
        try:
            dt = datetime.strptime(date_str, fmt)
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
            return dt
        except ValueError:
            continue

    try:
        return parsedate_to_datetime(date_str)
    except (TypeError, ValueError):
        logger.debug("Could not parse date: %s", date_str)
        return None


def _get_text(element: Optional[ET.Element], default: str = "") -> str:
    """Safely get text from XML element."""
    if element is None:
        return default
    return element.text or default


def parse_feed(xml_content: str, source_url: str) -> Iterator[Dict]:
    """Parse RSS 2.0 or Atom feed XML into raw news dictionaries."""
    try:
        root = ET.fromstring(xml_content)
    except ET.ParseError as e:
        logger.warning("XML parse error for %s: %s", source_url, e)
        return

    parts = source_url.split("/")
    source_name = parts[2] if len(parts) > 2 else source_url

    atom_entries = root.findall(f".//{ATOM_NS}entry")
    if atom_entries:
        for entry in atom_entries:
            summary = _get_text(entry.find(f"{ATOM_NS}summary")) or _get_text(
                entry.find(f"{ATOM_NS}content")
            )
            published = _get_text(entry.find(f"{ATOM_NS}published")) or _get_text(
                entry.find(f"{ATOM_NS}updated")
            )
            dt = _parse_rss_date(published) or datetime.now(timezone.utc)

            yield {
                "source": source_name,
                "title": clean_text(_get_text(entry.find(f"{ATOM_NS}title"))),
                "description": clean_text(summary)[:1000],
                "published_at": dt.isoformat(),
            }
        return

    for item in root.findall(".//item"):
        dt = _parse_rss_date(_get_text(item.find("pubDate"))) or datetime.now(timezone.utc)
        yield {
            "source": source_name,
            "title": clean_text(_get_text(item.find("title"))),
            "description": clean_text(_get_text(item.find("description")))[:1000],
            "published_at": dt.isoformat(),
        }


def fetch_single_feed(url: str, timeout: int = REQUEST_TIMEOUT) -> List[Dict]:
    """Fetch and parse a single RSS feed.

    Raises:
        OSError: On HTTP, network or timeout errors (URLError is an OSError).
    """
    req = Request(url, headers={"User-Agent": USER_AGENT})
    with urlopen(req, timeout=timeout) as response:
        content = response.read().decode("utf-8", errors="replace")

    items = [item for item in parse_feed(content, url) if item["title"]]
    logger.info("Fetched %d items from %s", len(items), url)
    return items


def load_sources(sources_path: Path) -> List[str]:
    """Load RSS source URLs from file, skipping blanks and comments."""
    urls: List[str] = []

    if not sources_path.exists():
        logger.warning("Sources file not found: %s", sources_path)
        return urls

    with open(sources_path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#"):
                urls.append(line)

    return urls


def fetch_rss_items(
    urls: List[str],
    timeout: int = REQUEST_TIMEOUT,
    delay_between_requests: float = 1.0,
) -> tuple[List[Dict], int]:
    """Fetch all feeds, skipping the ones that fail.

    Returns:
        Tuple of (raw items, number of feeds that failed).
    """
    all_items: List[Dict] = []
    failures = 0

    for i, url in enumerate(urls):
        try:
            all_items.extend(fetch_single_feed(url, timeout=timeout))
        except HTTPError as e:
            failures += 1
            logger.warning("HTTP error fetching %s: %s", url, e.code)
        except URLError as e:
            failures += 1
            logger.warning("URL error fetching %s: %s", url, e.reason)
        except (TimeoutError, OSError) as e:
            failures += 1
            logger.warning("Error fetching %s: %s", url, e)

        # Rate limiting
        if i < len(urls) - 1:
            time.sleep(delay_between_requests)

    return all_items, failures
