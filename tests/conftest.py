"""Pytest configuration and fixtures."""

from collections.abc import Callable, Generator
from datetime import datetime, timezone
from pathlib import Path

import pytest

from tariffimpact.catalog import SectorCatalog, load_catalog, parse_catalog, reset_catalog
from tariffimpact.config import DEFAULT_CATALOG_PATH, reset_config
from tariffimpact.logging_setup import reset_logging
from tariffimpact.news.models import NewsItem

FIXED_NOW = datetime(2026, 10, 17, 9, 15, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_globals(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """Reset global state and keep tests away from real credentials and paths."""
    for key in ("TELEGRAM_BOT_TOKEN", "TELEGRAM_CHAT_ID", "TARIFF_CATALOG_PATH", "NEWS_SOURCE"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("REPORTS_DIR", str(tmp_path / "reports"))
    reset_config()
    reset_logging()
    reset_catalog()
    yield
    reset_config()
    reset_logging()
    reset_catalog()


@pytest.fixture
def catalog() -> SectorCatalog:
    """The packaged default catalog."""
    return load_catalog(DEFAULT_CATALOG_PATH)


@pytest.fixture
def small_catalog() -> SectorCatalog:
    """Three-sector catalog with one sector per vulnerability tier."""
    return parse_catalog(
        {
            "sectors": [
                {"name": "Steel", "vulnerability": "HIGH", "stocks": ["X"], "keywords": ["steel"]},
                {"name": "Energy", "vulnerability": "MEDIUM", "stocks": ["XOM"], "keywords": ["oil"]},
                {"name": "Pharma", "vulnerability": "LOW", "stocks": ["PFE"], "keywords": ["drug"]},
            ],
            "tariff_keywords": ["tariff", "trade war"],
            "historical_events": [
                {"date": "2019-05-10", "event": "E3", "impact": "I3", "sector": "Multiple", "severity": 9},
                {"date": "2018-07-06", "event": "E2", "impact": "I2", "sector": "Multiple", "severity": 7},
                {"date": "2018-03-01", "event": "E1", "impact": "I1", "sector": "Steel", "severity": 8},
            ],
        }
    )


@pytest.fixture
def make_news() -> Callable[..., NewsItem]:
    """Factory for NewsItem with sensible defaults."""

    def _make(
        title: str,
        description: str = "",
        source: str = "test-wire",
        country: str = "US",
        published_at: datetime = FIXED_NOW,
    ) -> NewsItem:
        return NewsItem(
            title=title,
            description=description,
            source=source,
            published_at=published_at,
            country=country,
        )

    return _make


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW
