"""News item data model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict


@dataclass(frozen=True)
class NewsItem:
    """Normalized news item.

    ``keywords`` holds the tariff keywords found in the item when it was
    normalized; scoring re-matches against the catalog and does not rely
    on it.
    """

    title: str
    description: str
    source: str
    published_at: datetime
    country: str = "GLOBAL"
    keywords: frozenset[str] = field(default_factory=frozenset)

    @property
    def text(self) -> str:
        """Lower-cased title and description used for keyword matching."""
        return f"{self.title} {self.description}".lower()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "source": self.source,
            "published_at": self.published_at.isoformat(),
            "country": self.country,
            "keywords": sorted(self.keywords),
        }
