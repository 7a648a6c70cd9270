"""Sector catalog loading and validation.

The catalog is static configuration: sectors with their tickers, domain
keywords and tariff vulnerability tier, the global tariff keyword list,
and a curated list of historical tariff events. It is loaded once from
YAML and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Iterator

import yaml

from tariffimpact.config import DEFAULT_CATALOG_PATH, get_config
from tariffimpact.logging_setup import get_logger

logger = get_logger("catalog")


class CatalogError(Exception):
    """Raised when the sector catalog file is missing or malformed."""

    pass


class UnknownSectorError(ValueError):
    """Raised when a sector name is not present in the catalog."""

    def __init__(self, name: str, known: list[str] | None = None) -> None:
        self.name = name
        self.known = known or []
        message = f"Unknown sector '{name}'"
        if self.known:
            message += f". Known sectors: {', '.join(self.known)}"
        super().__init__(message)


class Vulnerability(str, Enum):
    """Structural exposure of a sector to tariff policy."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


@dataclass(frozen=True)
class Sector:
    """A named grouping of tickers sharing a tariff-exposure profile."""

    name: str
    stocks: tuple[str, ...]
    keywords: frozenset[str]
    vulnerability: Vulnerability


@dataclass(frozen=True)
class HistoricalEvent:
    """Past tariff event used as narrative context."""

    date: str
    event: str
    impact: str
    sector: str
    severity: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "event": self.event,
            "impact": self.impact,
            "sector": self.sector,
            "severity": self.severity,
        }


@dataclass(frozen=True)
class SectorCatalog:
    """Immutable catalog of sectors, tariff keywords and historical events."""

    sectors: tuple[Sector, ...]
    tariff_keywords: tuple[str, ...]
    historical_events: tuple[HistoricalEvent, ...]

    def __iter__(self) -> Iterator[Sector]:
        return iter(self.sectors)

    def __len__(self) -> int:
        return len(self.sectors)

    def __contains__(self, name: object) -> bool:
        return any(s.name == name for s in self.sectors)

    @property
    def names(self) -> list[str]:
        return [s.name for s in self.sectors]

    def get(self, name: str) -> Sector:
        """Look up a sector by name.

        Exact match wins; otherwise a case-insensitive match is tried.

        Raises:
            UnknownSectorError: If no sector matches.
        """
        for sector in self.sectors:
            if sector.name == name:
                return sector
        lowered = name.strip().lower()
        for sector in self.sectors:
            if sector.name.lower() == lowered:
                return sector
        raise UnknownSectorError(name, self.names)


def _require(mapping: dict[str, Any], key: str, where: str) -> Any:
    if key not in mapping or mapping[key] in (None, ""):
        raise CatalogError(f"{where}: missing required field '{key}'")
    return mapping[key]


def _parse_sector(raw: Any, index: int) -> Sector:
    where = f"sectors[{index}]"
    if not isinstance(raw, dict):
        raise CatalogError(f"{where}: expected a mapping, got {type(raw).__name__}")

    name = str(_require(raw, "name", where)).strip()
    vulnerability_raw = str(_require(raw, "vulnerability", where)).upper()
    try:
        vulnerability = Vulnerability(vulnerability_raw)
    except ValueError as e:
        raise CatalogError(
            f"{where} ({name}): invalid vulnerability '{vulnerability_raw}'. "
            f"Must be one of: {[v.value for v in Vulnerability]}"
        ) from e

    stocks = raw.get("stocks") or []
    keywords = _require(raw, "keywords", where)
    if not isinstance(stocks, list) or not isinstance(keywords, list):
        raise CatalogError(f"{where} ({name}): 'stocks' and 'keywords' must be lists")

    cleaned_keywords = frozenset(str(k).strip().lower() for k in keywords if str(k).strip())
    if not cleaned_keywords:
        raise CatalogError(f"{where} ({name}): at least one keyword is required")

    return Sector(
        name=name,
        stocks=tuple(str(s).strip().upper() for s in stocks),
        keywords=cleaned_keywords,
        vulnerability=vulnerability,
    )


def _parse_event(raw: Any, index: int) -> HistoricalEvent:
    where = f"historical_events[{index}]"
    if not isinstance(raw, dict):
        raise CatalogError(f"{where}: expected a mapping, got {type(raw).__name__}")

    try:
        severity = int(_require(raw, "severity", where))
    except (TypeError, ValueError) as e:
        raise CatalogError(f"{where}: severity must be an integer") from e
    if not 1 <= severity <= 10:
        raise CatalogError(f"{where}: severity {severity} outside 1-10")

    return HistoricalEvent(
        date=str(_require(raw, "date", where)),
        event=str(_require(raw, "event", where)),
        impact=str(raw.get("impact", "")),
        sector=str(raw.get("sector", "Multiple")),
        severity=severity,
    )


def parse_catalog(data: Any) -> SectorCatalog:
    """Validate raw catalog data and build a SectorCatalog.

    Raises:
        CatalogError: If any part of the catalog is malformed.
    """
    if not isinstance(data, dict):
        raise CatalogError("Catalog root must be a mapping")

    raw_sectors = data.get("sectors")
    if not isinstance(raw_sectors, list) or not raw_sectors:
        raise CatalogError("Catalog must define a non-empty 'sectors' list")

    sectors = [_parse_sector(raw, i) for i, raw in enumerate(raw_sectors)]

    seen: set[str] = set()
    for sector in sectors:
        key = sector.name.lower()
        if key in seen:
            raise CatalogError(f"Duplicate sector name: {sector.name}")
        seen.add(key)

    raw_keywords = data.get("tariff_keywords")
    if not isinstance(raw_keywords, list):
        raise CatalogError("Catalog must define a 'tariff_keywords' list")
    tariff_keywords = tuple(str(k).strip().lower() for k in raw_keywords if str(k).strip())
    if not tariff_keywords:
        raise CatalogError("'tariff_keywords' must contain at least one keyword")

    raw_events = data.get("historical_events") or []
    if not isinstance(raw_events, list):
        raise CatalogError("'historical_events' must be a list")
    events = tuple(_parse_event(raw, i) for i, raw in enumerate(raw_events))

    return SectorCatalog(
        sectors=tuple(sectors),
        tariff_keywords=tariff_keywords,
        historical_events=events,
    )


def load_catalog(path: Path | None = None) -> SectorCatalog:
    """Load and validate a catalog YAML file.

    Args:
        path: Catalog path. Defaults to the configured catalog path.

    Raises:
        CatalogError: If the file is missing, unreadable or invalid.
    """
    if path is None:
        path = get_config().paths.catalog_path
    path = Path(path)

    if not path.exists():
        raise CatalogError(f"Catalog file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise CatalogError(f"Invalid YAML in catalog {path}: {e}") from e

    catalog = parse_catalog(data)
    logger.debug(
        "Loaded catalog %s: %d sectors, %d tariff keywords, %d events",
        path,
        len(catalog.sectors),
        len(catalog.tariff_keywords),
        len(catalog.historical_events),
    )
    return catalog


_default_catalog: SectorCatalog | None = None


def get_catalog() -> SectorCatalog:
    """Get the process-wide catalog, loading it on first use."""
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = load_catalog()
    return _default_catalog


def reset_catalog() -> None:
    """Reset the cached catalog (useful for testing)."""
    global _default_catalog
    _default_catalog = None


__all__ = [
    "CatalogError",
    "DEFAULT_CATALOG_PATH",
    "HistoricalEvent",
    "Sector",
    "SectorCatalog",
    "UnknownSectorError",
    "Vulnerability",
    "get_catalog",
    "load_catalog",
    "parse_catalog",
    "reset_catalog",
]
