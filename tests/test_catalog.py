"""Tests for sector catalog loading and validation."""

import copy
from pathlib import Path

import pytest
import yaml

from tariffimpact.catalog import (
    CatalogError,
    UnknownSectorError,
    Vulnerability,
    get_catalog,
    load_catalog,
    parse_catalog,
    reset_catalog,
)

VALID = {
    "sectors": [
        {"name": "Steel", "vulnerability": "high", "stocks": ["x"], "keywords": ["Steel", " "]},
    ],
    "tariff_keywords": ["Tariff"],
    "historical_events": [
        {"date": "2018-03-01", "event": "Steel tariffs", "severity": 8},
    ],
}


def _with(**overrides):
    data = copy.deepcopy(VALID)
    data.update(overrides)
    return data


class TestDefaultCatalog:
    """Tests for the packaged catalog."""

    def test_sectors_and_tiers(self, catalog) -> None:
        """Packaged catalog holds the seven tracked sectors."""
        assert catalog.names == [
            "Technology",
            "Manufacturing",
            "Agriculture",
            "Automotive",
            "Energy",
            "Retail",
            "Pharmaceuticals",
        ]
        assert catalog.get("Agriculture").vulnerability == Vulnerability.HIGH
        assert catalog.get("Energy").vulnerability == Vulnerability.MEDIUM
        assert catalog.get("Pharmaceuticals").vulnerability == Vulnerability.LOW

    def test_keywords_lowercased(self, catalog) -> None:
        """All keywords are stored lower-case."""
        for sector in catalog:
            assert all(k == k.lower() for k in sector.keywords)
        assert "tariff" in catalog.tariff_keywords

    def test_events_newest_first(self, catalog) -> None:
        """Historical events are ordered newest first."""
        dates = [e.date for e in catalog.historical_events]
        assert dates == sorted(dates, reverse=True)
        assert all(1 <= e.severity <= 10 for e in catalog.historical_events)

    def test_get_catalog_cached(self) -> None:
        """get_catalog loads once until reset."""
        first = get_catalog()
        assert get_catalog() is first
        reset_catalog()
        assert get_catalog() is not first


class TestLookup:
    """Tests for sector lookup."""

    def test_contains_is_exact(self, small_catalog) -> None:
        assert "Steel" in small_catalog
        assert "steel" not in small_catalog

    def test_unknown_lists_known_names(self, small_catalog) -> None:
        with pytest.raises(UnknownSectorError) as exc_info:
            small_catalog.get("Crypto")
        assert exc_info.value.known == ["Steel", "Energy", "Pharma"]
        assert "Known sectors: Steel, Energy, Pharma" in str(exc_info.value)


class TestParseCatalog:
    """Tests for catalog validation."""

    def test_normalizes_values(self) -> None:
        """Vulnerability upper-cased, tickers upper-cased, blank keywords dropped."""
        catalog = parse_catalog(VALID)
        steel = catalog.get("Steel")
        assert steel.vulnerability == Vulnerability.HIGH
        assert steel.stocks == ("X",)
        assert steel.keywords == frozenset({"steel"})
        assert catalog.tariff_keywords == ("tariff",)
        assert catalog.historical_events[0].sector == "Multiple"

    @pytest.mark.parametrize(
        "data",
        [
            [],
            _with(sectors=[]),
            _with(tariff_keywords=[]),
            _with(tariff_keywords="tariff"),
            _with(sectors=[{"name": "A", "vulnerability": "EXTREME", "keywords": ["a"]}]),
            _with(sectors=[{"name": "A", "vulnerability": "LOW", "keywords": []}]),
            _with(sectors=[{"vulnerability": "LOW", "keywords": ["a"]}]),
            _with(
                sectors=[
                    {"name": "A", "vulnerability": "LOW", "keywords": ["a"]},
                    {"name": "a", "vulnerability": "LOW", "keywords": ["b"]},
                ]
            ),
            _with(historical_events=[{"date": "2020", "event": "x", "severity": 11}]),
            _with(historical_events=[{"date": "2020", "event": "x", "severity": "bad"}]),
        ],
    )
    def test_invalid_catalogs_rejected(self, data) -> None:
        """Malformed catalogs raise CatalogError."""
        with pytest.raises(CatalogError):
            parse_catalog(data)


class TestLoadCatalog:
    """Tests for loading from disk."""

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(CatalogError, match="not found"):
            load_catalog(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("sectors: [unclosed", encoding="utf-8")
        with pytest.raises(CatalogError, match="Invalid YAML"):
            load_catalog(path)

    def test_round_trip_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "catalog.yaml"
        path.write_text(yaml.safe_dump(VALID), encoding="utf-8")
        assert load_catalog(path).names == ["Steel"]

    def test_configured_path_used(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without an explicit path the configured path is loaded."""
        path = tmp_path / "catalog.yaml"
        path.write_text(yaml.safe_dump(VALID), encoding="utf-8")
        monkeypatch.setenv("TARIFF_CATALOG_PATH", str(path))
        from tariffimpact.config import reset_config

        reset_config()
        assert load_catalog().names == ["Steel"]
