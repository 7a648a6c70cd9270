"""FastAPI application for the tariff impact dashboard.

Read-only JSON endpoints over a fresh analysis per request, plus the
static dashboard page that consumes them.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from tariffimpact import __version__
from tariffimpact.analysis.formatting import alert_results
from tariffimpact.analysis.report import Report, report_to_dict
from tariffimpact.analysis.thresholds import DEFAULT_THRESHOLDS, RiskThresholds
from tariffimpact.catalog import SectorCatalog, UnknownSectorError
from tariffimpact.logging_setup import get_logger
from tariffimpact.news.source import NewsSource
from tariffimpact.pipeline import run_analysis

logger = get_logger("web.app")

STATIC_DIR = Path(__file__).resolve().parent / "static"

router = APIRouter()


def _state(request: Request) -> Any:
    return request.app.state


def _analyze(request: Request, sectors: list[str] | None = None) -> Report:
    state = _state(request)
    return run_analysis(
        state.catalog,
        state.source,
        sectors=sectors,
        history_limit=state.history_limit,
        thresholds=state.thresholds,
    )


@router.get("/health")
async def health_check() -> dict[str, Any]:
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/analysis")
def get_analysis(request: Request) -> dict[str, Any]:
    """Compact sector scores for the dashboard."""
    report = _analyze(request)
    return {
        "timestamp": report.timestamp.isoformat(),
        "sectors": [
            {
                "name": r.sector,
                "score": r.impact_score,
                "vulnerability": r.vulnerability.value,
                "sentiment": r.sentiment.value,
                "risk": r.recommendation.risk.value,
            }
            for r in report.sector_results
        ],
        "overallRisk": report.summary.overall_risk.value,
    }


@router.get("/report")
def get_report(request: Request) -> dict[str, Any]:
    """Full report document."""
    return report_to_dict(_analyze(request))


@router.get("/alerts")
def get_alerts(request: Request) -> list[dict[str, Any]]:
    """Sectors at or above the alert threshold."""
    report = _analyze(request)
    alerts = []
    for i, r in enumerate(alert_results(report, _state(request).thresholds), 1):
        headline = r.relevant_news[0] if r.relevant_news else None
        alerts.append({
            "id": i,
            "sector": r.sector,
            "severity": round(r.impact_score),
            "message": headline.title if headline else r.recommendation.reason,
            "time": headline.published_at.isoformat() if headline else report.timestamp.isoformat(),
        })
    return alerts


@router.get("/history")
def get_history(request: Request) -> list[dict[str, Any]]:
    return [e.to_dict() for e in _state(request).catalog.historical_events]


@router.get("/sectors")
def list_sectors(request: Request) -> list[dict[str, Any]]:
    return [
        {
            "name": s.name,
            "vulnerability": s.vulnerability.value,
            "stocks": list(s.stocks),
            "keywords": sorted(s.keywords),
        }
        for s in _state(request).catalog
    ]


@router.get("/sectors/{name}")
def get_sector(name: str, request: Request) -> dict[str, Any]:
    """One sector's current result."""
    try:
        report = _analyze(request, sectors=[name])
    except UnknownSectorError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return report.sector_results[0].to_dict()


def create_app(
    catalog: SectorCatalog,
    source: NewsSource,
    history_limit: int = 5,
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
) -> FastAPI:
    """Build the dashboard application around a catalog and news source."""
    app = FastAPI(
        title="Tariff Impact Analyzer",
        description="Tariff impact scores by market sector",
        version=__version__,
    )
    app.state.catalog = catalog
    app.state.source = source
    app.state.history_limit = history_limit
    app.state.thresholds = thresholds

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def dashboard() -> FileResponse:
        return FileResponse(STATIC_DIR / "index.html", media_type="text/html")

    logger.info("Dashboard app created with %d sectors", len(catalog))
    return app
